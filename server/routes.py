from flask import request, current_app
from flask_restful import Resource, Api
from pmtables.exceptions import UnreadableContainerError, UnsupportedFormatError
from .models import decode_manager, DIRECTORY_FORMATS


def init_routes(api: Api):
    # Formats
    api.add_resource(FormatList, '/api/formats')

    # Decoding
    api.add_resource(Decode, '/api/decode/<string:format_name>')

    # Results
    api.add_resource(Result, '/api/results/<string:result_id>')
    api.add_resource(ResultTable, '/api/results/<string:result_id>/tables/<string:table_name>')


class FormatList(Resource):
    def get(self):
        return decode_manager.formats()


class Decode(Resource):
    def post(self, format_name):
        """Decode an uploaded file, or every table file of a directory format"""
        uploads = request.files.getlist('files') or request.files.getlist('file')
        if not uploads:
            return {'error': 'No file provided'}, 400

        if len(uploads) > 1 and format_name.lower() not in DIRECTORY_FORMATS:
            return {'error': f"Format '{format_name}' takes a single file"}, 400

        try:
            summary = decode_manager.decode(format_name, uploads, request.form.get('project'))
        except UnsupportedFormatError as e:
            return {'error': str(e)}, 400
        except UnreadableContainerError as e:
            return {'error': str(e)}, 422

        return summary, 201


class Result(Resource):
    def get(self, result_id):
        summary = decode_manager.summary(result_id)
        if summary is None:
            return {'error': 'Result not found'}, 404
        return summary

    def delete(self, result_id):
        if not decode_manager.delete(result_id):
            return {'error': 'Result not found'}, 404
        return {'message': 'Result deleted'}


class ResultTable(Resource):
    def get(self, result_id, table_name):
        max_rows = current_app.config['MAX_ROWS']
        try:
            limit = max(min(int(request.args.get('limit', max_rows)), max_rows), 0)
            offset = max(int(request.args.get('offset', 0)), 0)
        except ValueError:
            return {'error': 'limit and offset must be integers'}, 400

        page = decode_manager.get_rows(result_id, table_name, limit, offset)
        if page is None:
            return {'error': 'Table not found'}, 404
        return page
