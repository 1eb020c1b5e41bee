import logging
from flask import Flask
from flask_cors import CORS
from flask_restful import Api
from .routes import init_routes

DEFAULT_CONFIG = {
    'MAX_CONTENT_LENGTH': 64 * 1024 * 1024,  # Largest accepted upload
    'MAX_ROWS': 1000,  # Largest page of rows returned per request
}


def create_app(config=None):
    app = Flask(__name__)
    app.config.update(DEFAULT_CONFIG)
    if config:
        app.config.update(config)

    CORS(app) # Enable CORS for frontend communication
    api = Api(app)

    # Initialize Routes
    init_routes(api)

    logging.getLogger('pmtables').setLevel(app.config.get('LOG_LEVEL', logging.WARNING))
    return app
