import sys
import uuid
import logging
import datetime
import tempfile
import threading
from pathlib import Path
from typing import List, Dict, Any, Optional

# Ensure src is in path
# this file is at PROJECT_ROOT/server/models.py
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root / 'src'))

from pmtables.constants import FORMATS, FORMAT_P3, FORMAT_SURETRAK
from pmtables.exceptions import UnsupportedFormatError
from pmtables.readers import read_tables
from pmtables.types.value import to_json

logger = logging.getLogger(__name__)

# Formats whose tables are spread over several files in one directory
DIRECTORY_FORMATS = (FORMAT_P3, FORMAT_SURETRAK)


class DecodeManager:
    """Decodes uploaded schedules and keeps the results in memory"""

    def __init__(self):
        self.results: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def formats(self) -> List[Dict[str, Any]]:
        return [{'name': name, 'directory': name in DIRECTORY_FORMATS} for name in FORMATS]

    def decode(self, format_name: str, uploads: List[Any], project: Optional[str] = None) -> Dict[str, Any]:
        """
        Decode uploaded files and store the result

        Args:
            format_name: Registered format name
            uploads: Uploaded file objects exposing filename and save(); one
                file for single file formats, every table file for directory formats
            project: Project prefix for directory formats

        Returns:
            Summary of the stored result

        Raises:
            UnsupportedFormatError: If the format name is not known
            UnreadableContainerError: If the upload cannot be decoded
        """
        format_name = format_name.lower()
        if format_name not in FORMATS:
            raise UnsupportedFormatError(f"Unsupported format '{format_name}'")

        with tempfile.TemporaryDirectory(prefix='pmtables-') as workdir:
            paths = []
            for index, upload in enumerate(uploads):
                # Keep the base name only; table types come from file names
                name = Path(upload.filename or f'upload{index}').name
                path = Path(workdir) / name
                upload.save(str(path))
                paths.append(path)

            source = workdir if format_name in DIRECTORY_FORMATS else paths[0]
            tables = read_tables(format_name, source, project)

        result_id = str(uuid.uuid4())
        result = {
            'id': result_id,
            'format': format_name,
            'files': [p.name for p in paths],
            'created_at': datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
            'tables': {name: [to_json(row.map) for row in table] for name, table in tables.items()},
        }

        with self._lock:
            self.results[result_id] = result

        logger.info("Decoded %s upload %s into %d tables", format_name, result_id, len(tables))
        return self.summary(result_id)

    def summary(self, result_id: str) -> Optional[Dict[str, Any]]:
        result = self.results.get(result_id)
        if result is None:
            return None

        return {
            'id': result['id'],
            'format': result['format'],
            'files': result['files'],
            'created_at': result['created_at'],
            'tables': {name: len(rows) for name, rows in sorted(result['tables'].items())},
        }

    def get_rows(self, result_id: str, table_name: str, limit: int = 100, offset: int = 0) -> Optional[Dict[str, Any]]:
        """Page of rows from a stored table, None if the result or table is missing"""
        result = self.results.get(result_id)
        if result is None:
            return None

        rows = result['tables'].get(table_name.upper())
        if rows is None:
            return None

        return {
            'table': table_name.upper(),
            'total': len(rows),
            'offset': offset,
            'rows': rows[offset:offset + limit],
        }

    def delete(self, result_id: str) -> bool:
        with self._lock:
            return self.results.pop(result_id, None) is not None


decode_manager = DecodeManager()
