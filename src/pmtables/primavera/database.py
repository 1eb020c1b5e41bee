"""
Database Module - Reads every table of a Primavera project directory
A directory may hold several projects; each project's files share a name
prefix and the rest of the file name identifies the table.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional
from ..catalog.catalog import Catalog
from ..constants import FORMAT_P3, FORMAT_SURETRAK
from ..exceptions import UnreadableContainerError
from ..model.table import Table
from .table_reader import P3TableReader, SureTrakTableReader

logger = logging.getLogger(__name__)


def _project_names(directory, suffix: str) -> List[str]:
    directory = Path(directory)
    if not directory.is_dir():
        raise UnreadableContainerError(f"Not a directory: {directory}")

    names = set()
    for path in directory.iterdir():
        if path.is_file() and path.name.upper().endswith(suffix):
            names.add(path.name[:-len(suffix)])
    return sorted(names)


class DatabaseReader:
    """Shared directory scan; subclasses say how a file name maps to a table type"""

    FORMAT = ""
    TABLE_READER = P3TableReader

    def __init__(self):
        self.catalog = Catalog(self.FORMAT)

    def table_type(self, file_name: str) -> Optional[str]:
        raise NotImplementedError

    def process(self, directory, project: str) -> Dict[str, Table]:
        """
        Read all tables belonging to a project

        Args:
            directory: Directory holding the database files
            project: File name prefix identifying the project

        Returns:
            Table type -> decoded table, for each known table type present

        Raises:
            UnreadableContainerError: If the directory or a table file cannot be read
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise UnreadableContainerError(f"Not a directory: {directory}")

        prefix = project.upper()
        tables: Dict[str, Table] = {}

        for path in sorted(directory.iterdir()):
            name = path.name.upper()
            if not path.is_file() or not name.startswith(prefix):
                continue

            table_type = self.table_type(name)
            definition = self.catalog.get_table(table_type) if table_type else None
            if definition is None:
                continue

            table = Table(table_type)
            self.TABLE_READER(definition).read(path, table)
            tables[table_type] = table
            logger.info("Read %d rows from %s table %s", len(table), self.FORMAT, table_type)

        return tables


class P3DatabaseReader(DatabaseReader):
    """P3: the table type is the three characters before the extension"""

    FORMAT = FORMAT_P3
    TABLE_READER = P3TableReader

    def table_type(self, file_name: str) -> Optional[str]:
        dot = file_name.rfind('.')
        if dot < 3:
            return None
        return file_name[dot - 3:dot]

    @staticmethod
    def list_project_names(directory) -> List[str]:
        """Prefixes of the projects in a directory, found through their STR tables"""
        return _project_names(directory, "STR.P3")


class SureTrakDatabaseReader(DatabaseReader):
    """SureTrak: the table type is the file extension"""

    FORMAT = FORMAT_SURETRAK
    TABLE_READER = SureTrakTableReader

    def table_type(self, file_name: str) -> Optional[str]:
        dot = file_name.rfind('.')
        if dot == -1:
            return None
        return file_name[dot + 1:]

    @staticmethod
    def list_project_names(directory) -> List[str]:
        """Prefixes of the projects in a directory, found through their DIR tables"""
        return _project_names(directory, ".DIR")
