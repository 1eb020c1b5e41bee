"""
Readers - Format name to decoder dispatch
Single entry point used by the command line and the web service.
"""

import logging
from typing import Any, Callable, Dict, Optional
from .constants import FORMAT_FASTTRACK, FORMAT_P3, FORMAT_SURETRAK, FORMAT_TURBOPROJECT
from .exceptions import UnreadableContainerError, UnsupportedFormatError
from .fasttrack.data import FastTrackData
from .primavera.database import P3DatabaseReader, SureTrakDatabaseReader
from .turboproject.pep import PEPReader

logger = logging.getLogger(__name__)


def _read_fasttrack(path, project: Optional[str]) -> Dict[str, Any]:
    data = FastTrackData()
    data.process(path)
    return {table_type.name: table for table_type, table in data.tables.items()}


def _read_database(reader_class) -> Callable[[Any, Optional[str]], Dict[str, Any]]:
    def read(path, project: Optional[str]) -> Dict[str, Any]:
        if not project:
            names = reader_class.list_project_names(path)
            if not names:
                raise UnreadableContainerError(f"No project found in {path}")
            project = names[0]
            logger.info("Reading project %s", project)
        return reader_class().process(path, project)
    return read


def _read_turboproject(path, project: Optional[str]) -> Dict[str, Any]:
    return PEPReader().read(path)


READERS: Dict[str, Callable[[Any, Optional[str]], Dict[str, Any]]] = {
    FORMAT_FASTTRACK: _read_fasttrack,
    FORMAT_P3: _read_database(P3DatabaseReader),
    FORMAT_SURETRAK: _read_database(SureTrakDatabaseReader),
    FORMAT_TURBOPROJECT: _read_turboproject,
}


def read_tables(format_name: str, path, project: Optional[str] = None) -> Dict[str, Any]:
    """
    Decode the tables of a schedule

    Args:
        format_name: One of fasttrack, p3, suretrak, turboproject
        path: File (fasttrack, turboproject) or directory (p3, suretrak)
        project: Project name prefix for directory formats; the first
            project found is used when omitted

    Returns:
        Table name -> table; each table iterates over its rows

    Raises:
        UnsupportedFormatError: If the format name is not known
        UnreadableContainerError: If the input cannot be read
    """
    reader = READERS.get(format_name.lower())
    if reader is None:
        raise UnsupportedFormatError(f"Unsupported format '{format_name}'")
    return reader(path, project)
