"""
PEP Module - Reads the tables of a TurboProject file
The file starts with a fixed header and a directory of named tables. Table
data follows as one block per table: a short header then fixed records.
"""

import logging
from typing import Dict, Iterator, Optional
from ..catalog.schema import ColumnDefinition, ColumnKind, TableDefinition
from ..constants import (PEP_HEADER_SIZE, PEP_DIRECTORY_ENTRY_SIZE, PEP_DIRECTORY_NAME_OFFSET,
                         PEP_TABLE_HEADER_SIZE, MAX_VALUE_SIZE)
from ..exceptions import UnexpectedStructureError, UnreadableContainerError
from ..model.row import MapRow
from ..model.table import Table
from ..storage.buffer import read_int, read_short, read_fixed_string
from ..storage.file_manager import FileManager
from ..types.value import TimeUnit

logger = logging.getLogger(__name__)

UNIQUE_ID = "UNIQUE_ID"
RAW_DATA = "DATA"


def _column(name: str, kind: ColumnKind, offset: int, length: int = 0) -> ColumnDefinition:
    return ColumnDefinition(name, kind, offset, length)


# Byte 0 of each record is a status byte, zero for an unused slot. The column
# offsets below have not been verified against real files; every row also
# keeps its raw record as DATA so callers can decode fields differently.
PEP_TABLES: Dict[str, TableDefinition] = {
    "NCALTAB": TableDefinition(0, 24, [
        _column("NAME", ColumnKind.STRING, 1, 8),
        _column("START", ColumnKind.PEP_START_DATE, 9),
        _column("BASE_CALENDAR_ID", ColumnKind.SHORT, 11),
        _column("FIRST_CALENDAR_EXCEPTION_ID", ColumnKind.SHORT, 13),
        _column("SUNDAY", ColumnKind.BOOLEAN, 17),
        _column("MONDAY", ColumnKind.BOOLEAN, 18),
        _column("TUESDAY", ColumnKind.BOOLEAN, 19),
        _column("WEDNESDAY", ColumnKind.BOOLEAN, 20),
        _column("THURSDAY", ColumnKind.BOOLEAN, 21),
        _column("FRIDAY", ColumnKind.BOOLEAN, 22),
        _column("SATURDAY", ColumnKind.BOOLEAN, 23),
    ]),
    "CALXTAB": TableDefinition(0, 6, [
        _column("NEXT_CALENDAR_EXCEPTION_ID", ColumnKind.SHORT, 1),
        _column("DATE", ColumnKind.PEP_START_DATE, 3),
        _column("WORKING", ColumnKind.BOOLEAN, 5),
    ]),
    "RTAB": TableDefinition(0, 99, [
        _column("ID", ColumnKind.SHORT, 1),
        _column("NAME", ColumnKind.STRING, 3, 20),
        _column("GROUP", ColumnKind.STRING, 23, 8),
        _column("UNIT", ColumnKind.STRING, 31, 8),
        _column("DESCRIPTION", ColumnKind.STRING, 39, 40),
        _column("PARENT_ID", ColumnKind.SHORT, 79),
        _column("RATE", ColumnKind.INT, 81),
        _column("POOL", ColumnKind.INT, 85),
        _column("PER_DAY", ColumnKind.INT, 89),
        _column("PRIORITY", ColumnKind.SHORT, 93),
        _column("PERIOD_DUR", ColumnKind.SHORT, 95),
        _column("EXPENSES_ONLY", ColumnKind.BOOLEAN, 97),
        _column("MODIFY_ON_INTEGRATE", ColumnKind.BOOLEAN, 98),
    ]),
    "CONTAB": TableDefinition(0, 8, [
        _column("TASK_ID_1", ColumnKind.SHORT, 1),
        _column("TASK_ID_2", ColumnKind.SHORT, 3),
        _column("TYPE", ColumnKind.RELATION_TYPE, 5),
        ColumnDefinition("LAG", ColumnKind.DURATION, 6, units=TimeUnit.DAYS),
    ]),
    "A1TAB": TableDefinition(0, 9, [
        _column("ORDER", ColumnKind.SHORT, 1),
        _column("NEXT_TASK_ID", ColumnKind.SHORT, 3),
        _column("PLANNED_START", ColumnKind.PEP_START_DATE, 5),
        _column("PLANNED_FINISH", ColumnKind.PEP_FINISH_DATE, 7),
    ]),
}


class PEPReader:
    """Decoded tables of one TurboProject file"""

    def __init__(self):
        self.tables: Dict[str, Table] = {}

    def read(self, path) -> Dict[str, Table]:
        """
        Read and decode a TurboProject file

        Raises:
            UnreadableContainerError: If the file is missing or truncated
        """
        return self.read_buffer(FileManager(path).read_bytes())

    def read_buffer(self, buffer: bytes) -> Dict[str, Table]:
        """Decode a TurboProject file already held in memory"""
        directory = list(self._read_directory(buffer))
        if not directory:
            return self.tables

        # Table blocks are contiguous from the first directory offset; the
        # final directory entry marks the end of the data.
        position = directory[0][0]
        for _, name in directory[:-1]:
            position = self._read_table(buffer, position, name)

        return self.tables

    def get_table(self, name: str) -> Table:
        """Table with the given name, empty when the file does not contain it"""
        table = self.tables.get(name.upper())
        if table is None:
            return Table(name.upper())
        return table

    def calendar_exceptions(self, first_id: Optional[int]) -> Iterator[MapRow]:
        """Follow the chain of calendar exceptions starting at first_id"""
        table = self.get_table("CALXTAB")
        seen = set()
        current_id = first_id
        while current_id and current_id not in seen:
            row = table.find(current_id)
            if row is None:
                break
            seen.add(current_id)
            yield row
            current_id = row.get_integer("NEXT_CALENDAR_EXCEPTION_ID")

    # --------------------------------------------------------------------
    # Container Layout
    # --------------------------------------------------------------------

    def _read_directory(self, buffer: bytes) -> Iterator[tuple]:
        offset = PEP_HEADER_SIZE
        while True:
            if offset + PEP_DIRECTORY_ENTRY_SIZE > len(buffer):
                raise UnreadableContainerError("Table directory extends beyond end of file")

            table_offset = read_int(buffer, offset)
            if table_offset == 0:
                return

            name = read_fixed_string(buffer, offset + PEP_DIRECTORY_NAME_OFFSET,
                                     PEP_DIRECTORY_ENTRY_SIZE - PEP_DIRECTORY_NAME_OFFSET)
            yield table_offset, name.upper()
            offset += PEP_DIRECTORY_ENTRY_SIZE

    def _read_table(self, buffer: bytes, position: int, name: str) -> int:
        if position + PEP_TABLE_HEADER_SIZE > len(buffer):
            raise UnreadableContainerError(f"Header of table {name} extends beyond end of file")

        header_length = read_short(buffer, position + 8)
        record_count = read_int(buffer, position + 10)
        record_length = read_int(buffer, position + 16)
        if record_count > MAX_VALUE_SIZE or record_length > MAX_VALUE_SIZE:
            raise UnreadableContainerError(f"Implausible layout for table {name}")

        position += max(header_length, PEP_TABLE_HEADER_SIZE)

        definition = PEP_TABLES.get(name)
        table = Table(name)
        for unique_id in range(1, record_count + 1):
            record = buffer[position:position + record_length]
            if len(record) != record_length:
                raise UnreadableContainerError(f"Record {unique_id} of table {name} is truncated")
            position += record_length
            self._read_row(table, definition, unique_id, record)

        self.tables[name] = table
        logger.info("Read %d rows from table %s", len(table), name)
        return position

    def _read_row(self, table: Table, definition: Optional[TableDefinition],
                  unique_id: int, record: bytes) -> None:
        if definition is None:
            table.add_row(UNIQUE_ID, {UNIQUE_ID: unique_id, RAW_DATA: bytes(record)})
            return

        if not record or record[0] == 0:
            return

        try:
            row = definition.read_row(0, record)
        except UnexpectedStructureError as e:
            logger.warning("Skipped record %d of table %s: %s", unique_id, table.name, e)
            return

        row[UNIQUE_ID] = unique_id
        row[RAW_DATA] = bytes(record)
        table.add_row(UNIQUE_ID, row)
