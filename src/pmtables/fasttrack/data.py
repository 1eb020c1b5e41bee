"""
FastTrack Data - Reads the tables held in a FastTrack schedule file
The file has no offset table. Parent blocks are found by signature; short
blocks name the table that following column blocks belong to.
"""

import logging
from typing import Dict, List, Optional, Set
from ..constants import (FASTTRACK_SCAN_START, FASTTRACK_PATTERN_MARGIN,
                         FASTTRACK_TABLE_BLOCK_LIMIT, FASTTRACK_TABLE_NAME_OFFSET,
                         PARENT_BLOCK_PATTERNS, TABLE_BLOCK_PATTERNS, CHILD_BLOCK_PREFIX)
from ..exceptions import UnexpectedStructureError
from ..storage.buffer import read_int, read_utf16, validate_size, time_unit, hexdump
from ..storage.file_manager import FileManager
from ..storage.scanner import scan_for_patterns, scan_child_blocks, block_boundaries
from ..types.value import TimeUnit
from .columns import ColumnKind, FastTrackColumn, decode_column
from .fields import FastTrackField, FastTrackTableType, REQUIRED_TABLES
from .table import FastTrackTable

logger = logging.getLogger(__name__)


class FastTrackData:
    """Decoded tables of one FastTrack file"""

    def __init__(self):
        self.buffer: bytes = b''
        self.tables: Dict[FastTrackTableType, FastTrackTable] = {}
        self.columns: List[FastTrackColumn] = []
        self._current_table: Optional[FastTrackTable] = None
        self._current_fields: Set[FastTrackField] = set()
        self._duration_time_unit: Optional[TimeUnit] = None
        self._work_time_unit: Optional[TimeUnit] = None

    @property
    def duration_time_unit(self) -> TimeUnit:
        return self._duration_time_unit or TimeUnit.DAYS

    @property
    def work_time_unit(self) -> TimeUnit:
        return self._work_time_unit or TimeUnit.HOURS

    def process(self, path) -> None:
        """
        Read and decode a FastTrack file

        Args:
            path: File to read

        Raises:
            UnreadableContainerError: If the file cannot be read in full
        """
        self.process_buffer(FileManager(path).read_bytes())

    def process_buffer(self, buffer: bytes) -> None:
        """Decode a FastTrack file already held in memory"""
        self.buffer = buffer

        offsets = scan_for_patterns(buffer, FASTTRACK_SCAN_START,
                                    len(buffer) - FASTTRACK_PATTERN_MARGIN, PARENT_BLOCK_PATTERNS)

        for block_index, (start, end) in enumerate(block_boundaries(offsets, 0, len(buffer))):
            self._read_block(block_index, start, end - start)

    def get_table(self, table_type: FastTrackTableType) -> FastTrackTable:
        """Table of the requested type, empty when the file does not contain it"""
        table = self.tables.get(table_type)
        if table is None:
            return FastTrackTable(table_type, self)
        return table

    # --------------------------------------------------------------------
    # Blocks
    # --------------------------------------------------------------------

    def _read_block(self, block_index: int, start: int, length: int) -> None:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Block %d: offset %d, length %d\n%s", block_index, start, length,
                         hexdump(self.buffer, start, length, ascii=True))

        if length < FASTTRACK_TABLE_BLOCK_LIMIT:
            self._read_table_block(start, length)
        else:
            self._read_column_block(start, length)

    def _read_table_block(self, start: int, length: int) -> None:
        matches = scan_for_patterns(self.buffer, start, start + length - FASTTRACK_PATTERN_MARGIN,
                                    TABLE_BLOCK_PATTERNS)
        if not matches:
            return

        offset = matches[0] + FASTTRACK_TABLE_NAME_OFFSET
        try:
            name_length = read_int(self.buffer, offset)
            validate_size(name_length)
            name = read_utf16(self.buffer, offset + 4, name_length).upper()
        except UnexpectedStructureError as e:
            logger.warning("Aborted table block - unexpected structure at offset %d: %s", start, e)
            self._current_table = None
            return

        table_type = REQUIRED_TABLES.get(name)
        if table_type is None:
            logger.debug("Ignoring table %s", name)
            self._current_table = None
        else:
            logger.debug("Reading table %s", name)
            self._current_table = FastTrackTable(table_type, self)
            self.tables[table_type] = self._current_table
        self._current_fields.clear()

    def _read_column_block(self, start: int, length: int) -> None:
        end = start + length
        child_starts = [offset - CHILD_BLOCK_PREFIX
                        for offset in scan_child_blocks(self.buffer, start, end - FASTTRACK_PATTERN_MARGIN)]
        if not child_starts:
            return

        # Bytes ahead of the first child block belong to no column
        for child_start, child_end in block_boundaries(child_starts[1:], child_starts[0], end):
            try:
                self._read_column(child_start, child_end - child_start)
            except UnexpectedStructureError as e:
                logger.warning("Aborted column - unexpected structure at offset %d: %s", child_start, e)

    def _read_column(self, start: int, length: int) -> None:
        if self._current_table is None:
            return

        debug = logger.isEnabledFor(logging.DEBUG)
        if debug:
            logger.debug("Column data at offset %d\n%s", start, hexdump(self.buffer, start, length, ascii=True))
        column = decode_column(self._current_table.table_type, self.buffer, start, length)
        self.columns.append(column)

        # Keep the first column seen for each known field
        if column.field is None or column.field in self._current_fields:
            return

        self._current_fields.add(column.field)
        self._current_table.add_column(column)
        self._update_time_units(column)
        if debug:
            logger.debug("%s", column.dump())

    def _update_time_units(self, column: FastTrackColumn) -> None:
        if column.kind != ColumnKind.DURATION or column.time_unit_value == 1:
            return

        if self._duration_time_unit is None and "Duration" in column.name:
            self._duration_time_unit = time_unit(column.time_unit_value)
        if self._work_time_unit is None and "Work" in column.name:
            self._work_time_unit = time_unit(column.time_unit_value)
