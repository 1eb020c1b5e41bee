"""
Table Reader Module - Decodes one Btrieve table file into a Table
P3 files are paged: each page carries a magic number and a run of fixed
records. SureTrak files are a short header followed by fixed records.
"""

import logging
from typing import Dict, Any
from ..catalog.schema import TableDefinition
from ..constants import (P3_PAGE_HEADER_SIZE, ROW_VERSION, SURETRAK_HEADER_SIZE,
                         SURETRAK_RECORD_COUNT_SIZE)
from ..exceptions import UnexpectedStructureError
from ..model.table import Table
from ..storage.buffer import read_byte, read_short
from ..storage.file_manager import FileManager, iter_pages, iter_records
from ..storage.page import BtrievePage

logger = logging.getLogger(__name__)


class P3TableReader:
    """Reads a paged P3 table file"""

    def __init__(self, definition: TableDefinition):
        self.definition = definition

    def read(self, path, table: Table) -> None:
        """
        Read every page of a table file into table

        Raises:
            UnreadableContainerError: If the file is missing or ends mid-page
        """
        self.read_buffer(FileManager(path).read_bytes(), table)

    def read_buffer(self, buffer: bytes, table: Table) -> None:
        for page in iter_pages(buffer, self.definition.page_size):
            self.read_page(page, table)

    def read_page(self, page: BtrievePage, table: Table) -> None:
        """Add the live records of a data page; other pages are ignored"""
        if not page.is_valid():
            logger.debug("Skipping page %d with magic 0x%04X", page.page_id, page.magic)
            return

        definition = self.definition
        for index in page.records(definition.record_size, P3_PAGE_HEADER_SIZE):
            row_version = read_short(page.data, index)
            if row_version == 0:
                continue

            row: Dict[str, Any] = {ROW_VERSION: row_version}
            try:
                row.update(definition.read_row(index, page.data))
            except UnexpectedStructureError as e:
                logger.warning("Skipped record at page %d offset %d: %s", page.page_id, index, e)
                continue

            if definition.row_validator is None or definition.row_validator(row):
                table.add_row(definition.primary_key, row)


class SureTrakTableReader:
    """Reads a SureTrak table file"""

    def __init__(self, definition: TableDefinition):
        self.definition = definition

    def read(self, path, table: Table) -> None:
        """
        Read every record of a table file into table

        Raises:
            UnreadableContainerError: If the file is missing or ends mid-record
        """
        self.read_buffer(FileManager(path).read_bytes(), table)

    def read_buffer(self, buffer: bytes, table: Table) -> None:
        # Header text followed by a record count
        header_size = SURETRAK_HEADER_SIZE + SURETRAK_RECORD_COUNT_SIZE
        for index, record in iter_records(buffer, header_size, self.definition.record_size):
            if read_byte(record, 0) == 0:
                self.read_record(index, record, table)

    def read_record(self, index: int, record: bytes, table: Table) -> None:
        # A zero value marks a deleted record
        if read_short(record, 0) == 0:
            return

        try:
            row = self.definition.read_row(0, record)
        except UnexpectedStructureError as e:
            logger.warning("Skipped record %d: %s", index, e)
            return

        if self.definition.row_validator is None or self.definition.row_validator(row):
            table.add_row(self.definition.primary_key, row)
