"""
File Manager Module - Scoped access to table and container files
Files are read whole; every handle is closed before the data is decoded.
"""

import logging
from pathlib import Path
from typing import Iterator, Tuple
from .page import BtrievePage
from ..exceptions import UnreadableContainerError

logger = logging.getLogger(__name__)


class FileManager:
    """Reads a single file as bytes, pages or records"""

    def __init__(self, path):
        """
        Initialize file manager

        Args:
            path: Path to the file
        """
        self.path = Path(path)

    def read_bytes(self) -> bytes:
        """
        Read the whole file

        Returns:
            File contents

        Raises:
            UnreadableContainerError: If the file is missing or the read is short
        """
        try:
            expected = self.path.stat().st_size
            with open(self.path, 'rb') as f:
                data = f.read()
        except FileNotFoundError:
            raise UnreadableContainerError(f"File not found: {self.path}")
        except OSError as e:
            raise UnreadableContainerError(f"Cannot read {self.path}: {e}")

        if len(data) != expected:
            raise UnreadableContainerError(
                f"Read {len(data)} bytes from {self.path}, expected {expected}")

        logger.debug("Read %d bytes from %s", len(data), self.path)
        return data

    def iter_pages(self, page_size: int) -> Iterator[BtrievePage]:
        """Yield the file as consecutive pages of page_size bytes"""
        yield from iter_pages(self.read_bytes(), page_size, str(self.path))

    def iter_records(self, header_size: int, record_size: int) -> Iterator[Tuple[int, bytes]]:
        """Yield (index, record) for each fixed-length record after the header"""
        yield from iter_records(self.read_bytes(), header_size, record_size, str(self.path))


def iter_pages(data: bytes, page_size: int, source: str = "buffer") -> Iterator[BtrievePage]:
    """
    Split data into pages

    Raises:
        UnreadableContainerError: If the final page is incomplete
    """
    if page_size <= 0:
        raise UnreadableContainerError(f"Invalid page size {page_size} for {source}")

    page_id = 0
    for offset in range(0, len(data), page_size):
        page = data[offset:offset + page_size]
        if len(page) != page_size:
            raise UnreadableContainerError(
                f"Page {page_id} of {source} is truncated ({len(page)} of {page_size} bytes)")
        yield BtrievePage(page_id, page)
        page_id += 1


def iter_records(data: bytes, header_size: int, record_size: int,
                 source: str = "buffer") -> Iterator[Tuple[int, bytes]]:
    """
    Split data following a header into fixed-length records

    Raises:
        UnreadableContainerError: If the header or the final record is incomplete
    """
    if record_size <= 0:
        raise UnreadableContainerError(f"Invalid record size {record_size} for {source}")
    if len(data) < header_size:
        raise UnreadableContainerError(f"Header of {source} is truncated")

    index = 0
    for offset in range(header_size, len(data), record_size):
        record = data[offset:offset + record_size]
        if len(record) != record_size:
            raise UnreadableContainerError(
                f"Record {index} of {source} is truncated ({len(record)} of {record_size} bytes)")
        yield index, record
        index += 1
