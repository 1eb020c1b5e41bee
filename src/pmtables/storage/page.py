"""
Page Module - Fixed-size Btrieve page
A P3 table file is a sequence of equal-size pages. Data pages carry a magic
number at offset 0 and hold fixed-length records after a short header.
"""

from typing import Iterator
from ..constants import P3_PAGE_MAGIC, P3_PAGE_HEADER_SIZE
from ..exceptions import UnexpectedStructureError
from .buffer import read_short


class BtrievePage:
    """One page of a Btrieve table file with typed data access"""

    def __init__(self, page_id: int, data: bytes):
        """
        Initialize a page over data read from disk

        Args:
            page_id: Zero-based position of the page in the file
            data: Page bytes
        """
        self.page_id = page_id
        self.data = data

    @property
    def page_size(self) -> int:
        return len(self.data)

    @property
    def magic(self) -> int:
        """2-byte page type marker at offset 0"""
        return read_short(self.data, 0)

    def is_valid(self, magic: int = P3_PAGE_MAGIC) -> bool:
        """
        Check whether this page holds table records

        Returns:
            True if the page magic matches, False otherwise
        """
        return len(self.data) >= 2 and self.magic == magic

    def records(self, record_size: int, header_size: int = P3_PAGE_HEADER_SIZE) -> Iterator[int]:
        """
        Offsets of each record slot that fits entirely within the page

        Args:
            record_size: Length of one record
            header_size: Bytes preceding the first record
        """
        if record_size <= 0:
            raise UnexpectedStructureError(f"Invalid record size {record_size}")

        index = header_size
        while index + record_size <= self.page_size:
            yield index
            index += record_size

    def __repr__(self) -> str:
        return f"BtrievePage(id={self.page_id}, size={self.page_size}, magic=0x{self.magic:04X})"
