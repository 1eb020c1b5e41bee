"""
FastTrack Blocks - Block header and shared sub-block readers
Readers take a buffer and an offset and return the decoded value together
with the offset immediately after the bytes they consumed.
"""

from dataclasses import dataclass, field
from typing import List, Tuple
from ..constants import BLOCK_HEADER_SIZE, MIN_NAME_LENGTH, MAX_NAME_LENGTH
from ..exceptions import UnexpectedStructureError
from ..storage.buffer import (read_int, read_short, read_utf16, validate_size,
                              validate_offset, hexdump)


@dataclass
class BlockHeader:
    """Metadata preceding the data of every column block"""
    header: bytes
    name: str
    column_type: int
    flags: int
    skip: bytes = field(repr=False)
    offset: int  # First byte after the header

    def dump(self) -> str:
        lines = [
            "  [BlockHeader",
            "    Header: " + hexdump(self.header, 0, len(self.header)).rstrip('\n'),
            f"    Name: {self.name}",
            f"    Type: {self.column_type}",
            f"    Flags: {self.flags}",
            "    Skip:",
            hexdump(self.skip, 0, len(self.skip), prefix="      ").rstrip('\n'),
            "  ]",
        ]
        return '\n'.join(line for line in lines if line)


def read_block_header(buffer: bytes, offset: int, post_header_skip: int) -> BlockHeader:
    """
    Read the header at the start of a column block

    Layout: 8 opaque bytes, 4-byte name length, UTF-16LE name, 2-byte column
    type, 2-byte flags, then post_header_skip bytes specific to the column kind.

    Raises:
        UnexpectedStructureError: If the name length is outside [1, 255] or
            the header runs past the end of the buffer
    """
    validate_offset(buffer, offset + BLOCK_HEADER_SIZE - 1)
    header = bytes(buffer[offset:offset + BLOCK_HEADER_SIZE])
    offset += BLOCK_HEADER_SIZE

    name_length = read_int(buffer, offset)
    offset += 4

    if name_length < MIN_NAME_LENGTH or name_length > MAX_NAME_LENGTH:
        raise UnexpectedStructureError(f"Column name length {name_length} out of range")

    name = read_utf16(buffer, offset, name_length)
    offset += name_length

    column_type = read_short(buffer, offset)
    offset += 2

    flags = read_short(buffer, offset)
    offset += 2

    if offset + post_header_skip > len(buffer):
        raise UnexpectedStructureError("Block header extends beyond buffer")
    skip = bytes(buffer[offset:offset + post_header_skip])
    offset += post_header_skip

    return BlockHeader(header, name, column_type, flags, skip, offset)


def read_strings_with_length(buffer: bytes, offset: int, inclusive: bool) -> Tuple[List[str], int]:
    """
    Read a counted list of length-prefixed UTF-16LE strings

    Args:
        buffer: Block data
        offset: Position of the 4-byte item count
        inclusive: Read count + 1 items (the block stores an extra default)

    Returns:
        (strings, offset after the last string)
    """
    number_of_items = read_int(buffer, offset)
    offset += 4

    validate_size(number_of_items)

    if inclusive:
        number_of_items += 1

    items = []
    for _ in range(number_of_items):
        # Two unknown bytes precede each length
        offset += 2
        item_length = read_int(buffer, offset)
        offset += 4
        validate_size(item_length)
        items.append(read_utf16(buffer, offset, item_length))
        offset += item_length

    return items, offset


def read_fixed_size_items(buffer: bytes, offset: int) -> Tuple[List[bytes], int]:
    """
    Read a counted list of equal-length raw items

    Layout: 2 bytes skipped, 4-byte item count, 2-byte item length, 4 bytes
    skipped, then count items of item length bytes.

    Returns:
        (items, offset after the last item)
    """
    # Offset to data
    offset += 2

    number_of_items = read_int(buffer, offset)
    offset += 4

    validate_size(number_of_items)

    item_length = read_short(buffer, offset)
    offset += 2

    validate_size(item_length)

    # Offset to end
    offset += 4

    items = []
    for _ in range(number_of_items):
        if offset + item_length > len(buffer):
            raise UnexpectedStructureError(f"Item at offset {offset} extends beyond buffer")
        items.append(bytes(buffer[offset:offset + item_length]))
        offset += item_length

    return items, offset
