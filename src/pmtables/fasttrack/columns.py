"""
FastTrack Columns - Typed decoding of self-describing column blocks
The first byte of each child block selects a column kind. Every kind has a
fixed number of bytes to skip after the block header and a reader that
decodes the values and returns the offset after them.
"""

import datetime
from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NamedTuple, Optional
from ..constants import (FASTTRACK_EPOCH, STRING_DATA_MARKER, DATE_DATA_MARKER,
                         QUARTERS_TIME_UNIT)
from ..storage.buffer import (read_byte, read_short, read_int, read_double, read_utf16,
                              validate_size, skip_to_next_matching_short, hexdump, offset_date)
from .blocks import BlockHeader, read_block_header, read_strings_with_length, read_fixed_size_items
from .fields import FastTrackField, FastTrackTableType, field_for_code


class ColumnKind(Enum):
    """Value layouts found in FastTrack column blocks"""
    STRING = 1
    BOOLEAN = 2
    ENUM = 3
    DATE = 4
    TIME = 5
    DURATION = 6
    DOUBLE = 7
    PERCENT = 8
    NUMBER = 9
    SHORT = 10
    INTEGER = 11
    CALENDAR = 12
    IDENTIFIER = 13
    RELATION = 14
    ASSIGNMENT = 15
    UNKNOWN = 16


# Class code (first byte of a child block) -> column kind
COLUMN_KINDS: Dict[int, ColumnKind] = {
    0x6E: ColumnKind.DATE,
    0x6F: ColumnKind.TIME,
    0x71: ColumnKind.DURATION,
    0x46: ColumnKind.PERCENT,
    0x6C: ColumnKind.SHORT,
    0x73: ColumnKind.SHORT,
    0x6D: ColumnKind.IDENTIFIER,
    0x70: ColumnKind.NUMBER,
    0x5C: ColumnKind.CALENDAR,
    0x4B: ColumnKind.INTEGER,
    0x49: ColumnKind.ASSIGNMENT,
    0x59: ColumnKind.ENUM,
    0x53: ColumnKind.BOOLEAN,
    0x5B: ColumnKind.DOUBLE,
    0x4A: ColumnKind.DOUBLE,
    0x54: ColumnKind.DOUBLE,
    0x57: ColumnKind.RELATION,
    0x58: ColumnKind.RELATION,
    0x68: ColumnKind.STRING,
    0x69: ColumnKind.STRING,
}


def column_kind(code: int) -> ColumnKind:
    return COLUMN_KINDS.get(code, ColumnKind.UNKNOWN)


@dataclass
class ColumnData:
    """Result of decoding the data section of one column block"""
    values: List[Any]
    offset: int
    options: Optional[List[str]] = None
    time_unit_value: Optional[int] = None


# --------------------------------------------------------------------
# Data Readers
# --------------------------------------------------------------------

def read_string_data(buffer: bytes, offset: int) -> ColumnData:
    # Unknown
    offset += 6

    # A non-zero value here means an optional structure precedes the strings
    structure_flags = read_int(buffer, offset)
    offset += 4

    if structure_flags == 0:
        offset += 10
    else:
        offset = skip_to_next_matching_short(buffer, offset, STRING_DATA_MARKER)

    number_of_items = read_int(buffer, offset)
    validate_size(number_of_items)
    offset += 4

    # Offset to data
    offset += 4

    block_offsets = []
    for _ in range(number_of_items + 1):
        block_offsets.append(read_int(buffer, offset))
        offset += 4

    # Data size
    offset += 4

    values = []
    for index in range(number_of_items):
        item_length = block_offsets[index + 1] - block_offsets[index]
        validate_size(item_length)
        values.append(read_utf16(buffer, offset, item_length))
        offset += item_length

    return ColumnData(values, offset)


def read_boolean_data(buffer: bytes, offset: int) -> ColumnData:
    options, offset = read_strings_with_length(buffer, offset, False)
    offset = skip_to_next_matching_short(buffer, offset, STRING_DATA_MARKER)

    number_of_items = read_int(buffer, offset) + 1
    validate_size(number_of_items)
    offset += 4

    # Data length
    offset += 4

    # Offsets to data
    offset += number_of_items * 4

    # Data length
    offset += 4

    values = []
    for _ in range(number_of_items):
        value = read_short(buffer, offset)
        offset += 2
        values.append(None if value == 2 else value == 1)

    return ColumnData(values, offset, options=options)


def read_enum_data(buffer: bytes, offset: int) -> ColumnData:
    options, offset = read_strings_with_length(buffer, offset, False)

    # Skip bytes
    offset += 4

    raw_data, offset = read_fixed_size_items(buffer, offset)

    values = []
    for raw_value in raw_data:
        option_index = read_short(raw_value, 0) - 1 if len(raw_value) >= 2 else -1
        if 0 <= option_index < len(options):
            values.append(options[option_index])
        else:
            values.append(None)

    return ColumnData(values, offset, options=options)


def _skip_to_date_items(buffer: bytes, offset: int) -> int:
    # Unknown
    offset += 6

    # Structure flags, as for strings
    offset += 4

    # An optional block of text may precede the binary items; locate them by
    # the marker that starts the fixed size items block.
    return skip_to_next_matching_short(buffer, offset, DATE_DATA_MARKER) - 2


def read_date_data(buffer: bytes, offset: int) -> ColumnData:
    offset = _skip_to_date_items(buffer, offset)
    raw_data, offset = read_fixed_size_items(buffer, offset)

    values = []
    for raw_value in raw_data:
        result = None
        if len(raw_value) >= 4:
            days = read_int(raw_value, 0)
            if 0 < days < 0x80000000:
                result = offset_date(FASTTRACK_EPOCH, days=days)
        values.append(result)

    return ColumnData(values, offset)


def read_time_data(buffer: bytes, offset: int) -> ColumnData:
    raw_data, offset = read_fixed_size_items(buffer, offset)

    values = []
    for raw_value in raw_data:
        result = None
        if len(raw_value) > 1:
            minutes = read_short(raw_value, 0) % (24 * 60)
            result = datetime.time(minutes // 60, minutes % 60)
        values.append(result)

    return ColumnData(values, offset)


def read_duration_data(buffer: bytes, offset: int) -> ColumnData:
    raw_data, offset = read_fixed_size_items(buffer, offset)
    time_unit_value = read_byte(buffer, offset)

    values = []
    for raw_value in raw_data:
        value = read_double(raw_value, 0) if len(raw_value) >= 8 else None
        if value is not None and time_unit_value == QUARTERS_TIME_UNIT:
            value = value * 3
        values.append(value)

    return ColumnData(values, offset, time_unit_value=time_unit_value)


def read_double_data(buffer: bytes, offset: int) -> ColumnData:
    number_of_items = read_int(buffer, offset)
    validate_size(number_of_items)
    offset += 4

    values = []
    for _ in range(number_of_items):
        values.append(read_double(buffer, offset))
        offset += 8

    return ColumnData(values, offset)


def read_percent_data(buffer: bytes, offset: int) -> ColumnData:
    offset = _skip_to_date_items(buffer, offset)
    raw_data, offset = read_fixed_size_items(buffer, offset)
    values = [read_double(raw_value, 0) if len(raw_value) >= 8 else None for raw_value in raw_data]
    return ColumnData(values, offset)


def read_short_data(buffer: bytes, offset: int) -> ColumnData:
    raw_data, offset = read_fixed_size_items(buffer, offset)
    values = [read_short(raw_value, 0) if len(raw_value) >= 2 else None for raw_value in raw_data]
    return ColumnData(values, offset)


def read_integer_data(buffer: bytes, offset: int) -> ColumnData:
    raw_data, offset = read_fixed_size_items(buffer, offset)
    values = [read_int(raw_value, 0) if len(raw_value) >= 4 else None for raw_value in raw_data]
    return ColumnData(values, offset)


def read_assignment_data(buffer: bytes, offset: int) -> ColumnData:
    options = None
    if read_byte(buffer, offset) == 0x01:
        offset += 2
    else:
        offset += 20
        options, offset = read_strings_with_length(buffer, offset, False)

        # Skip bytes
        offset += 8

    values, offset = read_strings_with_length(buffer, offset, True)
    return ColumnData(values, offset, options=options)


def read_unknown_data(buffer: bytes, offset: int) -> ColumnData:
    return ColumnData([], offset)


class ColumnDecoder(NamedTuple):
    post_header_skip: int
    read_data: Callable[[bytes, int], ColumnData]


COLUMN_DECODERS: Dict[ColumnKind, ColumnDecoder] = {
    ColumnKind.STRING: ColumnDecoder(0, read_string_data),
    ColumnKind.BOOLEAN: ColumnDecoder(34, read_boolean_data),
    ColumnKind.ENUM: ColumnDecoder(34, read_enum_data),
    ColumnKind.DATE: ColumnDecoder(0, read_date_data),
    ColumnKind.TIME: ColumnDecoder(48, read_time_data),
    ColumnKind.DURATION: ColumnDecoder(18, read_duration_data),
    ColumnKind.DOUBLE: ColumnDecoder(16, read_double_data),
    ColumnKind.PERCENT: ColumnDecoder(0, read_percent_data),
    ColumnKind.NUMBER: ColumnDecoder(0, read_percent_data),
    ColumnKind.SHORT: ColumnDecoder(18, read_short_data),
    ColumnKind.INTEGER: ColumnDecoder(18, read_integer_data),
    ColumnKind.CALENDAR: ColumnDecoder(18, read_integer_data),
    ColumnKind.IDENTIFIER: ColumnDecoder(20, read_short_data),
    ColumnKind.RELATION: ColumnDecoder(14, read_assignment_data),
    ColumnKind.ASSIGNMENT: ColumnDecoder(14, read_assignment_data),
    ColumnKind.UNKNOWN: ColumnDecoder(0, read_unknown_data),
}


# --------------------------------------------------------------------
# Column
# --------------------------------------------------------------------

@dataclass
class FastTrackColumn:
    """One decoded column block"""
    kind: ColumnKind
    header: BlockHeader
    field: Optional[FastTrackField]
    values: List[Any]
    options: Optional[List[str]] = None
    time_unit_value: Optional[int] = None
    trailer: bytes = field(default=b'', repr=False)

    @property
    def name(self) -> str:
        return self.header.name

    def dump(self) -> str:
        """Render the column for diagnostic logs"""
        lines = [f"[{self.kind.name.title()}Column", self.header.dump()]
        if self.options is not None:
            lines.append("  [Options")
            lines.extend(f"    {item}" for item in self.options)
            lines.append("  ]")
        lines.append("  [Data")
        lines.extend(f"    {'' if item is None else item}" for item in self.values)
        lines.append("  ]")
        trailer = hexdump(self.trailer, 0, len(self.trailer)).rstrip('\n')
        lines.append(f"  Trailer: {trailer}")
        lines.append("]")
        return '\n'.join(lines)


def decode_column(table_type: Optional[FastTrackTableType], buffer: bytes,
                  start: int, length: int) -> FastTrackColumn:
    """
    Decode the column block occupying [start, start + length)

    Args:
        table_type: Table owning the column, selects the field registry
        buffer: Whole file data
        start: Offset of the block (its first byte is the class code)
        length: Block length, bytes after the decoded data form the trailer

    Returns:
        FastTrackColumn; field is None when the kind is unknown or the
        column type code is not registered for the table

    Raises:
        UnexpectedStructureError: If the block does not have the layout its
            kind requires
    """
    kind = column_kind(read_byte(buffer, start))
    decoder = COLUMN_DECODERS[kind]

    header = read_block_header(buffer, start, decoder.post_header_skip)
    if kind == ColumnKind.UNKNOWN:
        column_field = None
    else:
        column_field = field_for_code(table_type, header.column_type)

    data = decoder.read_data(buffer, header.offset)

    end = start + length
    trailer = bytes(buffer[data.offset:end]) if end > data.offset else b''

    return FastTrackColumn(kind, header, column_field, data.values, data.options,
                           data.time_unit_value, trailer)
