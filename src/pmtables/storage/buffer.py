"""
Buffer Module - Primitive decoders for in-memory file data
Little-endian integers, null-aware doubles, strings and sanity checks.
"""

import struct
import math
import datetime
from typing import Optional
from ..constants import NULL_DOUBLE, MAX_VALUE_SIZE
from ..exceptions import UnexpectedStructureError
from ..types.value import TimeUnit


_TIME_UNITS = {
    1: TimeUnit.ELAPSED_DAYS,  # Appears to mean "use the document default"
    2: TimeUnit.HOURS,
    4: TimeUnit.DAYS,
    6: TimeUnit.WEEKS,
    8: TimeUnit.MONTHS,
    10: TimeUnit.MONTHS,
    12: TimeUnit.YEARS,
}


def _unpack(fmt: str, buffer: bytes, offset: int, width: int):
    if offset < 0 or offset + width > len(buffer):
        raise UnexpectedStructureError(
            f"Read of {width} bytes at offset {offset} exceeds buffer of {len(buffer)} bytes")
    return struct.unpack_from(fmt, buffer, offset)[0]


# --------------------------------------------------------------------
# Integer Access
# --------------------------------------------------------------------

def read_byte(buffer: bytes, offset: int) -> int:
    """Read single unsigned byte"""
    return _unpack('<B', buffer, offset, 1)


def read_short(buffer: bytes, offset: int) -> int:
    """Read 2-byte unsigned integer (little-endian)"""
    return _unpack('<H', buffer, offset, 2)


def read_signed_short(buffer: bytes, offset: int) -> int:
    """Read 2-byte signed integer (little-endian)"""
    return _unpack('<h', buffer, offset, 2)


def read_int(buffer: bytes, offset: int) -> int:
    """Read 4-byte unsigned integer (little-endian)"""
    return _unpack('<I', buffer, offset, 4)


def read_signed_int(buffer: bytes, offset: int) -> int:
    """Read 4-byte signed integer (little-endian)"""
    return _unpack('<i', buffer, offset, 4)


def read_long(buffer: bytes, offset: int) -> int:
    """Read 8-byte unsigned integer (little-endian)"""
    return _unpack('<Q', buffer, offset, 8)


def read_double(buffer: bytes, offset: int) -> Optional[float]:
    """
    Read 8-byte double, honouring the format's null encoding

    Args:
        buffer: Source data
        offset: Position of the first byte

    Returns:
        The value, or None for the null bit pattern or any NaN
    """
    bits = read_long(buffer, offset)
    if bits == NULL_DOUBLE:
        return None

    value = struct.unpack('<d', struct.pack('<Q', bits))[0]
    if math.isnan(value):
        return None
    return value


# --------------------------------------------------------------------
# String Access
# --------------------------------------------------------------------

def read_utf16(buffer: bytes, offset: int, length: int) -> str:
    """Read UTF-16LE text occupying length bytes"""
    if offset < 0 or offset + length > len(buffer):
        raise UnexpectedStructureError(f"String of {length} bytes at offset {offset} exceeds buffer")
    return bytes(buffer[offset:offset + length]).decode('utf-16-le', errors='replace')


def read_fixed_string(buffer: bytes, offset: int, length: int) -> str:
    """Read a NUL-terminated single byte string from a fixed-width field"""
    if offset < 0 or offset + length > len(buffer):
        raise UnexpectedStructureError(f"Field of {length} bytes at offset {offset} exceeds buffer")
    data = bytes(buffer[offset:offset + length])
    end = data.find(b'\x00')
    if end != -1:
        data = data[:end]
    return data.decode('latin-1').strip()


# --------------------------------------------------------------------
# Validation and Navigation
# --------------------------------------------------------------------

def validate_size(size: int) -> None:
    """Ensure a count or length read from the file falls within sensible bounds"""
    if size < 0 or size > MAX_VALUE_SIZE:
        raise UnexpectedStructureError(f"Size {size} out of range")


def validate_offset(buffer: bytes, offset: int) -> None:
    """Ensure an offset lies inside the buffer"""
    if offset >= len(buffer):
        raise UnexpectedStructureError(f"Offset {offset} beyond buffer of {len(buffer)} bytes")


def skip_to_next_matching_short(buffer: bytes, offset: int, value: int) -> int:
    """
    Advance to the next 2-byte value equal to value

    Returns:
        Offset immediately after the matching value

    Raises:
        UnexpectedStructureError: If the buffer ends before a match
    """
    index = offset
    while index + 2 <= len(buffer):
        if read_short(buffer, index) == value:
            return index + 2
        index += 1
    raise UnexpectedStructureError(f"Marker 0x{value:04X} not found after offset {offset}")


def offset_date(epoch: datetime.datetime, days: int = 0, hours: int = 0) -> Optional[datetime.datetime]:
    """Epoch plus a stored day or hour count, None when the result is not a representable date"""
    try:
        return epoch + datetime.timedelta(days=days, hours=hours)
    except OverflowError:
        return None


def time_unit(code: int) -> Optional[TimeUnit]:
    """Map a stored time unit code to a TimeUnit, None when unmapped"""
    return _TIME_UNITS.get(code)


# --------------------------------------------------------------------
# Diagnostics
# --------------------------------------------------------------------

def hexdump(buffer: Optional[bytes], offset: int, length: int, ascii: bool = False,
            columns: int = 16, prefix: str = "") -> str:
    """
    Dump raw data as hex, one line per row of columns bytes

    Args:
        buffer: Source data (None yields an empty dump)
        offset: First byte to dump
        length: Number of bytes to dump
        ascii: Append printable characters to each line
        columns: Bytes per line
        prefix: Text placed before each line
    """
    if buffer is None:
        return ""

    end = min(offset + length, len(buffer))
    lines = []
    index = offset
    while index < end:
        chunk = bytes(buffer[index:min(index + columns, end)])
        line = f"{prefix}{index - offset:05d}:" + ''.join(f" {b:02X}" for b in chunk)
        if ascii:
            line += "   " + ''.join(chr(b) if 27 <= b <= 200 else ' ' for b in chunk)
        lines.append(line)
        index += columns

    return '\n'.join(lines) + ('\n' if lines else '')
