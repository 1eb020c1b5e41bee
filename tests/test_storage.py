import math
import struct
import pytest
from pmtables.constants import CHILD_BLOCK_PATTERN, NULL_DOUBLE, P3_PAGE_MAGIC
from pmtables.exceptions import UnexpectedStructureError, UnreadableContainerError
from pmtables.storage.buffer import (read_double, read_fixed_string, read_int, read_short,
                                     skip_to_next_matching_short, time_unit, validate_size, hexdump)
from pmtables.storage.file_manager import FileManager, iter_pages, iter_records
from pmtables.storage.page import BtrievePage
from pmtables.storage.scanner import (block_boundaries, matches_child_block, scan_child_blocks,
                                      scan_for_patterns)
from pmtables.types.value import TimeUnit


def test_read_double_null_encodings():
    assert read_double(struct.pack('<Q', NULL_DOUBLE), 0) is None
    assert read_double(struct.pack('<d', math.nan), 0) is None
    assert read_double(struct.pack('<d', 1.0), 0) == 1.0


def test_read_past_end():
    with pytest.raises(UnexpectedStructureError):
        read_int(b'\x01\x02', 0)
    with pytest.raises(UnexpectedStructureError):
        read_short(b'\x01\x02', 1)


def test_fixed_string_stops_at_nul():
    assert read_fixed_string(b'AB\x00CD ', 0, 6) == "AB"
    assert read_fixed_string(b' P3 ', 0, 4) == "P3"


def test_validate_size():
    validate_size(0)
    validate_size(100000)
    with pytest.raises(UnexpectedStructureError):
        validate_size(100001)


def test_skip_to_marker():
    buffer = b'\x00\x01\x0F\x00\x05'
    assert skip_to_next_matching_short(buffer, 0, 0x000F) == 4
    with pytest.raises(UnexpectedStructureError):
        skip_to_next_matching_short(buffer, 0, 0x00AA)


def test_time_unit_codes():
    assert time_unit(2) == TimeUnit.HOURS
    assert time_unit(4) == TimeUnit.DAYS
    assert time_unit(10) == TimeUnit.MONTHS
    assert time_unit(3) is None


def test_hexdump():
    assert hexdump(b'AB', 0, 2, ascii=True) == "00000: 41 42   AB\n"
    assert hexdump(None, 0, 2) == ""


# --------------------------------------------------------------------
# Scanner
# --------------------------------------------------------------------

@pytest.mark.parametrize("name_length,expected", [(0, False), (1, True), (99, True), (100, False)])
def test_child_block_name_length_bounds(name_length, expected):
    buffer = CHILD_BLOCK_PATTERN + struct.pack('<I', name_length)
    assert matches_child_block(buffer, 0) is expected


def test_child_block_needs_length_field():
    assert not matches_child_block(CHILD_BLOCK_PATTERN + b'\x01', 0)


def test_scan_patterns():
    buffer = b'xxABxxCDxAB'
    assert scan_for_patterns(buffer, 0, len(buffer), [b'AB', b'CD']) == [2, 6, 9]
    assert scan_for_patterns(buffer, 3, 9, [b'AB', b'CD']) == [6]


def test_scan_patterns_overlapping_and_bounds():
    buffer = b'AAAxAB'
    assert scan_for_patterns(buffer, 0, len(buffer), [b'AA']) == [0, 1]
    # A match may start before the end bound and run past it
    assert scan_for_patterns(buffer, 0, 5, [b'AB']) == [4]
    assert scan_for_patterns(buffer, 0, 4, [b'AB']) == []
    # Both patterns matching at one offset report it once
    assert scan_for_patterns(buffer, 0, len(buffer), [b'A', b'AA']) == [0, 1, 2, 4]


def test_scan_large_buffer():
    buffer = bytearray(4 * 1024 * 1024)
    offsets = [100, 1024 * 1024, 3 * 1024 * 1024 + 7]
    for offset in offsets:
        buffer[offset:offset + 2] = b'AB'
    block = CHILD_BLOCK_PATTERN + struct.pack('<I', 8)
    buffer[2 * 1024 * 1024:2 * 1024 * 1024 + len(block)] = block

    assert scan_for_patterns(bytes(buffer), 0, len(buffer), [b'AB']) == offsets
    assert scan_child_blocks(bytes(buffer), 0, len(buffer)) == [2 * 1024 * 1024]


def test_scan_child_blocks():
    block = CHILD_BLOCK_PATTERN + struct.pack('<I', 8)
    buffer = b'\x00' * 5 + block + CHILD_BLOCK_PATTERN + struct.pack('<I', 500)
    assert scan_child_blocks(buffer, 0, len(buffer)) == [5]


def test_block_boundaries():
    assert block_boundaries([10, 20], 0, 30) == [(0, 10), (10, 20), (20, 30)]
    assert block_boundaries([], 5, 9) == [(5, 9)]


# --------------------------------------------------------------------
# Pages and files
# --------------------------------------------------------------------

def test_page_records():
    data = struct.pack('<H', P3_PAGE_MAGIC) + bytes(62)
    page = BtrievePage(0, data)
    assert page.is_valid()
    assert list(page.records(16)) == [6, 22, 38]
    assert not BtrievePage(1, bytes(64)).is_valid()


def test_iter_pages_rejects_partial_page():
    pages = iter_pages(bytes(100), 64)
    assert next(pages).page_id == 0
    with pytest.raises(UnreadableContainerError):
        next(pages)


def test_iter_records():
    data = b'HEADER' + bytes(2) + b'\x01' * 4 + b'\x02' * 4
    assert list(iter_records(data, 8, 4)) == [(0, b'\x01' * 4), (1, b'\x02' * 4)]
    with pytest.raises(UnreadableContainerError):
        list(iter_records(data + b'\x03', 8, 4))


def test_file_manager(tmp_path):
    path = tmp_path / "table.dat"
    path.write_bytes(b'HEADER\x00\x00ABCD')
    fm = FileManager(path)

    assert fm.read_bytes() == b'HEADER\x00\x00ABCD'
    assert list(fm.iter_records(8, 4)) == [(0, b'ABCD')]

    with pytest.raises(UnreadableContainerError):
        FileManager(tmp_path / "missing.dat").read_bytes()
