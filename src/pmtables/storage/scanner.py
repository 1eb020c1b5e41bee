"""
Scanner Module - Byte-pattern discovery of block boundaries
Containers without an offset table are split by locating known signatures.
Matching is best-effort: a short signature can recur inside unrelated data,
so child blocks are only accepted when the length field after the signature
is plausible. Residual false positives surface later as structure errors.
"""

from typing import Iterable, Iterator, List, Sequence, Tuple
from ..constants import CHILD_BLOCK_PATTERN, CHILD_NAME_LENGTH_MIN, CHILD_NAME_LENGTH_MAX


def matches_at(buffer: bytes, offset: int, pattern: bytes) -> bool:
    """Check for an exact copy of pattern starting at offset"""
    if offset < 0 or offset + len(pattern) > len(buffer):
        return False
    return buffer[offset:offset + len(pattern)] == pattern


def _find_all(buffer: bytes, pattern: bytes, start: int, end: int) -> Iterator[int]:
    # Overlapping occurrences starting in [start, end); each must fit in the buffer
    if not pattern:
        return
    index = buffer.find(pattern, max(start, 0))
    while index != -1 and index < end:
        yield index
        index = buffer.find(pattern, index + 1)


def scan_for_patterns(buffer: bytes, start: int, end: int, patterns: Iterable[bytes]) -> List[int]:
    """
    Find every offset in [start, end) where one of the patterns matches

    Args:
        buffer: Data to search
        start: First candidate offset
        end: Candidate offsets stop before this value
        patterns: Byte signatures, any of which may match

    Returns:
        Matching offsets in ascending order
    """
    matches = set()
    for pattern in patterns:
        matches.update(_find_all(buffer, bytes(pattern), start, end))
    return sorted(matches)


def matches_child_block(buffer: bytes, offset: int) -> bool:
    """
    Check for a child block signature at offset

    The signature alone produces false positives, so the name length that
    follows it must also fall inside a sensible range.
    """
    if not matches_at(buffer, offset, CHILD_BLOCK_PATTERN):
        return False

    length_offset = offset + len(CHILD_BLOCK_PATTERN)
    if length_offset + 4 > len(buffer):
        return False

    name_length = int.from_bytes(buffer[length_offset:length_offset + 4], 'little')
    return CHILD_NAME_LENGTH_MIN < name_length < CHILD_NAME_LENGTH_MAX


def scan_child_blocks(buffer: bytes, start: int, end: int) -> List[int]:
    """Find every validated child block signature in [start, end)"""
    return [index for index in _find_all(buffer, CHILD_BLOCK_PATTERN, start, end)
            if matches_child_block(buffer, index)]


def block_boundaries(offsets: Sequence[int], start: int, end: int) -> List[Tuple[int, int]]:
    """
    Turn sorted match offsets into half-open (start, end) intervals

    The first interval runs from start to the first match and the last from
    the final match to end. With no matches the whole range is one block.
    """
    intervals = []
    current = start
    for offset in offsets:
        intervals.append((current, offset))
        current = offset
    intervals.append((current, end))
    return intervals
