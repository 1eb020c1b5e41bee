"""
pmtables - Format Constants
Constants for byte signatures, page layout, epochs and sanity limits.
"""

import datetime

# Sanity limits
MAX_VALUE_SIZE = 100000  # Largest count or item length accepted from a file
MIN_NAME_LENGTH = 1  # Column block name length bounds (bytes, inclusive)
MAX_NAME_LENGTH = 255
CHILD_NAME_LENGTH_MIN = 0  # Child block name length bounds (exclusive)
CHILD_NAME_LENGTH_MAX = 100

# Floating point "no value" bit pattern
NULL_DOUBLE = 0x3949F623D5A8A733

# FastTrack block discovery
FASTTRACK_SCAN_START = 64  # Parent blocks never start inside the file header
FASTTRACK_PATTERN_MARGIN = 11  # Longest signature length
FASTTRACK_TABLE_BLOCK_LIMIT = 128  # Shorter blocks hold a table name, longer ones columns
FASTTRACK_TABLE_NAME_OFFSET = 7  # Name length follows the table signature

PARENT_BLOCK_PATTERNS = (
    bytes([0xFB, 0x01, 0x02, 0x00, 0x02, 0x00, 0xFF, 0xFF, 0x00, 0x00, 0x00]),
    bytes([0xFC, 0x01, 0x02, 0x00, 0x02, 0x00, 0xFF, 0xFF, 0x00, 0x00, 0x00]),
    bytes([0xFD, 0x01, 0x02, 0x00, 0x02, 0x00, 0xFF, 0xFF, 0x00, 0x00, 0x00]),
    bytes([0x00, 0x00, 0x02, 0x00, 0x02, 0x00, 0xFF, 0xFF, 0x00, 0x00, 0x00]),
)
CHILD_BLOCK_PATTERN = bytes([0x05, 0x00, 0x00, 0x00, 0x01, 0x00])
CHILD_BLOCK_PREFIX = 2  # Class code and one unknown byte precede the child signature
TABLE_BLOCK_PATTERNS = (
    bytes([0x00, 0x00, 0x00, 0x65, 0x00, 0x01, 0x00]),
)

# FastTrack column layout markers
BLOCK_HEADER_SIZE = 8
STRING_DATA_MARKER = 0x000F
DATE_DATA_MARKER = 0x000A
QUARTERS_TIME_UNIT = 10  # Durations in quarters are stored as months / 3

# Epochs
FASTTRACK_EPOCH = datetime.datetime(1979, 12, 31)
P3_EPOCH = datetime.datetime(1983, 12, 31)  # 441676800000 ms
SURETRAK_EPOCH = datetime.datetime(1800, 1, 1)
PEP_EPOCH = datetime.datetime(1999, 12, 31)  # 946598400000 ms

# Btrieve (P3 / SureTrak)
P3_PAGE_MAGIC = 0x4400
P3_PAGE_HEADER_SIZE = 6
SURETRAK_HEADER_SIZE = 6
SURETRAK_RECORD_COUNT_SIZE = 2
ROW_NUMBER = "ROW_NUMBER"
ROW_VERSION = "ROW_VERSION"

# TurboProject (PEP)
PEP_HEADER_SIZE = 64
PEP_DIRECTORY_ENTRY_SIZE = 32
PEP_DIRECTORY_NAME_OFFSET = 5
PEP_TABLE_HEADER_SIZE = 20
PEP_NULL_DATE = 0x8000

# Supported format names
FORMAT_FASTTRACK = "fasttrack"
FORMAT_P3 = "p3"
FORMAT_SURETRAK = "suretrak"
FORMAT_TURBOPROJECT = "turboproject"
FORMATS = (FORMAT_FASTTRACK, FORMAT_P3, FORMAT_SURETRAK, FORMAT_TURBOPROJECT)
