"""
Schema Module - Fixed-record table and column definitions
Describes where each column sits inside a record and how its bytes decode.
Btrieve (P3 / SureTrak) and TurboProject tables are described this way.
"""

import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field
from ..constants import P3_EPOCH, SURETRAK_EPOCH, PEP_EPOCH, PEP_NULL_DATE
from ..exceptions import UnexpectedStructureError
from ..storage.buffer import (read_byte, read_short, read_signed_short, read_int,
                              read_signed_int, read_fixed_string, offset_date)
from ..types.value import Duration, RelationType, TimeUnit


class ColumnKind(Enum):
    """Encodings used by fixed-record columns"""
    STRING = 1
    BYTE = 2
    SHORT = 3
    INT = 4
    BTRIEVE_DATE = 5
    P3_DATE = 6
    DURATION = 7
    PERCENT = 8
    RELATION_TYPE = 9
    DATE_IN_HOURS = 10
    DATE_IN_DAYS = 11
    ANNUAL = 12
    RAW = 13
    PEP_START_DATE = 14
    PEP_FINISH_DATE = 15
    BOOLEAN = 16


_RELATION_TYPES = (RelationType.FINISH_START, RelationType.START_START,
                   RelationType.FINISH_FINISH, RelationType.START_FINISH)


# --------------------------------------------------------------------
# Column Readers
# --------------------------------------------------------------------

def _read_string(column: 'ColumnDefinition', buffer: bytes, offset: int) -> str:
    return read_fixed_string(buffer, offset, column.length)


def _read_byte(column: 'ColumnDefinition', buffer: bytes, offset: int) -> int:
    return read_byte(buffer, offset)


def _read_boolean(column: 'ColumnDefinition', buffer: bytes, offset: int) -> bool:
    return read_byte(buffer, offset) != 0


def _read_short(column: 'ColumnDefinition', buffer: bytes, offset: int) -> int:
    return read_signed_short(buffer, offset)


def _read_int(column: 'ColumnDefinition', buffer: bytes, offset: int) -> int:
    return read_signed_int(buffer, offset)


def _read_btrieve_date(column: 'ColumnDefinition', buffer: bytes, offset: int) -> Optional[datetime.datetime]:
    # Day, month, then a 2-byte year
    day = read_byte(buffer, offset)
    month = read_byte(buffer, offset + 1)
    year = read_short(buffer, offset + 2)
    if day == 0 or month == 0 or year == 0:
        return None
    try:
        return datetime.datetime(year, month, day)
    except ValueError:
        return None


def _read_p3_date(column: 'ColumnDefinition', buffer: bytes, offset: int) -> Optional[datetime.datetime]:
    # Stored as the decimal number YYYYMMDDhh; only the date part is used
    value = read_signed_int(buffer, offset)
    text = str(value)
    if value <= 0 or len(text) != 10:
        return None

    try:
        result = datetime.datetime(int(text[0:4]), int(text[4:6]), int(text[6:8]))
    except ValueError:
        return None
    return result if result > P3_EPOCH else None


def _read_duration(column: 'ColumnDefinition', buffer: bytes, offset: int) -> Duration:
    return Duration(float(read_signed_short(buffer, offset)), column.units or TimeUnit.DAYS)


def _read_percent(column: 'ColumnDefinition', buffer: bytes, offset: int) -> float:
    return float(read_signed_short(buffer, offset))


def _read_relation_type(column: 'ColumnDefinition', buffer: bytes, offset: int) -> RelationType:
    value = read_byte(buffer, offset)
    if value < len(_RELATION_TYPES):
        return _RELATION_TYPES[value]
    return RelationType.FINISH_START


def _read_date_in_hours(column: 'ColumnDefinition', buffer: bytes, offset: int) -> Optional[datetime.datetime]:
    hours = read_signed_int(buffer, offset)
    if hours <= 0:
        return None
    return offset_date(SURETRAK_EPOCH, hours=hours)


def _read_date_in_days(column: 'ColumnDefinition', buffer: bytes, offset: int) -> Optional[datetime.datetime]:
    # The top bit flags an annual holiday
    days = read_int(buffer, offset) & 0x7FFFFFFF
    if days == 0:
        return None
    return offset_date(SURETRAK_EPOCH, days=days)


def _read_annual(column: 'ColumnDefinition', buffer: bytes, offset: int) -> bool:
    return (read_int(buffer, offset) & 0x80000000) != 0


def _read_raw(column: 'ColumnDefinition', buffer: bytes, offset: int) -> bytes:
    if offset < 0 or offset + column.length > len(buffer):
        raise UnexpectedStructureError(f"Column {column.name} extends beyond record")
    return bytes(buffer[offset:offset + column.length])


def _read_pep_date(buffer: bytes, offset: int, adjustment: int) -> Optional[datetime.datetime]:
    days = read_short(buffer, offset)
    if days == PEP_NULL_DATE:
        return None
    return offset_date(PEP_EPOCH, days=days + adjustment)


def _read_pep_start_date(column: 'ColumnDefinition', buffer: bytes, offset: int) -> Optional[datetime.datetime]:
    return _read_pep_date(buffer, offset, 0)


def _read_pep_finish_date(column: 'ColumnDefinition', buffer: bytes, offset: int) -> Optional[datetime.datetime]:
    # Finish dates are stored as the day after the last working day
    return _read_pep_date(buffer, offset, -1)


COLUMN_READERS: Dict[ColumnKind, Callable[['ColumnDefinition', bytes, int], Any]] = {
    ColumnKind.STRING: _read_string,
    ColumnKind.BYTE: _read_byte,
    ColumnKind.SHORT: _read_short,
    ColumnKind.INT: _read_int,
    ColumnKind.BTRIEVE_DATE: _read_btrieve_date,
    ColumnKind.P3_DATE: _read_p3_date,
    ColumnKind.DURATION: _read_duration,
    ColumnKind.PERCENT: _read_percent,
    ColumnKind.RELATION_TYPE: _read_relation_type,
    ColumnKind.DATE_IN_HOURS: _read_date_in_hours,
    ColumnKind.DATE_IN_DAYS: _read_date_in_days,
    ColumnKind.ANNUAL: _read_annual,
    ColumnKind.RAW: _read_raw,
    ColumnKind.PEP_START_DATE: _read_pep_start_date,
    ColumnKind.PEP_FINISH_DATE: _read_pep_finish_date,
    ColumnKind.BOOLEAN: _read_boolean,
}


# --------------------------------------------------------------------
# Definitions
# --------------------------------------------------------------------

@dataclass
class ColumnDefinition:
    """Column metadata definition"""
    name: str
    kind: ColumnKind
    offset: int
    length: int = 0  # For STRING and RAW columns
    units: Optional[TimeUnit] = None  # For DURATION columns

    def __post_init__(self):
        """Validate column definition"""
        if self.kind in (ColumnKind.STRING, ColumnKind.RAW) and self.length <= 0:
            raise ValueError(f"{self.kind.name} column {self.name} requires length > 0")

    def read(self, record_offset: int, buffer: bytes) -> Any:
        """
        Decode this column from a record

        Args:
            record_offset: Position of the record within buffer
            buffer: Page or record data

        Returns:
            Decoded value, None where the encoding marks no value

        Raises:
            UnexpectedStructureError: If the column lies outside the buffer
        """
        return COLUMN_READERS[self.kind](self, buffer, record_offset + self.offset)


RowValidator = Callable[[Dict[str, Any]], bool]


@dataclass
class TableDefinition:
    """Table metadata definition"""
    page_size: int
    record_size: int
    columns: List[ColumnDefinition] = field(default_factory=list)
    primary_key: Optional[str] = None
    row_validator: Optional[RowValidator] = None

    def __post_init__(self):
        """Validate table definition"""
        if self.record_size <= 0:
            raise ValueError("Record size must be positive")

        if self.page_size and self.record_size > self.page_size:
            raise ValueError("Record size exceeds page size")

        column_names = [col.name for col in self.columns]
        if len(column_names) != len(set(column_names)):
            raise ValueError("Column names must be unique")

        if self.primary_key and self.primary_key not in column_names:
            raise ValueError(f"Primary key {self.primary_key} is not a column")

    def read_row(self, record_offset: int, buffer: bytes) -> Dict[str, Any]:
        """Decode every column of the record at record_offset"""
        return {col.name: col.read(record_offset, buffer) for col in self.columns}

    def __repr__(self) -> str:
        """String representation of table definition"""
        cols = []
        for col in self.columns:
            type_str = f"{col.kind.name}({col.length})" if col.length else col.kind.name
            key_str = " PRIMARY KEY" if col.name == self.primary_key else ""
            cols.append(f"  {col.name} {type_str} @{col.offset}{key_str}")

        cols_str = ",\n".join(cols)
        return f"Table: page {self.page_size}, record {self.record_size}\nColumns:\n{cols_str}"
