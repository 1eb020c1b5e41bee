"""
FastTrack Table - Column oriented blocks assembled into rows
Row i of a table holds value i of every column added to it.
"""

import datetime
from typing import Iterator, List, Optional, TYPE_CHECKING
from ..model.row import MapRow
from ..types.value import Duration, TimeUnit
from .columns import FastTrackColumn
from .fields import FastTrackField, FastTrackTableType

if TYPE_CHECKING:
    from .data import FastTrackData


class FastTrackRow(MapRow):
    """Row keyed by FastTrackField members"""

    def __init__(self, table: 'FastTrackTable'):
        super().__init__()
        self.table = table

    def get_int(self, field: FastTrackField) -> int:
        """Missing values read as 0"""
        value = self.get_integer(field)
        return 0 if value is None else value

    def get_currency(self, field: FastTrackField) -> Optional[float]:
        return self.get_double(field)

    def get_time(self, field: FastTrackField) -> Optional[datetime.time]:
        value = self.map.get(field)
        return value if isinstance(value, datetime.time) else None

    def get_timestamp(self, date_field: FastTrackField,
                      time_field: FastTrackField) -> Optional[datetime.datetime]:
        """Combine a date column with a time-of-day column"""
        date = self.get_date(date_field)
        if date is None:
            return None

        time = self.get_time(time_field)
        if time is None:
            return date
        return datetime.datetime.combine(date.date(), time)

    def get_duration(self, field: FastTrackField, units: Optional[TimeUnit] = None) -> Optional[Duration]:
        value = self.get_double(field)
        if value is None:
            return None
        return Duration(value, units or self.table.duration_time_unit)

    def get_work(self, field: FastTrackField) -> Optional[Duration]:
        return self.get_duration(field, self.table.work_time_unit)

    def get_uuid(self, field: FastTrackField) -> Optional[str]:
        """GUID text without braces"""
        value = self.get_string(field)
        if not value:
            return None
        if value.startswith('{'):
            value = value[1:]
        return value[:36] if len(value) >= 36 else None


class FastTrackTable:
    """One of the logical tables found in a FastTrack file"""

    def __init__(self, table_type: FastTrackTableType, data: Optional['FastTrackData'] = None):
        self.table_type = table_type
        self.data = data
        self.rows: List[FastTrackRow] = []

    @property
    def name(self) -> str:
        return self.table_type.name

    def add_column(self, column: FastTrackColumn) -> None:
        """Spread the column's values across the rows, creating rows as needed"""
        for index, value in enumerate(column.values):
            if index == len(self.rows):
                self.rows.append(FastTrackRow(self))
            self.rows[index].set_object(column.field, value)

    @property
    def duration_time_unit(self) -> TimeUnit:
        return self.data.duration_time_unit if self.data else TimeUnit.DAYS

    @property
    def work_time_unit(self) -> TimeUnit:
        return self.data.work_time_unit if self.data else TimeUnit.HOURS

    def __iter__(self) -> Iterator[FastTrackRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __getitem__(self, index: int) -> FastTrackRow:
        return self.rows[index]

    def __repr__(self) -> str:
        return f"FastTrackTable({self.name}, rows={len(self.rows)})"
