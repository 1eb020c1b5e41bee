"""
Row Module - Name to value mapping for one decoded record
Typed getters return None (or a neutral default where noted) when a column
is absent, so callers never have to test for missing keys.
"""

import datetime
from typing import Any, Dict, Iterator, Optional
from ..types.value import Duration, RelationType, TimeUnit


class MapRow:
    """Decoded record backed by a dictionary of column name -> value"""

    def __init__(self, mapping: Optional[Dict[str, Any]] = None):
        self.map: Dict[str, Any] = dict(mapping) if mapping else {}

    # --------------------------------------------------------------------
    # Typed Access
    # --------------------------------------------------------------------

    def get_object(self, name: str) -> Any:
        return self.map.get(name)

    def set_object(self, name: str, value: Any) -> None:
        self.map[name] = value

    def get_string(self, name: str) -> Optional[str]:
        value = self.map.get(name)
        if value is None:
            return None
        return value if isinstance(value, str) else str(value)

    def get_integer(self, name: str) -> Optional[int]:
        value = self.map.get(name)
        if value is None:
            return None
        return int(value)

    def get_boolean(self, name: str) -> bool:
        """Missing values read as False"""
        value = self.map.get(name)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        return False

    def get_double(self, name: str) -> Optional[float]:
        value = self.map.get(name)
        if value is None:
            return None
        return float(value)

    def get_duration(self, name: str, units: TimeUnit = TimeUnit.DAYS) -> Optional[Duration]:
        """
        Read a duration column

        Args:
            name: Column name
            units: Units applied when the stored value is a bare number
        """
        value = self.map.get(name)
        if value is None or isinstance(value, Duration):
            return value
        return Duration(float(value), units)

    def get_date(self, name: str) -> Optional[datetime.datetime]:
        value = self.map.get(name)
        if isinstance(value, datetime.datetime):
            return value
        if isinstance(value, datetime.date):
            return datetime.datetime(value.year, value.month, value.day)
        return None

    def get_relation_type(self, name: str) -> RelationType:
        value = self.map.get(name)
        if isinstance(value, RelationType):
            return value
        return RelationType.FINISH_START

    def get_raw(self, name: str) -> Optional[bytes]:
        value = self.map.get(name)
        if value is None:
            return None
        return bytes(value)

    # --------------------------------------------------------------------
    # Mapping Access
    # --------------------------------------------------------------------

    def keys(self):
        return self.map.keys()

    def items(self):
        return self.map.items()

    def __getitem__(self, name: str) -> Any:
        return self.map[name]

    def __contains__(self, name: str) -> bool:
        return name in self.map

    def __iter__(self) -> Iterator[str]:
        return iter(self.map)

    def __len__(self) -> int:
        return len(self.map)

    def __eq__(self, other) -> bool:
        if isinstance(other, MapRow):
            return self.map == other.map
        return NotImplemented

    def __repr__(self) -> str:
        return f"MapRow({self.map!r})"
