"""
Value Types - Shared value types for decoded rows
Time units, relation types, durations and JSON conversion.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Any
import datetime


class TimeUnit(Enum):
    """Coarse duration units"""
    ELAPSED_DAYS = 1
    HOURS = 2
    DAYS = 3
    WEEKS = 4
    MONTHS = 5
    YEARS = 6


class RelationType(Enum):
    """Predecessor/successor link types, in stored code order"""
    FINISH_START = 0
    START_START = 1
    FINISH_FINISH = 2
    START_FINISH = 3


@dataclass(frozen=True)
class Duration:
    """Amount of time in a given unit"""
    duration: float
    units: TimeUnit

    def __repr__(self):
        return f"{self.duration:g} {self.units.name.lower()}"


def to_json(value: Any) -> Any:
    """Convert a decoded value into JSON-compatible primitives"""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, (datetime.datetime, datetime.date, datetime.time)):
        return value.isoformat()
    elif isinstance(value, Duration):
        return {'duration': value.duration, 'units': value.units.name}
    elif isinstance(value, Enum):
        return value.name
    elif isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    elif isinstance(value, dict):
        return {str(to_json(k)): to_json(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    else:
        return str(value)
