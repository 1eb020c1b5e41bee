"""
FastTrack Fields - Column type code registries
Each logical table numbers its columns independently; a code that is not
listed here leaves the column without a field and it is not kept.
"""

from enum import Enum
from typing import Dict, Optional, Type


class FastTrackTableType(Enum):
    """Tables read from a FastTrack schedule"""
    ACTBARS = 1
    ACTIVITIES = 2
    RESOURCES = 3


class FastTrackField(Enum):
    """Base for per-table field enums; values are stored column type codes"""

    @classmethod
    def get_instance(cls, code: int) -> Optional['FastTrackField']:
        try:
            return cls(code)
        except ValueError:
            return None


class ActBarField(FastTrackField):
    """Columns of the ACTBARS table (one row per bar)"""
    ACTIVITY_ROW_ID = 1
    BAR_ID = 2
    START_DATE = 3
    START_TIME = 4
    FINISH_DATE = 5
    FINISH_TIME = 6
    DURATION = 7
    WORK = 8
    CALENDAR_ID = 9
    RESOURCES_ASSIGNED = 10
    PREDECESSORS = 11
    SUCCESSORS = 12
    PERCENT_COMPLETE = 13
    ACTUAL_START_DATE = 14
    ACTUAL_START_TIME = 15
    ACTUAL_FINISH_DATE = 16
    ACTUAL_FINISH_TIME = 17
    REMAINING_DURATION = 18
    BASELINE_START_DATE = 19
    BASELINE_START_TIME = 20
    BASELINE_FINISH_DATE = 21
    BASELINE_FINISH_TIME = 22
    BASELINE_DURATION = 23
    CONSTRAINT_TYPE = 24
    CONSTRAINT_DATE = 25
    DELAY = 26
    MILESTONE = 27
    CRITICAL = 28
    COST = 29
    NOTES = 30


class ActivityField(FastTrackField):
    """Columns of the ACTIVITIES table (one row per activity)"""
    ACTIVITY_ROW_ID = 1
    ACTIVITY_ID = 2
    ACTIVITY_NAME = 3
    OUTLINE_LEVEL = 4
    ACTIVITY_ROW_NUMBER = 5
    TASK_DURATION = 6
    TASK_WORK = 7
    EARLY_START_DATE = 8
    EARLY_FINISH_DATE = 9
    LATE_START_DATE = 10
    LATE_FINISH_DATE = 11
    TOTAL_FLOAT = 12
    FREE_FLOAT = 13
    CALENDAR_ID = 14
    PERCENT_COMPLETE = 15
    PRIORITY = 16
    CRITICAL = 17
    MILESTONE = 18
    ACTIVITY_TYPE = 19
    TEXT_1 = 20
    TEXT_2 = 21
    TEXT_3 = 22
    NUMBER_1 = 23
    NUMBER_2 = 24
    FLAG_1 = 25
    FLAG_2 = 26
    DATE_1 = 27
    DATE_2 = 28
    COST = 29
    ACTUAL_COST = 30
    GUID = 31
    NOTES = 32


class ResourceField(FastTrackField):
    """Columns of the RESOURCES table (one row per resource)"""
    RESOURCE_ID = 1
    RESOURCE_NAME = 2
    INITIALS = 3
    RESOURCE_GROUP = 4
    RESOURCE_TYPE = 5
    MAX_UNITS = 6
    STANDARD_RATE = 7
    OVERTIME_RATE = 8
    COST_PER_USE = 9
    CALENDAR_ID = 10
    EMAIL = 11
    ACCRUE_AT = 12
    PERCENT_ALLOCATED = 13
    TOTAL_WORK = 14
    TOTAL_COST = 15
    GUID = 16
    NOTES = 17


_FIELD_TYPES: Dict[FastTrackTableType, Type[FastTrackField]] = {
    FastTrackTableType.ACTBARS: ActBarField,
    FastTrackTableType.ACTIVITIES: ActivityField,
    FastTrackTableType.RESOURCES: ResourceField,
}

REQUIRED_TABLES: Dict[str, FastTrackTableType] = {
    "ACTBARS": FastTrackTableType.ACTBARS,
    "ACTIVITIES": FastTrackTableType.ACTIVITIES,
    "RESOURCES": FastTrackTableType.RESOURCES,
}


def field_for_code(table_type: Optional[FastTrackTableType], code: int) -> Optional[FastTrackField]:
    """Resolve a column type code against the table's field registry"""
    field_type = _FIELD_TYPES.get(table_type)
    if field_type is None:
        return None
    return field_type.get_instance(code)
