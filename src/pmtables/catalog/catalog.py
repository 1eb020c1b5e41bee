"""
Catalog Module - Static table layouts for Primavera databases
P3 and SureTrak store one table per file; the file name identifies the
table type and the layouts below describe its records.
"""

from typing import Any, Dict, List, Optional
from .schema import ColumnDefinition, ColumnKind, TableDefinition
from ..constants import FORMAT_P3, FORMAT_SURETRAK, P3_EPOCH
from ..exceptions import UnsupportedFormatError
from ..types.value import TimeUnit


def _string(name: str, offset: int, length: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.STRING, offset, length)


def _byte(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.BYTE, offset)


def _short(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.SHORT, offset)


def _int(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.INT, offset)


def _date(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.P3_DATE, offset)


def _btrieve_date(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.BTRIEVE_DATE, offset)


def _duration(name: str, offset: int, units: TimeUnit) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.DURATION, offset, units=units)


def _percent(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.PERCENT, offset)


def _relation_type(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.RELATION_TYPE, offset)


def _date_in_hours(name: str, offset: int) -> ColumnDefinition:
    return ColumnDefinition(name, ColumnKind.DATE_IN_HOURS, offset)


def _wbs_columns() -> List[ColumnDefinition]:
    columns = []
    for index in range(1, 21):
        offset = 330 + (index - 1) * 2
        columns.append(_byte(f"WBSW_{index:02d}", offset))
        columns.append(_string(f"WBSS_{index:02d}", offset + 1, 1))
    return columns


def _project_code_columns() -> List[ColumnDefinition]:
    return [_string(f"PROJECT_CODE_{index:02d}", 388 + (index - 1) * 10, 10) for index in range(1, 11)]


def dir_row_validator(row: Dict[str, Any]) -> bool:
    """
    Accept a DIR row only when its project start date follows the P3 epoch

    Free pages of a DIR file can look like records; a real project record
    always carries a plausible start date.
    """
    date = row.get("PROJECT_START_DATE")
    return date is not None and date > P3_EPOCH


# --------------------------------------------------------------------
# P3
# --------------------------------------------------------------------

_P3 = TimeUnit.DAYS

P3_TABLES: Dict[str, TableDefinition] = {
    "AC2": TableDefinition(512, 34, [
        _string("UNKNOWN_1", 2, 4), _string("UNKNOWN_2", 6, 8), _short("UNKNOWN_3", 14),
        _short("UNKNOWN_4", 16), _string("UNKNOWN_5", 18, 4), _string("UNKNOWN_6", 26, 8),
    ]),
    "ACC": TableDefinition(512, 58, [
        _string("COST_ACCOUNT_NUMBER", 2, 12), _string("UNDEFINED_1", 14, 4), _string("ACC_TITLE", 18, 40),
    ]),
    "ACT": TableDefinition(1024, 250, [
        _string("ACTIVITY_ID", 2, 10),
        _string("UNDEFINED_1", 12, 2),
        _duration("FREE_FLOAT", 14, _P3),
        _short("CALENDAR_ID", 16),
        _int("DURATION_CALC_CODE", 18),
        _duration("ORIGINAL_DURATION", 22, _P3),
        _duration("REMAINING_DURATION", 24, _P3),
        _short("ACTUAL_START_OR_CONSTRAINT_FLAG", 26),
        _short("ACTUAL_FINISH_OR_CONSTRAINT_FLAG", 28),
        _percent("PERCENT_COMPLETE", 30),
        _date("EARLY_START_INTERNAL", 34),
        _date("LATE_START_INTERNAL", 38),
        _date("AS_OR_ED_CONSTRAINT", 42),
        _date("AF_OR_LD_CONSTRAINT", 46),
        _date("EF_INTERNAL", 50),
        _date("LF_INTERNAL", 54),
        _duration("TOTAL_FLOAT", 58, _P3),
        _string("MILESTONE", 60, 1),
        _string("CRITICAL_FLAG", 61, 1),
        _string("UNDEFINED_4", 62, 8),
        _byte("ST_ACTIVITY_TYPE", 70),
        _byte("LEVELING_TYPE", 71),
        _string("UNDEFINED_5B", 72, 2),
        _string("DEPT", 74, 3),
        _string("RESP", 77, 5),
        _string("PHAS", 82, 5),
        _string("STEP", 87, 5),
        _string("ITEM", 92, 5),
        _string("UNDEFINED_6", 97, 41),
        _string("ACTIVITY_TITLE", 138, 48),
        _int("SUSPEND_DATE", 186),
        _int("RESUME_DATE", 190),
        _int("UNDEFINED_8A", 194),
        _int("UNDEFINED_8B", 198),
        _int("UNDEFINED_8C", 202),
        _int("UNDEFINED_8D", 206),
        _int("UNDEFINED_8E", 210),
        _btrieve_date("EARLY_START", 214),
        _btrieve_date("LATE_START", 218),
        _btrieve_date("EARLY_FINISH", 222),
        _btrieve_date("LATE_FINISH", 226),
        _byte("EARLY_START_HOUR", 230),
        _byte("LATE_START_HOUR", 231),
        _byte("EARLY_FINISH_HOUR", 232),
        _byte("LATE_FINISH_HOUR", 233),
        _string("ACTUAL_START_FLAG", 234, 1),
        _string("ACTUAL_FINISH_FLAG", 235, 1),
        _string("UNDEFINED_10", 236, 10),
    ], primary_key="ACTIVITY_ID"),
    "AIT": TableDefinition(1024, 214, [
        _string("ACT_ID", 2, 10), _string("ACTID_EXT", 12, 2), _string("RES", 14, 8),
        _string("COST_ACCOUNT_NUMBER", 22, 12), _string("RESOURCE_ID", 34, 1), _string("UNDEFINED_1", 35, 3),
        _date("PLANNED_START", 38), _date("PLANNED_FINISH", 42), _int("APPROVED_CHANGES", 46),
    ]),
    "AUD": TableDefinition(1024, 143),
    "DIR": TableDefinition(512, 506, [
        _string("SUB_PROJECT_NAME", 2, 4),
        _int("SEQUENCE_NUMBER", 6),
        _int("PRODUCT_CODE", 10),
        _date("PROJECT_START_DATE", 14),
        _int("HOLIDAY_CONVENTION", 18),
        _string("SUB_PROJECT_ID", 22, 2),
        _string("UNDEFINED_1", 24, 2),
        _date("PROJECT_FINISH_DATE", 26),
        _int("REPORT_COUNTER", 30),
        _string("ACT_CODE_1_TO_4_SIZE", 34, 4),
        _string("ACT_CODE_5_TO_8_SIZE", 38, 4),
        _string("ACT_CODE_9_TO_12_SIZE", 42, 4),
        _string("ACT_CODE_13_TO_16_SIZE", 46, 4),
        _string("ACT_CODE_17_TO_20_SIZE", 50, 4),
        _string("ACT_ID_CODE_1_TO_4_SIZE", 54, 4),
        _int("PROJECT_TYPE", 58),
        _date("CURRENT_DATA_DATE", 62),
        _date("CALENDAR_START_DATE", 66),
        _string("UNDEFINED_2", 70, 4),
        _string("COMPANY_TITLE", 74, 36),
        _string("PROJECT_TITLE", 110, 36),
        _string("REPORT_TITLE", 146, 48),
        _string("PROJECT_VERSION", 194, 16),
        _string("UNDEFINED_3", 210, 32),
        _string("AUTO_COST_SET", 242, 4),
        _date("AUTO_COST_DATE", 246),
        _string("AUTO_COST_RULES", 250, 14),
        _string("UNDEFINED_4", 264, 14),
        _int("SCHEDULE_LOGIC", 278),
        _int("INTERRUPTIBLE_FLAG", 282),
        _date("LATEST_EARLY_FINISH", 286),
        _string("TARGET_1_NAME", 290, 4),
        _string("UNDEFINED_5", 294, 4),
        _string("TARGET_2_NAME", 298, 4),
        _string("UNDEFINED_6", 302, 4),
        _short("LEVELED_SWITCH", 306),
        _short("TOTAL_FLOAT_TYPE", 308),
        _string("UNDEFINED_7", 310, 4),
        _short("START_DAY_OF_WEEK", 314),
        _string("UNDEFINED_8", 316, 2),
        _short("MASTER_CALENDAR_TYPE", 318),
        _short("MASTER_CALENDAR_TYPE_AUX", 320),
        _string("GRAPHIC_SUMMARY_PROJECT", 322, 1),
        _string("SCHED_MAST_SUB_BOTH", 323, 1),
        _string("DECIMAL_PLACES", 324, 1),
        _string("UPDATE_SUB_DATA_DATE", 325, 1),
        _string("SUMMARY_CAL_ID", 326, 1),
        _string("END_DATE_FROM_MS", 327, 1),
        _string("SS_LAG_FROM_ASES", 328, 1),
        _string("UNDEFINED_9", 329, 1),
        *_wbs_columns(),
        _int("INTR_PRO_INDEX", 370),
        _int("INTR_PROJ_LAST_SCED_DATE", 374),
        _short("LEVEL_NUM_SPLITS", 378),
        _short("LEVEL_SPLIT_NON_WORK", 380),
        _short("LEVEL_CONTIG_WORK", 382),
        _short("LEVEL_MIN_PCT_UPT", 384),
        _short("LEVEL_MAX_PCT_UPT", 386),
        *_project_code_columns(),
        _string("UNDEFINED_10", 488, 18),
    ], primary_key="SUB_PROJECT_NAME", row_validator=dir_row_validator),
    "DTL": TableDefinition(1024, 64, [
        _string("CODE_NAME", 2, 4), _string("CODE_VALUE", 6, 10), _string("DESCRIPTION", 16, 48),
    ]),
    "HOL": TableDefinition(512, 12, [
        _short("CAL_ID", 2), _date("START_OF_HOLIDAY", 4), _date("END_OF_HOLIDAY", 8),
    ]),
    "ITM": TableDefinition(1024, 42, [
        _string("ACTIVITY_ID", 2, 12), _string("RESOURCE", 14, 8), _string("COST_ACCOUNT", 22, 11),
        _string("CATEGORY", 33, 5), _short("UNKNOWN_3", 38), _short("UNKNOWN_4", 40),
    ]),
    "LAY": TableDefinition(512, 14),
    "LOG": TableDefinition(1024, 66, [
        _string("ACT_ID", 2, 10), _string("ACT_ID_EXT", 12, 2), _short("LOG_SEQ_NUMBER", 14),
        _string("LOG_MASK", 16, 2), _string("LOG_RECORD_INFO", 18, 48),
    ]),
    "PLT": TableDefinition(512, 21),
    "PPA": TableDefinition(1024, 46, [
        _string("UNKNOWN_1", 2, 10), _string("UNKNOWN_2", 12, 19), _string("UNKNOWN_3", 31, 2),
    ]),
    "REL": TableDefinition(512, 31, [
        _string("PREDECESSOR_ACTIVITY_ID", 2, 10),
        _string("PREDECESSOR_ACTIVITY_EXT", 12, 2),
        _string("SUCCESSOR_ACTIVITY_ID", 14, 10),
        _string("SUCCESSOR_ACTIVITY_EXT", 24, 2),
        _relation_type("LAG_TYPE", 26),
        _duration("LAG_VALUE", 28, _P3),
        _string("DRIVING_REL", 30, 1),
    ]),
    "REP": TableDefinition(512, 21),
    "RES": TableDefinition(1024, 114, [
        _string("ACTIVITY_ID", 2, 10),
        _string("UNDEFINED_1", 12, 2),
        _string("RESOURCE_ID", 14, 8),
        _string("COST_ACCOUNT_NUMBER", 22, 12),
        _short("PERCENT_COMPLETE", 34),
        _short("LAG", 36),
        _duration("REMAINING_DURATION", 38, _P3),
        _string("RES_DESIGNATOR", 40, 1),
        _string("DRIVING_RESOURCE", 41, 1),
        _int("BUDGET_QUANTITY", 42),
        _int("QUANTITY_THIS_PERIOD", 46),
        _int("QUANTITY_TO_DATE", 50),
        _int("QUANTITY_AT_COMPLETE", 54),
        _date("ST_RES_EARLY_START", 58),
        _date("ST_RES_EARLY_FINISH", 62),
        _int("UNDEFINED_2", 66),
        _int("BUDGET_COST", 70),
        _int("COST_THIS_PERIOD", 74),
        _int("COST_TO_DATE", 78),
        _int("COST_AT_COMPLETION", 82),
        _date("ST_RES_LATE_START", 86),
        _date("ST_RES_LATE_FINISH", 90),
        _int("UNDEFINED_3", 94),
    ]),
    "RIT": TableDefinition(1024, 214, [
        _string("ACTID", 2, 10), _string("ACTID_EXT", 12, 2), _string("RES", 13, 8),
        _string("COST_ACCOUNT_NUMBER", 21, 12), _string("RESOURCE_ID", 33, 1), _string("UNDEFINED_1", 34, 3),
        _int("COMMITMENT_AMOUNT", 37), _int("ORIGINAL_BUDGET", 41),
    ]),
    "RLB": TableDefinition(1024, 182, [
        _string("RES_ID", 2, 8),
        _string("UNIT_OF_MEASURE", 10, 4),
        _string("RES_TITLE", 14, 40),
        *[column
          for index in range(1, 7)
          for column in (_int(f"ESCALATION_VAL_{index}", 54 + (index - 1) * 8),
                         _date(f"ESCALATION_DATE_{index}", 58 + (index - 1) * 8))],
        *[column
          for index in range(1, 7)
          for column in (_int(f"NORM_LIM_VAL_{index}", 102 + (index - 1) * 12),
                         _int(f"MAX_LIM_VAL_{index}", 106 + (index - 1) * 12),
                         _date(f"LIM_TO_DATE_{index}", 110 + (index - 1) * 12))],
        _short("SHIFT_NUMB", 174),
        _short("SHIFT_LIMIT_TABLE", 176),
        _short("DRIVING_RESOURCE", 178),
        _short("UNDEFINED_1", 180),
    ], primary_key="RES_ID"),
    "SPR": TableDefinition(1024, 37, [_short("UNKNOWN_1", 4)]),
    "SRT": TableDefinition(4096, 16, [_int("SEQ_NUMBER", 2), _string("ACT_ID", 6, 10)]),
    "STR": TableDefinition(512, 122, [
        _string("INDICATOR", 2, 1), _string("INDICATOR_EXT", 3, 1), _short("LEVEL_NUMBER", 4),
        _string("UNDEFINED_2", 6, 4), _string("CODE_VALUE", 10, 48), _string("CODE_TITLE", 58, 48),
    ], primary_key="CODE_VALUE"),
    "STW": TableDefinition(1024, 58),
    "TIM": TableDefinition(1024, 153),
    "TTL": TableDefinition(1024, 67, [
        _int("CODE_NAME", 2), _string("CODE_VALUE", 6, 12), _string("DESCRIPTION", 18, 48), _byte("SORT_ORDER", 66),
    ]),
    "WBS": TableDefinition(1024, 63, [
        _string("ACTIVITY_ID", 2, 10), _string("ACTIVITY_ID_EXT", 12, 2), _string("CODE_VALUE", 14, 48),
        _string("INDICATOR", 62, 1),
    ], primary_key="ACTIVITY_ID"),
}


# --------------------------------------------------------------------
# SureTrak
# --------------------------------------------------------------------

_ST = TimeUnit.HOURS

SURETRAK_TABLES: Dict[str, TableDefinition] = {
    "ACT": TableDefinition(0, 298, [
        _string("ACTIVITY_ID", 1, 10),
        _string("NAME", 11, 48),
        _string("DEPARTMENT", 59, 5),
        _string("MANAGER", 64, 8),
        _string("SECTION", 72, 4),
        _string("MAIL", 76, 8),
        _string("WBS", 123, 48),
        _percent("PERCENT_COMPLETE", 192),
        _duration("ORIGINAL_DURATION", 198, _ST),
        _duration("REMAINING_DURATION", 200, _ST),
        _date_in_hours("EARLY_START", 202),
        _date_in_hours("EARLY_FINISH", 206),
        _date_in_hours("LATE_START", 210),
        _date_in_hours("LATE_FINISH", 214),
        _date_in_hours("ACTUAL_START", 234),
        _date_in_hours("ACTUAL_FINISH", 238),
        _date_in_hours("TARGET_START", 242),
        _date_in_hours("TARGET_FINISH", 246),
    ]),
    "CAL": TableDefinition(0, 47, [
        _short("CALENDAR_ID", 1),
        _string("NAME", 3, 16),
        _int("SUNDAY_HOURS", 19),
        _int("MONDAY_HOURS", 23),
        _int("TUESDAY_HOURS", 27),
        _int("WEDNESDAY_HOURS", 31),
        _int("THURSDAY_HOURS", 35),
        _int("FRIDAY_HOURS", 39),
        _int("SATURDAY_HOURS", 43),
    ], primary_key="CALENDAR_ID"),
    "DIR": TableDefinition(0, 565),
    "FLT": TableDefinition(0, 137),
    "HOL": TableDefinition(0, 11, [
        _short("CALENDAR_ID", 1),
        ColumnDefinition("DATE", ColumnKind.DATE_IN_DAYS, 3),
        ColumnDefinition("ANNUAL", ColumnKind.ANNUAL, 3),
    ]),
    "REL": TableDefinition(0, 26, [
        _string("PREDECESSOR_ACTIVITY_ID", 1, 10),
        _string("SUCCESSOR_ACTIVITY_ID", 11, 10),
        _relation_type("TYPE", 21),
        _duration("LAG", 22, _ST),
    ]),
    "RES": TableDefinition(0, 118, [_string("ACTIVITY_ID", 1, 10), _string("RESOURCE_ID", 11, 8)]),
    "RLB": TableDefinition(0, 111, [
        _string("CODE", 1, 8), _string("NAME", 9, 40), _short("BASE_CALENDAR_ID", 99), _short("CALENDAR_ID", 101),
    ]),
    "TTL": TableDefinition(0, 100, [
        ColumnDefinition("DATA", ColumnKind.RAW, 0, 100),
        _string("TEXT1", 1, 48),
        _string("TEXT2", 49, 48),
        _byte("DEFINITION_ID", 97),
        _short("ORDER", 98),
    ]),
}


class Catalog:
    """Table layouts of one Primavera database family"""

    FAMILIES = {
        FORMAT_P3: P3_TABLES,
        FORMAT_SURETRAK: SURETRAK_TABLES,
    }

    def __init__(self, format_name: str):
        """
        Initialize catalog for a database family

        Args:
            format_name: "p3" or "suretrak"

        Raises:
            UnsupportedFormatError: For any other family
        """
        tables = self.FAMILIES.get(format_name)
        if tables is None:
            raise UnsupportedFormatError(f"No table catalog for format '{format_name}'")
        self.format_name = format_name
        self.tables: Dict[str, TableDefinition] = tables

    def get_table(self, table_type: str) -> Optional[TableDefinition]:
        """Get table definition by type, None when the type is not known"""
        return self.tables.get(table_type.upper())

    def list_tables(self) -> List[str]:
        """List known table types"""
        return sorted(self.tables)

    def __contains__(self, table_type: str) -> bool:
        return table_type.upper() in self.tables
