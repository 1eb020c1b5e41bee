import datetime
import struct
import pytest
from pmtables.catalog.catalog import Catalog, P3_TABLES, SURETRAK_TABLES, dir_row_validator
from pmtables.catalog.schema import ColumnDefinition, ColumnKind, TableDefinition
from pmtables.constants import P3_PAGE_MAGIC, ROW_VERSION
from pmtables.exceptions import UnreadableContainerError, UnsupportedFormatError
from pmtables.model.row import MapRow
from pmtables.model.table import Table
from pmtables.primavera.database import P3DatabaseReader, SureTrakDatabaseReader
from pmtables.primavera.table_reader import P3TableReader, SureTrakTableReader
from pmtables.primavera.wbs import P3WbsFormat
from pmtables.readers import read_tables
from pmtables.types.value import Duration, RelationType, TimeUnit


@pytest.fixture
def definition():
    return TableDefinition(64, 16, [
        ColumnDefinition("ID", ColumnKind.STRING, 2, 4),
        ColumnDefinition("VALUE", ColumnKind.SHORT, 6),
    ], primary_key="ID")


def record(version, key, value):
    return struct.pack('<H', version) + key.encode('latin-1').ljust(4, b'\x00') + struct.pack('<h', value) + bytes(8)


def page(records, size=64, magic=P3_PAGE_MAGIC):
    data = struct.pack('<H', magic) + bytes(4) + b''.join(records)
    return data.ljust(size, b'\x00')


def p3_record(size, version, fields):
    data = bytearray(size)
    struct.pack_into('<H', data, 0, version)
    for offset, value in fields:
        data[offset:offset + len(value)] = value
    return bytes(data)


def suretrak_file(records, header=b'ST0001'):
    return header + struct.pack('<H', len(records)) + b''.join(records)


def calendar_record(calendar_id, name, monday_hours, flag=0):
    data = bytearray(47)
    data[0] = flag
    struct.pack_into('<h', data, 1, calendar_id)
    data[3:3 + len(name)] = name.encode('latin-1')
    struct.pack_into('<i', data, 23, monday_hours)
    return bytes(data)


# --------------------------------------------------------------------
# P3 tables
# --------------------------------------------------------------------

def test_p3_live_records(definition):
    buffer = page([record(1, "A", 10), record(0, "B", 20), record(1, "C", -5)])
    buffer += page([record(1, "D", 1)], magic=0)

    table = Table("TST")
    P3TableReader(definition).read_buffer(buffer, table)

    # Version 0 marks a free slot; pages without the magic hold no records
    assert table.keys() == ["A", "C"]
    assert table.find("C").get_integer("VALUE") == -5
    assert table.find("A").get_integer(ROW_VERSION) == 1


def test_p3_newer_version_replaces(definition):
    buffer = page([record(2, "A", 10)]) + page([record(1, "A", 20), record(3, "B", 1)]) + page([record(3, "B", 2)])
    table = Table("TST")
    P3TableReader(definition).read_buffer(buffer, table)

    assert table.find("A").get_integer("VALUE") == 10
    assert table.find("B").get_integer("VALUE") == 2


def test_p3_row_validator(definition):
    definition.row_validator = lambda row: row["VALUE"] > 0
    table = Table("TST")
    P3TableReader(definition).read_buffer(page([record(1, "A", 10), record(1, "C", -5)]), table)
    assert table.keys() == ["A"]


def test_p3_truncated_page(definition, tmp_path):
    path = tmp_path / "PROJTST.P3"
    path.write_bytes(page([record(1, "A", 10)]) + bytes(10))
    with pytest.raises(UnreadableContainerError):
        P3TableReader(definition).read(path, Table("TST"))


def test_dir_row_validator():
    assert dir_row_validator({"PROJECT_START_DATE": datetime.datetime(2001, 2, 3)})
    assert not dir_row_validator({"PROJECT_START_DATE": None})
    assert not dir_row_validator({})


# --------------------------------------------------------------------
# SureTrak tables
# --------------------------------------------------------------------

def test_suretrak_records():
    buffer = suretrak_file([
        calendar_record(5, "Standard", 8),
        calendar_record(6, "Skipped", 8, flag=1),
        bytes(47),
    ])
    table = Table("CAL")
    SureTrakTableReader(SURETRAK_TABLES["CAL"]).read_buffer(buffer, table)

    assert table.keys() == [5]
    calendar = table.find(5)
    assert calendar.get_string("NAME") == "Standard"
    assert calendar.get_integer("MONDAY_HOURS") == 8


def test_suretrak_truncated_record():
    buffer = suretrak_file([calendar_record(5, "Standard", 8)])[:-1]
    with pytest.raises(UnreadableContainerError):
        SureTrakTableReader(SURETRAK_TABLES["CAL"]).read_buffer(buffer, Table("CAL"))


def holiday_record(calendar_id, days):
    return (b'\x00' + struct.pack('<hI', calendar_id, days)).ljust(11, b'\x00')


def test_suretrak_out_of_range_date_keeps_records():
    buffer = suretrak_file([holiday_record(1, 0x7FFFFFFF), holiday_record(2, 0x80000005)])
    table = Table("HOL")
    SureTrakTableReader(SURETRAK_TABLES["HOL"]).read_buffer(buffer, table)

    assert len(table) == 2
    rows = list(table)
    assert rows[0].get_integer("CALENDAR_ID") == 1
    assert rows[0].get_date("DATE") is None
    assert rows[1].get_date("DATE") == datetime.datetime(1800, 1, 6)
    assert rows[1].get_boolean("ANNUAL") is True


# --------------------------------------------------------------------
# Column encodings
# --------------------------------------------------------------------

def read_column(kind, data, **kwargs):
    return ColumnDefinition("C", kind, 0, **kwargs).read(0, data)


def test_p3_dates():
    assert read_column(ColumnKind.P3_DATE, struct.pack('<i', 2001020308)) == datetime.datetime(2001, 2, 3)
    assert read_column(ColumnKind.P3_DATE, struct.pack('<i', 1983123100)) is None
    assert read_column(ColumnKind.P3_DATE, struct.pack('<i', 0)) is None


def test_btrieve_date():
    assert read_column(ColumnKind.BTRIEVE_DATE, bytes([3, 2]) + struct.pack('<H', 2001)) == datetime.datetime(2001, 2, 3)
    assert read_column(ColumnKind.BTRIEVE_DATE, bytes(4)) is None


def test_suretrak_dates():
    assert read_column(ColumnKind.DATE_IN_HOURS, struct.pack('<i', 36)) == datetime.datetime(1800, 1, 2, 12)
    holiday = struct.pack('<I', 0x80000005)
    assert read_column(ColumnKind.DATE_IN_DAYS, holiday) == datetime.datetime(1800, 1, 6)
    assert read_column(ColumnKind.ANNUAL, holiday) is True
    assert read_column(ColumnKind.ANNUAL, struct.pack('<I', 5)) is False


def test_suretrak_dates_out_of_range():
    assert read_column(ColumnKind.DATE_IN_HOURS, struct.pack('<i', 0x7FFFFFFF)) is None
    assert read_column(ColumnKind.DATE_IN_DAYS, struct.pack('<I', 0x7FFFFFFF)) is None
    assert read_column(ColumnKind.DATE_IN_HOURS, struct.pack('<i', -1)) is None


def test_duration_and_relation():
    assert read_column(ColumnKind.DURATION, struct.pack('<h', 16), units=TimeUnit.HOURS) == Duration(16.0, TimeUnit.HOURS)
    assert read_column(ColumnKind.RELATION_TYPE, bytes([2])) == RelationType.FINISH_FINISH
    assert read_column(ColumnKind.RELATION_TYPE, bytes([9])) == RelationType.FINISH_START


def test_definition_validation():
    with pytest.raises(ValueError):
        ColumnDefinition("NAME", ColumnKind.STRING, 0)
    with pytest.raises(ValueError):
        TableDefinition(512, 16, [ColumnDefinition("A", ColumnKind.BYTE, 0), ColumnDefinition("A", ColumnKind.BYTE, 1)])
    with pytest.raises(ValueError):
        TableDefinition(512, 16, [ColumnDefinition("A", ColumnKind.BYTE, 0)], primary_key="B")
    with pytest.raises(ValueError):
        TableDefinition(16, 32)


def test_catalog():
    catalog = Catalog("p3")
    assert catalog.get_table("act").primary_key == "ACTIVITY_ID"
    assert catalog.get_table("DIR").row_validator is dir_row_validator
    assert catalog.get_table("XYZ") is None
    assert "STR" in catalog
    assert len(catalog.list_tables()) == len(P3_TABLES)
    assert Catalog("suretrak").get_table("CAL").primary_key == "CALENDAR_ID"

    with pytest.raises(UnsupportedFormatError):
        Catalog("fasttrack")


# --------------------------------------------------------------------
# Project directories
# --------------------------------------------------------------------

def str_page(code, title):
    fields = [(10, code.encode('latin-1')), (58, title.encode('latin-1'))]
    return page([p3_record(122, 1, fields)], size=512)


@pytest.fixture
def p3_directory(tmp_path):
    (tmp_path / "DEMOSTR.P3").write_bytes(str_page("ENG", "Engineering"))
    (tmp_path / "DEMOXYZ.P3").write_bytes(bytes(512))
    (tmp_path / "OTHRSTR.P3").write_bytes(str_page("OPS", "Operations"))
    return tmp_path


def test_p3_project_names(p3_directory):
    assert P3DatabaseReader.list_project_names(p3_directory) == ["DEMO", "OTHR"]


def test_p3_database(p3_directory):
    tables = P3DatabaseReader().process(p3_directory, "demo")

    # Files of unknown table types are ignored
    assert list(tables) == ["STR"]
    assert tables["STR"].find("ENG").get_string("CODE_TITLE") == "Engineering"


def test_read_tables_uses_first_project(p3_directory):
    tables = read_tables("p3", p3_directory)
    assert tables["STR"].find("ENG") is not None
    assert tables["STR"].find("OPS") is None


def test_suretrak_database(tmp_path):
    (tmp_path / "PROJ.DIR").write_bytes(suretrak_file([]))
    (tmp_path / "PROJ.CAL").write_bytes(suretrak_file([calendar_record(1, "Standard", 8)]))

    assert SureTrakDatabaseReader.list_project_names(tmp_path) == ["PROJ"]
    tables = read_tables("suretrak", tmp_path, "PROJ")
    assert sorted(tables) == ["CAL", "DIR"]
    assert len(tables["DIR"]) == 0
    assert tables["CAL"].find(1).get_string("NAME") == "Standard"


def test_database_requires_directory(tmp_path):
    with pytest.raises(UnreadableContainerError):
        P3DatabaseReader().process(tmp_path / "missing", "DEMO")
    with pytest.raises(UnreadableContainerError):
        SureTrakDatabaseReader.list_project_names(tmp_path / "missing")


# --------------------------------------------------------------------
# WBS codes
# --------------------------------------------------------------------

@pytest.fixture
def wbs_format():
    return P3WbsFormat(MapRow({
        "WBSW_01": 2, "WBSS_01": ".",
        "WBSW_02": 3, "WBSS_02": "-",
        "WBSW_03": 0,
    }))


def test_wbs_layout(wbs_format):
    assert wbs_format.lengths == [2, 3]
    assert wbs_format.separators == [".", "-"]


def test_wbs_formatting(wbs_format):
    wbs_format.parse_raw_value("01ABC")
    assert wbs_format.formatted_value == "01.ABC"
    assert wbs_format.formatted_parent_value == "01"
    assert wbs_format.level == 2

    wbs_format.parse_raw_value("01")
    assert wbs_format.formatted_value == "01"
    assert wbs_format.formatted_parent_value is None
    assert wbs_format.level == 1

    # Characters beyond the defined levels are dropped
    wbs_format.parse_raw_value("01ABCXYZ")
    assert wbs_format.formatted_value == "01.ABC"
