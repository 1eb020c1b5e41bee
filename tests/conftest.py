import pytest
from builders import pep_file, pep_table, calxtab_record, ncaltab_record


@pytest.fixture
def pep_bytes():
    calxtab = pep_table([
        calxtab_record(1, 3, 10, 1),
        calxtab_record(0, 0, 0, 0),
        calxtab_record(1, 1, 0x8000, 0),
    ], 6)
    ncaltab = pep_table([
        ncaltab_record("Standard", 1, [False, True, True, True, True, True, False]),
    ], 24)
    xtab = pep_table([b'\x01\x02\x03\x04'], 4)
    return pep_file([("CALXTAB", calxtab), ("NCALTAB", ncaltab), ("XTAB", xtab)])


@pytest.fixture
def pep_path(tmp_path, pep_bytes):
    path = tmp_path / "schedule.pep"
    path.write_bytes(pep_bytes)
    return path
