import pytest
from pmtables.exceptions import PMTablesError, UnreadableContainerError, UnsupportedFormatError
from pmtables.readers import READERS, read_tables
from pmtables.constants import FORMATS


def test_every_format_has_a_reader():
    assert sorted(READERS) == sorted(FORMATS)


def test_unsupported_format():
    with pytest.raises(UnsupportedFormatError):
        read_tables("mpp", "schedule.mpp")


def test_missing_file(tmp_path):
    with pytest.raises(UnreadableContainerError):
        read_tables("fasttrack", tmp_path / "missing.fts")


def test_directory_without_projects(tmp_path):
    with pytest.raises(UnreadableContainerError):
        read_tables("p3", tmp_path)


def test_turboproject(pep_path):
    tables = read_tables("TurboProject", pep_path)
    assert sorted(tables) == ["CALXTAB", "NCALTAB", "XTAB"]


def test_errors_share_a_base():
    assert issubclass(UnreadableContainerError, PMTablesError)
    assert issubclass(UnreadableContainerError, IOError)
    assert issubclass(UnsupportedFormatError, PMTablesError)
