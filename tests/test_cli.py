from pmtables.cli import PMTablesREPL
from pmtables.storage.file_manager import FileManager


def test_open_and_show(pep_path, capsys):
    repl = PMTablesREPL()
    repl.onecmd(f"open turboproject {pep_path}")
    assert "Loaded 3 table(s)" in capsys.readouterr().out

    repl.onecmd("tables")
    assert "CALXTAB" in capsys.readouterr().out

    repl.onecmd("show calxtab 1")
    out = capsys.readouterr().out
    assert "NEXT_CALENDAR_EXCEPTION_ID" in out
    assert "1 of 2 row(s) shown" in out


def test_hexdump(pep_path, capsys):
    repl = PMTablesREPL()
    repl.onecmd(f"open turboproject {pep_path}")
    capsys.readouterr()

    repl.onecmd("hexdump 0 4")
    assert capsys.readouterr().out == "00000: 00 00 00 00       \n"


def test_open_reads_file_once(pep_path, pep_bytes, monkeypatch, capsys):
    reads = []
    read_bytes = FileManager.read_bytes

    def counting_read(self):
        reads.append(self.path)
        return read_bytes(self)

    monkeypatch.setattr(FileManager, "read_bytes", counting_read)
    repl = PMTablesREPL()
    repl.onecmd(f"open turboproject {pep_path}")

    assert "Loaded 3 table(s)" in capsys.readouterr().out
    assert reads == [pep_path]
    assert repl.buffer == pep_bytes
    assert repl.tables["CALXTAB"].find(1) is not None


def test_failed_open_clears_buffer(pep_path, tmp_path, capsys):
    repl = PMTablesREPL()
    repl.onecmd(f"open turboproject {pep_path}")
    repl.onecmd(f"open turboproject {tmp_path / 'missing.pep'}")

    assert "Error: File not found" in capsys.readouterr().out
    assert repl.buffer is None


def test_errors_are_reported(tmp_path, capsys):
    repl = PMTablesREPL()
    repl.onecmd(f"open mpp {tmp_path}")
    assert "Error: Unsupported format" in capsys.readouterr().out

    repl.onecmd("show calxtab")
    assert "not found" in capsys.readouterr().out

    repl.onecmd("columns")
    assert "only available for FastTrack" in capsys.readouterr().out


def test_quit(capsys):
    assert PMTablesREPL().onecmd("quit") is True
    assert "Goodbye!" in capsys.readouterr().out
