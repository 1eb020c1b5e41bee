"""
Command Line Interface Module - Interactive inspection of decoded schedules
"""

import cmd
import logging
import shlex
from pathlib import Path

from .constants import FORMATS, FORMAT_FASTTRACK, FORMAT_TURBOPROJECT
from .exceptions import PMTablesError
from .fasttrack.data import FastTrackData
from .readers import read_tables
from .storage.buffer import hexdump
from .storage.file_manager import FileManager
from .turboproject.pep import PEPReader
from .types.value import to_json

DEFAULT_LIMIT = 20


class PMTablesREPL(cmd.Cmd):
    """Interactive REPL for project file tables"""

    intro = """
    ╔══════════════════════════════════════╗
    ║      pmtables                        ║
    ║      Project File Table Decoder      ║
    ║      Type 'help' for commands        ║
    ╚══════════════════════════════════════╝

      open <format> <path> [project]
      tables
      show <table> [limit]
    """
    prompt = "pmtables> "

    def __init__(self):
        super().__init__()
        self.tables = {}
        self.fasttrack = None
        self.buffer = None
        self.log_handler = None

    def do_quit(self, arg):
        """Exit the REPL"""
        print("Goodbye!")
        return True

    def do_exit(self, arg):
        """Exit the REPL"""
        return self.do_quit(arg)

    def do_EOF(self, arg):
        """Exit on Ctrl-D"""
        print()
        return self.do_quit(arg)

    def do_open(self, arg):
        """open <format> <path> [project] - decode a file or project directory"""
        parts = shlex.split(arg)
        if len(parts) < 2:
            print(f"Usage: open <{'|'.join(FORMATS)}> <path> [project]")
            return

        format_name, path = parts[0].lower(), parts[1]
        project = parts[2] if len(parts) > 2 else None

        try:
            self.fasttrack = None
            self.buffer = None
            if format_name == FORMAT_FASTTRACK:
                # Keep the decoder so its columns and raw data can be inspected
                self.fasttrack = FastTrackData()
                self.fasttrack.process(path)
                self.buffer = self.fasttrack.buffer
                self.tables = {t.name: table for t, table in self.fasttrack.tables.items()}
            elif format_name == FORMAT_TURBOPROJECT:
                self.buffer = FileManager(path).read_bytes()
                self.tables = PEPReader().read_buffer(self.buffer)
            else:
                self.tables = read_tables(format_name, path, project)
        except PMTablesError as e:
            self.buffer = None
            print(f"Error: {e}")
            return

        self.prompt = f"pmtables({Path(path).name})> "
        print(f"Loaded {len(self.tables)} table(s) from {path}")

    def do_tables(self, arg):
        """List decoded tables and their row counts"""
        if not self.tables:
            print("No tables loaded. Use open first")
            return

        print("\nTables:")
        print("-" * 30)
        for name in sorted(self.tables):
            print(f"{name:<20} {len(self.tables[name]):>8}")
        print()

    def do_show(self, arg):
        """show <table> [limit] - display rows of a table"""
        parts = arg.split()
        if not parts:
            print("Usage: show <table> [limit]")
            return

        table = self.tables.get(parts[0].upper())
        if table is None:
            print(f"Table '{parts[0]}' not found")
            return

        try:
            limit = int(parts[1]) if len(parts) > 1 else DEFAULT_LIMIT
        except ValueError:
            print(f"Invalid limit: {parts[1]}")
            return

        rows = []
        for row in table:
            if len(rows) >= limit:
                break
            rows.append(to_json(row.map))
        self._display_rows(rows)
        print(f"\n{len(rows)} of {len(table)} row(s) shown")

    def do_columns(self, arg):
        """List every column block decoded from a FastTrack file"""
        if self.fasttrack is None:
            print("Columns are only available for FastTrack files")
            return

        print(f"{'Offset':>8} | {'Kind':<11} | {'Field':<24} | {'Values':>6} | Name")
        print("-" * 72)
        for column in self.fasttrack.columns:
            field_name = column.field.name if column.field else "-"
            print(f"{column.header.offset:>8} | {column.kind.name:<11} | {field_name:<24} | "
                  f"{len(column.values):>6} | {column.name}")

    def do_hexdump(self, arg):
        """hexdump <offset> <length> - dump raw bytes of the open file"""
        if self.buffer is None:
            print("No file data loaded")
            return

        try:
            offset, length = (int(value, 0) for value in arg.split())
        except ValueError:
            print("Usage: hexdump <offset> <length>")
            return

        print(hexdump(self.buffer, offset, length, ascii=True), end="")

    def do_log(self, arg):
        """log <path> - write a diagnostic decode log for subsequent opens"""
        path = arg.strip()
        if not path:
            print("Usage: log <path>")
            return

        root = logging.getLogger()
        if self.log_handler is not None:
            root.removeHandler(self.log_handler)
            self.log_handler.close()

        self.log_handler = logging.FileHandler(path, mode='w', encoding='utf-8')
        self.log_handler.setLevel(logging.DEBUG)
        self.log_handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        root.addHandler(self.log_handler)
        root.setLevel(logging.DEBUG)
        print(f"Logging to {path}")

    def _display_rows(self, rows):
        """Display rows in table format"""
        if not rows:
            print("Empty table")
            return

        columns = []
        for row in rows:
            for name in row:
                if name not in columns:
                    columns.append(name)

        # Calculate column widths
        col_widths = []
        for col in columns:
            max_len = len(str(col))
            for row in rows:
                max_len = max(max_len, len(self._cell(row.get(col))))
            col_widths.append(min(max_len, 30))  # Cap at 30 chars

        header = " | ".join(f"{col[:width]:<{width}}" for col, width in zip(columns, col_widths))
        separator = "-+-".join("-" * width for width in col_widths)

        print(header)
        print(separator)

        for row in rows:
            print(" | ".join(f"{self._cell(row.get(col))[:width]:<{width}}"
                             for col, width in zip(columns, col_widths)))

    @staticmethod
    def _cell(value) -> str:
        return "" if value is None else str(value)


def main():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    repl = PMTablesREPL()
    try:
        repl.cmdloop()
    except KeyboardInterrupt:
        print("\nExiting...")


if __name__ == "__main__":
    main()
