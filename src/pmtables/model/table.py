"""
Table Module - Keyed, ordered collection of decoded rows
Rows are keyed by their primary key value, or by their 1-based insertion
number when the table has no primary key. Iteration follows key order.
"""

from typing import Any, Dict, Iterator, Optional, Tuple
from ..constants import ROW_NUMBER, ROW_VERSION
from .row import MapRow


def _sort_key(key: Any) -> Tuple[int, Any]:
    # Numeric keys sort before text keys
    if isinstance(key, (int, float)) and not isinstance(key, bool):
        return (0, key)
    return (1, str(key))


class Table:
    """Rows of one logical table"""

    def __init__(self, name: str = ""):
        self.name = name
        self.rows: Dict[Any, MapRow] = {}
        self.row_number = 0

    def add_row(self, primary_key_column: Optional[str], row: Dict[str, Any]) -> MapRow:
        """
        Insert a decoded record

        Args:
            primary_key_column: Column whose value keys the row, or None
            row: Column name -> value

        Returns:
            The stored row

        A row whose key already exists replaces the stored row, unless the
        stored row carries a strictly higher ROW_VERSION.
        """
        self.row_number += 1
        row[ROW_NUMBER] = self.row_number

        key = row.get(primary_key_column) if primary_key_column else None
        if key is None:
            key = self.row_number

        new_row = MapRow(row)
        existing = self.rows.get(key)
        if existing is not None:
            old_version = existing.get_object(ROW_VERSION)
            new_version = new_row.get_object(ROW_VERSION)
            if old_version is not None and new_version is not None and old_version > new_version:
                return existing

        self.rows[key] = new_row
        return new_row

    def find(self, key: Any) -> Optional[MapRow]:
        """Row stored under key, None when absent"""
        return self.rows.get(key)

    def keys(self):
        return sorted(self.rows, key=_sort_key)

    def __iter__(self) -> Iterator[MapRow]:
        for key in self.keys():
            yield self.rows[key]

    def __len__(self) -> int:
        return len(self.rows)

    def __repr__(self) -> str:
        return f"Table({self.name!r}, rows={len(self.rows)})"
