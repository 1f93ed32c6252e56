"""Filterable data table widget for TUI."""

from typing import List, Dict, Any, Optional
from textual.widgets import DataTable
from textual.reactive import reactive


class FilterableDataTable(DataTable):
    """Data table with built-in filtering capability.

    Row dicts may carry hidden keys (prefixed with ``_``) that are never
    displayed or matched but come back from ``get_selected_row``.
    """

    filter_text: reactive[str] = reactive("")

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._columns: List[str] = []
        self._all_rows: List[Dict[str, Any]] = []
        self._filtered_rows: List[Dict[str, Any]] = []
        self.cursor_type = "row"

    def set_data(self, columns: List[str], rows: List[Dict[str, Any]]) -> None:
        """Set the data for the table."""
        self._columns = list(columns)
        self._all_rows = rows.copy()
        self.clear(columns=True)

        for col in self._columns:
            self.add_column(col, key=col)

        self.apply_filter()

    def _matches(self, row: Dict[str, Any], needle: str) -> bool:
        for key, value in row.items():
            if key.startswith("_"):
                continue
            if isinstance(value, str) and needle in value.lower():
                return True
        return False

    def apply_filter(self) -> None:
        """Apply current filter to the data."""
        if not self.filter_text:
            self._filtered_rows = self._all_rows.copy()
        else:
            # Case-insensitive search across visible string values
            needle = self.filter_text.lower()
            self._filtered_rows = [row for row in self._all_rows if self._matches(row, needle)]

        self.clear(columns=False)  # Keep columns, clear rows
        for row in self._filtered_rows:
            self.add_row(*[str(row.get(col, "")) for col in self._columns])

    def set_filter(self, filter_text: str) -> None:
        """Set filter text and refresh display."""
        self.filter_text = filter_text
        self.apply_filter()

    def all_rows(self) -> List[Dict[str, Any]]:
        return list(self._all_rows)

    def visible_rows(self) -> List[Dict[str, Any]]:
        """Rows that pass the current filter, in display order."""
        return list(self._filtered_rows)

    def get_selected_row(self) -> Optional[Dict[str, Any]]:
        """Get the currently selected row data."""
        if not self._filtered_rows or self.cursor_row < 0:
            return None
        if self.cursor_row >= len(self._filtered_rows):
            return None
        return self._filtered_rows[self.cursor_row]
