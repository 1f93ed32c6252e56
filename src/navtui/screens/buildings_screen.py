"""Buildings screen: the scenario's buildings, filterable, Enter opens a panel."""

import logging
from typing import Any, Dict, List, Optional

from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from navlib.adapters import adapter_for
from navlib.gamestate import GameStateAccessor

from ..widgets.data_table import FilterableDataTable
from ..widgets.search_input import SearchInput

logger = logging.getLogger(__name__)

COLUMNS = ["ID", "NAME", "KIND", "STATUS", "PANEL"]


def building_status(state: GameStateAccessor, building: str) -> str:
    if not state.is_finished(building):
        return "under construction"
    if state.is_sleeping(building):
        return "paused"
    return "working"


def building_rows(state: GameStateAccessor, building_ids: List[str]) -> List[Dict[str, Any]]:
    """Table rows for ``building_ids``; ``_building`` keeps the id for selection."""
    rows = []
    for bid in building_ids:
        kind = state.building_kind(bid)
        rows.append({
            "ID": bid,
            "NAME": state.building_name(bid) or bid,
            "KIND": kind,
            "STATUS": building_status(state, bid),
            "PANEL": adapter_for(kind).NAME,
            "_building": bid,
        })
    return rows


class BuildingsScreen(Screen):
    """Lists buildings and asks the app to open the chosen one's panel."""

    BINDINGS = [
        Binding("escape", "leave", "Back", priority=True),
        Binding("enter", "open_building", "Open panel", priority=True),
        ("q", "quit", "Quit"),
        ("/", "focus_filter", "Filter"),
    ]

    class BuildingSelected(Message):
        """The user picked a building to open."""

        def __init__(self, building: str) -> None:
            super().__init__()
            self.building = building

    class Leave(Message):
        """Escape on the list itself."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.table: Optional[FilterableDataTable] = None
        self.filter_input: Optional[SearchInput] = None
        self.last_opened: Optional[str] = None

    def compose(self):
        with Vertical():
            yield Header()
            yield Static("Buildings", id="screen-title")
            yield SearchInput(placeholder="Filter buildings...", id="building-filter")
            yield FilterableDataTable(id="buildings-table")
            yield Footer()

    def on_mount(self) -> None:
        self.table = self.query_one("#buildings-table", FilterableDataTable)
        self.filter_input = self.query_one("#building-filter", SearchInput)
        self.table.focus()
        self.load_data()

    def on_screen_resume(self) -> None:
        # Panels can pause buildings; statuses are re-read on return
        if self.table:
            self.load_data()
            self._restore_row()

    def load_data(self) -> None:
        """Fill the table from the app's game state."""
        state = getattr(self.app, "state", None)
        if state is None or self.table is None:
            logger.warning("Scenario not loaded yet, leaving the list empty")
            return
        try:
            rows = building_rows(state, state.building_ids())
        except Exception as e:
            logger.error(f"Failed to load buildings: {e}", exc_info=True)
            self.table.set_data(["ERROR"], [{"ERROR": str(e)}])
            return
        self.table.set_data(COLUMNS, rows)
        self._update_title()
        logger.info(f"Loaded {len(rows)} buildings")

    def _update_title(self) -> None:
        if not self.table:
            return
        shown = len(self.table.visible_rows())
        total = len(self.table.all_rows())
        title = "Buildings" if shown == total else f"Buildings ({shown} of {total})"
        self.query_one("#screen-title", Static).update(title)

    def _restore_row(self) -> None:
        """Put the cursor back on the building whose panel was just closed."""
        if not (self.table and self.last_opened):
            return
        for index, row in enumerate(self.table.visible_rows()):
            if row.get("_building") == self.last_opened:
                self.table.move_cursor(row=index)
                return

    def _open(self, row: Optional[Dict[str, Any]]) -> None:
        building = row.get("_building") if row else None
        if not building:
            return
        self.last_opened = building
        logger.info(f"Selected building {building}")
        self.post_message(self.BuildingSelected(building))

    def on_search_input_filter_changed(self, event: SearchInput.FilterChanged) -> None:
        if self.table:
            self.table.set_filter(event.filter_text)
            self._update_title()

    def on_search_input_query_submitted(self, event: SearchInput.QuerySubmitted) -> None:
        self._submit_filter(event.query)

    def _submit_filter(self, query: str) -> None:
        if not self.table:
            return
        # A filter that narrows to one building opens it straight away
        rows = self.table.visible_rows()
        if query.strip() and len(rows) == 1:
            self._open(rows[0])
            return
        self.table.focus()

    def action_open_building(self) -> None:
        if self.filter_input and self.filter_input.has_focus:
            self._submit_filter(self.filter_input.value)
            return
        if self.table:
            self._open(self.table.get_selected_row())

    def action_leave(self) -> None:
        """From the filter box Escape returns to the list; from the list it leaves."""
        if self.filter_input and self.filter_input.has_focus:
            if self.table:
                self.table.focus()
            return
        self.post_message(self.Leave())

    def action_quit(self) -> None:
        self.app.exit()

    def action_focus_filter(self) -> None:
        if self.filter_input:
            self.filter_input.focus()
