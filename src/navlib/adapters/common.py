"""Section handlers shared by several adapters."""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from ..adapter import ActionResult, SectionHandler
from ..speech import AudioCue

if TYPE_CHECKING:
    from ..adapter import BuildingAdapter


class InfoSection(SectionHandler):
    """Name, optional description and status of a building.

    With ``toggle_status`` the status item pauses/resumes the building.
    """

    def __init__(self, adapter: "BuildingAdapter", toggle_status: bool = False) -> None:
        self.adapter = adapter
        self.toggle_status = toggle_status

    def _items(self) -> List[Tuple[str, str]]:
        state = self.adapter.state
        building = self.adapter.building
        items = [("Name", state.building_name(building) or "Unknown building")]
        description = state.building_description(building)
        if description:
            items.append(("Description", description))
        items.append(("Status", self._status()))
        return items

    def _status(self) -> str:
        state = self.adapter.state
        building = self.adapter.building
        if not state.is_finished(building):
            return "Under construction"
        if state.is_sleeping(building):
            return "Paused"
        return "Active"

    def item_count(self) -> int:
        return len(self._items())

    def announce_item(self, item: int) -> Optional[str]:
        items = self._items()
        if not (0 <= item < len(items)):
            return None
        label, value = items[item]
        text = f"{label}: {value}"
        if label == "Status" and self.toggle_status:
            text += ". Space to toggle"
        return text

    def item_action(self, item: int) -> Optional[ActionResult]:
        items = self._items()
        if not self.toggle_status or not (0 <= item < len(items)) or items[item][0] != "Status":
            return None
        state = self.adapter.state
        building = self.adapter.building
        if not state.toggle_sleep(building):
            return ActionResult.failed("Cannot change status")
        self.adapter.refresh_data()
        if state.is_sleeping(building):
            return ActionResult.ok("Paused", cue=AudioCue.TOGGLE_OFF)
        return ActionResult.ok("Resumed", cue=AudioCue.TOGGLE_ON)

    def item_name(self, item: int) -> Optional[str]:
        items = self._items()
        return items[item][0] if 0 <= item < len(items) else None


def format_duration(seconds: float) -> str:
    seconds = int(round(seconds))
    minutes, secs = divmod(seconds, 60)
    if minutes and secs:
        return f"{minutes} minutes {secs} seconds"
    if minutes:
        return f"{minutes} minutes"
    return f"{secs} seconds"


def format_number(value: float) -> str:
    """Drop a trailing .0 from whole numbers."""
    return f"{int(value)}" if float(value).is_integer() else f"{value:.1f}"
