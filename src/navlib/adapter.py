"""Building adapter contract.

An adapter describes one building's panel as a tree of sections, items,
sub-items and sub-sub-items. Sections are resolved to ``SectionHandler``
objects through a table keyed by section kind, so adapters stay thin: each
kind is a small handler and the reusable sub-navigators (workers, upgrades)
are handlers themselves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from .config import NavigationSettings
from .cursor import Level
from .gamestate import GameStateAccessor
from .speech import AudioCue

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Section:
    name: str
    kind: str


@dataclass(frozen=True)
class Modifiers:
    shift: bool = False
    ctrl: bool = False

    def step(self, delta: int, large_step: int) -> int:
        """Shift turns a single step into a large one."""
        return delta * large_step if self.shift else delta


@dataclass(frozen=True)
class ActionResult:
    """Outcome of a mutating verb."""

    success: bool
    message: Optional[str] = None
    cue: Optional[AudioCue] = None
    collapse_to: Optional[Level] = None

    @classmethod
    def ok(cls, message: Optional[str] = None, cue: Optional[AudioCue] = None,
           collapse_to: Optional[Level] = None) -> "ActionResult":
        return cls(True, message, cue, collapse_to)

    @classmethod
    def failed(cls, message: Optional[str] = None, cue: AudioCue = AudioCue.FAILED) -> "ActionResult":
        return cls(False, message, cue)

    @property
    def effective_cue(self) -> AudioCue:
        if self.cue is not None:
            return self.cue
        return AudioCue.CONFIRM if self.success else AudioCue.FAILED


class Memoized(Generic[T]):
    """A value computed on first use and kept until ``invalidate()``."""

    def __init__(self, compute: Callable[[], T]) -> None:
        self._compute = compute
        self._value: Optional[T] = None
        self._valid = False

    @property
    def is_valid(self) -> bool:
        return self._valid

    def get(self, force: bool = False) -> T:
        if force or not self._valid:
            self._value = self._compute()
            self._valid = True
        return self._value  # type: ignore[return-value]

    def invalidate(self) -> None:
        self._valid = False
        self._value = None


class SectionHandler:
    """Counts, announcements and actions for one kind of section.

    Every method has a harmless default so handlers only implement the
    levels they actually have. Returning ``None`` from an action means there
    is no action at that address.
    """

    def describe_section(self, name: str) -> Optional[str]:
        return None

    def item_count(self) -> int:
        return 0

    def sub_item_count(self, item: int) -> int:
        return 0

    def sub_sub_item_count(self, item: int, sub_item: int) -> int:
        return 0

    def announce_item(self, item: int) -> Optional[str]:
        return None

    def announce_sub_item(self, item: int, sub_item: int) -> Optional[str]:
        return None

    def announce_sub_sub_item(self, item: int, sub_item: int, sub_sub_item: int) -> Optional[str]:
        return None

    def section_action(self) -> Optional[ActionResult]:
        return None

    def item_action(self, item: int) -> Optional[ActionResult]:
        return None

    def sub_item_action(self, item: int, sub_item: int) -> Optional[ActionResult]:
        return None

    def sub_sub_item_action(self, item: int, sub_item: int, sub_sub_item: int) -> Optional[ActionResult]:
        return None

    def adjust_section(self, delta: int, modifiers: Modifiers) -> Optional[ActionResult]:
        return None

    def adjust_item(self, item: int, delta: int, modifiers: Modifiers) -> Optional[ActionResult]:
        return None

    def item_name(self, item: int) -> Optional[str]:
        return None

    def sub_item_name(self, item: int, sub_item: int) -> Optional[str]:
        return None


class BuildingAdapter:
    """Base adapter: owns the section list and the kind -> handler table.

    Subclasses implement ``build_sections()`` (called on every refresh) and
    register handlers in ``self.handlers``.
    """

    NAME = "BuildingAdapter"

    def __init__(self, state: GameStateAccessor, settings: Optional[NavigationSettings] = None) -> None:
        self.state = state
        self.settings = settings or NavigationSettings()
        self.building: Optional[str] = None
        self.handlers: Dict[str, SectionHandler] = {}
        self._sections: List[Section] = []

    # ------------------------------------------------------------------
    # lifecycle

    def open(self, building: str) -> None:
        self.building = building
        self.refresh_data()

    def close(self) -> None:
        self.clear_data()
        self.building = None

    def refresh_data(self) -> None:
        if self.building is None:
            self._sections = []
            return
        self._sections = list(self.build_sections())
        logger.debug("%s: refreshed %s, %d sections", self.NAME, self.building, len(self._sections))

    def clear_data(self) -> None:
        self._sections = []

    def build_sections(self) -> List[Section]:
        raise NotImplementedError("Subclasses must implement build_sections()")

    # ------------------------------------------------------------------
    # dispatch

    def sections(self) -> List[Section]:
        return list(self._sections)

    def handler(self, section: int) -> Optional[SectionHandler]:
        if not (0 <= section < len(self._sections)):
            return None
        return self.handlers.get(self._sections[section].kind)

    def opened_announcement(self) -> str:
        name = self.state.building_name(self.building) or "Building"
        if not self.state.is_finished(self.building):
            name += ", under construction"
        elif self.state.is_sleeping(self.building):
            name += ", paused"
        return name

    # ------------------------------------------------------------------
    # counts

    def item_count(self, section: int) -> int:
        h = self.handler(section)
        return h.item_count() if h else 0

    def sub_item_count(self, section: int, item: int) -> int:
        h = self.handler(section)
        return h.sub_item_count(item) if h else 0

    def sub_sub_item_count(self, section: int, item: int, sub_item: int) -> int:
        h = self.handler(section)
        return h.sub_sub_item_count(item, sub_item) if h else 0

    # ------------------------------------------------------------------
    # announcements

    def announce_section(self, section: int) -> Optional[str]:
        if not (0 <= section < len(self._sections)):
            return None
        name = self._sections[section].name
        h = self.handler(section)
        return (h.describe_section(name) if h else None) or name

    def announce_item(self, section: int, item: int) -> Optional[str]:
        h = self.handler(section)
        return h.announce_item(item) if h else None

    def announce_sub_item(self, section: int, item: int, sub_item: int) -> Optional[str]:
        h = self.handler(section)
        return h.announce_sub_item(item, sub_item) if h else None

    def announce_sub_sub_item(self, section: int, item: int, sub_item: int, sub_sub_item: int) -> Optional[str]:
        h = self.handler(section)
        return h.announce_sub_sub_item(item, sub_item, sub_sub_item) if h else None

    # ------------------------------------------------------------------
    # actions

    def section_action(self, section: int) -> Optional[ActionResult]:
        h = self.handler(section)
        return h.section_action() if h else None

    def item_action(self, section: int, item: int) -> Optional[ActionResult]:
        h = self.handler(section)
        return h.item_action(item) if h else None

    def sub_item_action(self, section: int, item: int, sub_item: int) -> Optional[ActionResult]:
        h = self.handler(section)
        return h.sub_item_action(item, sub_item) if h else None

    def sub_sub_item_action(self, section: int, item: int, sub_item: int, sub_sub_item: int) -> Optional[ActionResult]:
        h = self.handler(section)
        return h.sub_sub_item_action(item, sub_item, sub_sub_item) if h else None

    def adjust_section_value(self, section: int, delta: int, modifiers: Modifiers) -> Optional[ActionResult]:
        h = self.handler(section)
        return h.adjust_section(delta, modifiers) if h else None

    def adjust_item_value(self, section: int, item: int, delta: int, modifiers: Modifiers) -> Optional[ActionResult]:
        h = self.handler(section)
        return h.adjust_item(item, delta, modifiers) if h else None

    # ------------------------------------------------------------------
    # names for search

    def section_name(self, section: int) -> Optional[str]:
        if 0 <= section < len(self._sections):
            return self._sections[section].name
        return None

    def item_name(self, section: int, item: int) -> Optional[str]:
        h = self.handler(section)
        return h.item_name(item) if h else None

    def sub_item_name(self, section: int, item: int, sub_item: int) -> Optional[str]:
        h = self.handler(section)
        return h.sub_item_name(item, sub_item) if h else None
