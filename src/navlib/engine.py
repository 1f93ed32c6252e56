"""Navigation engine: the four-level state machine behind every building panel.

Levels:
- 0: sections (Info, Workers, Recipes, ...)
- 1: items within a section (slots, recipes, goods)
- 2: sub-items (recipe settings, race choices)
- 3: sub-sub-items (ingredient options)

Counts are never cached by the engine. Every command starts and ends by
re-clamping the cursor against counts freshly computed from the adapter, so a
tree that changed shape under the user (production finished, a worker left)
never leaves the cursor out of range. When the level under the cursor vanished
the command only re-announces the parent it fell back to. Adapter exceptions
are logged and turned into a vague utterance; they never escape the engine.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .adapter import ActionResult, BuildingAdapter, Modifiers
from .config import NavigationSettings
from .cursor import Cursor, Level
from .search import SearchIndex, SearchResult
from .speech import AudioCue, AudioCueSink, SpeechSink

logger = logging.getLogger(__name__)


class NavigationEngine:
    """Own the cursor and route commands to the active adapter."""

    def __init__(
        self,
        adapter: BuildingAdapter,
        speech: SpeechSink,
        cues: AudioCueSink,
        settings: Optional[NavigationSettings] = None,
    ) -> None:
        self.adapter = adapter
        self.speech = speech
        self.cues = cues
        self.settings = settings or adapter.settings
        self.cursor = Cursor()
        self.is_open = False
        self._search_query: Optional[str] = None
        self._search_position = -1

    # ------------------------------------------------------------------
    # lifecycle

    def open(self, building: str) -> None:
        """Start a session on a building and announce it with its first section."""
        self.cursor.reset()
        self._reset_search()
        self._guard("open", self.adapter.open, building)
        self.is_open = True
        logger.info("%s: opened panel for %s", self.adapter.NAME, building)

        parts = [self._guard("opened announcement", self.adapter.opened_announcement) or "Building"]
        if self._count(Level.SECTION) > 0:
            section_text = self._guard("announce section", self.adapter.announce_section, 0)
            if section_text:
                parts.append(section_text)
        self._say(". ".join(parts))

    def close(self) -> None:
        self._guard("close", self.adapter.close)
        self.is_open = False
        self.cursor.reset()
        self._reset_search()
        logger.info("%s: closed panel", self.adapter.NAME)

    def refresh(self) -> bool:
        """Re-read adapter data and re-clamp; returns True if the cursor moved."""
        self._guard("refresh", self.adapter.refresh_data)
        return self._clamp()

    # ------------------------------------------------------------------
    # commands

    def move(self, direction: int) -> None:
        """Move to the next (+1) or previous (-1) entry of the current level."""
        level = self.cursor.level
        clamped = self._clamp()
        if self._fell_back(level):
            return
        count = self._count(level)
        if count <= 0:
            if clamped:
                self.announce_current()
            return

        current = self.cursor.index_at(level)
        target = max(0, min(count - 1, current + direction))
        if target == current:
            # Clamped at an end: stay silent unless the tree shifted underneath us
            if clamped:
                self.announce_current()
            return

        self.cursor.set_index(level, target)
        self.announce_current()

    def enter(self) -> None:
        """Descend one level, or act on the current address when nothing is below."""
        level = self.cursor.level
        self._clamp()
        if self._fell_back(level):
            return
        if level == Level.SUB_SUB_ITEM:
            self._act(level)
            return

        below = Level(level + 1)
        count = self._count(below)
        if count > 0:
            self.cursor.level = below
            # Resume at the previous index when it is still valid
            if self.cursor.index_at(below) >= count:
                self.cursor.set_index(below, 0)
            self.announce_current()
            return

        self._act(level)

    def perform_action(self) -> None:
        """Act on the current address without descending."""
        level = self.cursor.level
        self._clamp()
        if self._fell_back(level):
            return
        self._act(self.cursor.level)

    def escape(self) -> bool:
        """Ascend one level. Returns False at the section level so the host can close."""
        level = self.cursor.level
        self._clamp()
        if self._fell_back(level):
            return True
        if self.cursor.level == Level.SECTION:
            return False
        self.cursor.level = Level(self.cursor.level - 1)
        self.announce_current()
        return True

    def back(self) -> None:
        """Ascend one level; at the section level this is a no-op."""
        if self.cursor.level > Level.SECTION:
            self.escape()
        else:
            self._clamp()

    def adjust(self, delta: int, modifiers: Optional[Modifiers] = None) -> None:
        """Numeric +/- on the current section (level 0) or item (deeper)."""
        level = self.cursor.level
        self._clamp()
        if self._fell_back(level):
            return
        modifiers = modifiers or Modifiers()
        if self._count(Level.SECTION) <= 0:
            return
        c = self.cursor
        if c.level == Level.SECTION:
            result = self._guard("adjust section", self.adapter.adjust_section_value, c.section, delta, modifiers)
        else:
            result = self._guard("adjust item", self.adapter.adjust_item_value, c.section, c.item, delta, modifiers)
        if isinstance(result, ActionResult):
            self._apply(result)

    def force_collapse_to(self, level: Level) -> None:
        """Pull the cursor up to a shallower level; deeper levels are ignored."""
        if level < self.cursor.level:
            logger.debug("collapse from level %d to %d", self.cursor.level, level)
            self.cursor.level = Level(level)

    # ------------------------------------------------------------------
    # search

    def search_results(self, query: str) -> List[SearchResult]:
        return self._guard("search", SearchIndex(self.adapter).search, query) or []

    def search(self, query: str) -> Optional[SearchResult]:
        """Jump to the first match; repeating the same query cycles through matches."""
        self._clamp()
        needle = (query or "").strip().lower()
        if not needle:
            self._reset_search()
            return None

        results = self.search_results(needle)
        if not results:
            self._reset_search()
            self._say(f"No match for {query.strip()}")
            self.cues.play(AudioCue.FAILED)
            return None

        if needle == self._search_query:
            self._search_position = (self._search_position + 1) % len(results)
        else:
            self._search_query = needle
            self._search_position = 0

        result = results[self._search_position]
        self.select(result)
        return result

    def select(self, result: SearchResult) -> None:
        """Move the cursor to a search result and announce it like normal navigation."""
        self.cursor.jump(result.address)
        self._clamp()
        self.announce_current()

    # ------------------------------------------------------------------
    # announcements

    def current_announcement(self) -> str:
        """Utterance for the current address, without speaking it."""
        c = self.cursor
        a = self.adapter
        if self._count(Level.SECTION) <= 0:
            return self.settings.empty_message
        if c.level == Level.SECTION:
            text = self._guard("announce section", a.announce_section, c.section)
        elif c.level == Level.ITEM:
            text = self._guard("announce item", a.announce_item, c.section, c.item)
        elif c.level == Level.SUB_ITEM:
            text = self._guard("announce sub-item", a.announce_sub_item, c.section, c.item, c.sub_item)
        else:
            text = self._guard(
                "announce sub-sub-item", a.announce_sub_sub_item, c.section, c.item, c.sub_item, c.sub_sub_item
            )
        return text or self.settings.unknown_message

    def announce_current(self) -> None:
        self._say(self.current_announcement())

    # ------------------------------------------------------------------
    # internals

    def _say(self, text: str) -> None:
        if text:
            self.speech.say(text)

    def _fell_back(self, level: Level) -> bool:
        """Re-announce when the clamp pulled the cursor above ``level``."""
        if self.cursor.level >= level:
            return False
        self.announce_current()
        return True

    def _reset_search(self) -> None:
        self._search_query = None
        self._search_position = -1

    def _guard(self, what: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return fn(*args)
        except Exception as e:
            logger.error(f"{self.adapter.NAME}: {what} failed: {e}", exc_info=True)
            return None

    def _count(self, level: Level) -> int:
        """Entries at ``level`` under the cursor's current ancestors."""
        c = self.cursor
        a = self.adapter
        if level == Level.SECTION:
            value = self._guard("sections", lambda: len(a.sections()))
        elif level == Level.ITEM:
            value = self._guard("item count", a.item_count, c.section)
        elif level == Level.SUB_ITEM:
            value = self._guard("sub-item count", a.sub_item_count, c.section, c.item)
        else:
            value = self._guard("sub-sub-item count", a.sub_sub_item_count, c.section, c.item, c.sub_item)
        if not isinstance(value, int) or value < 0:
            return 0
        return value

    def _clamp(self) -> bool:
        """Bring every index up to the current level back into range."""
        c = self.cursor
        before = (c.level, c.indices())
        for level in range(Level.SECTION, c.level + 1):
            level = Level(level)
            count = self._count(level)
            if count <= 0:
                if level == Level.SECTION:
                    c.reset()
                else:
                    # This level vanished: fall back to its parent
                    c.level = Level(level - 1)
                break
            if c.index_at(level) >= count:
                c.set_index(level, count - 1)
        changed = before != (c.level, c.indices())
        if changed:
            logger.info(f"{self.adapter.NAME}: cursor clamped from {before} to {(c.level, c.indices())}")
        return changed

    def _act(self, level: Level) -> None:
        c = self.cursor
        a = self.adapter
        if self._count(Level.SECTION) <= 0:
            self._say(self.settings.empty_message)
            return
        if level == Level.SECTION:
            result = self._guard_action("section action", a.section_action, c.section)
        elif level == Level.ITEM:
            result = self._guard_action("item action", a.item_action, c.section, c.item)
        elif level == Level.SUB_ITEM:
            result = self._guard_action("sub-item action", a.sub_item_action, c.section, c.item, c.sub_item)
        else:
            result = self._guard_action(
                "sub-sub-item action", a.sub_sub_item_action, c.section, c.item, c.sub_item, c.sub_sub_item
            )

        if result is None:
            self._say(self.settings.empty_message if level == Level.SECTION else self.settings.no_action_message)
            return
        self._apply(result)

    def _guard_action(self, what: str, fn: Callable[..., Any], *args: Any) -> Optional[ActionResult]:
        try:
            return fn(*args)
        except Exception as e:
            logger.error(f"{self.adapter.NAME}: {what} failed: {e}", exc_info=True)
            return ActionResult.failed(self.settings.unknown_message)

    def _apply(self, result: ActionResult) -> None:
        if result.message:
            self._say(result.message)
        self.cues.play(result.effective_cue)
        if result.success and result.collapse_to is not None:
            self.force_collapse_to(result.collapse_to)
        self._clamp()
