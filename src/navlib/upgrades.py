"""Shared Upgrades section.

Items are upgrade levels, sub-items are the perks offered at that level.
Levels are sequential: only the first level not yet achieved can be bought.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set

from .adapter import ActionResult, SectionHandler
from .cursor import Level
from .gamestate import GameStateAccessor, UpgradeLevel

logger = logging.getLogger(__name__)


class UpgradeSection(SectionHandler):
    def __init__(self, state: GameStateAccessor) -> None:
        self.state = state
        self.building: Optional[str] = None
        self.levels: List[UpgradeLevel] = []
        self.next_available = -1
        # Game state can lag behind a purchase; remember what we bought
        self._purchased: Set[int] = set()

    def initialize(self, building: str) -> None:
        if building != self.building:
            self._purchased.clear()
        self.building = building
        self.levels = []
        self.next_available = -1

        if not self.state.has_upgrades(building):
            return
        self.levels = list(self.state.upgrade_levels(building))
        for i in range(len(self.levels)):
            if not self.is_achieved(i):
                self.next_available = i
                break

    def clear(self) -> None:
        self.building = None
        self.levels = []
        self.next_available = -1
        self._purchased.clear()

    def has_upgrades(self) -> bool:
        return bool(self.levels)

    def is_achieved(self, index: int) -> bool:
        if not (0 <= index < len(self.levels)):
            return False
        return self.levels[index].achieved or index in self._purchased

    def achieved_count(self) -> int:
        return sum(1 for i in range(len(self.levels)) if self.is_achieved(i))

    def _level(self, index: int) -> Optional[UpgradeLevel]:
        if 0 <= index < len(self.levels):
            return self.levels[index]
        return None

    # ------------------------------------------------------------------
    # section handler

    def describe_section(self, name: str) -> Optional[str]:
        if not self.levels:
            return None
        return f"{name}, {self.achieved_count()} of {len(self.levels)} achieved"

    def item_count(self) -> int:
        return len(self.levels)

    def sub_item_count(self, item: int) -> int:
        level = self._level(item)
        return len(level.perks) if level else 0

    def announce_item(self, item: int) -> Optional[str]:
        level = self._level(item)
        if level is None:
            return "Invalid upgrade level"

        if self.is_achieved(item):
            chosen = next((p.name for p in level.perks if p.chosen), None)
            if chosen:
                return f"{level.name}: Achieved, {chosen}"
            return f"{level.name}: Achieved"

        if item == self.next_available:
            afford = "" if level.can_afford else ", cannot afford"
            return f"{level.name}: {self._cost_text(level)}{afford}"

        return f"{level.name}: Locked, complete previous level first"

    def announce_sub_item(self, item: int, sub_item: int) -> Optional[str]:
        level = self._level(item)
        if level is None:
            return "Invalid upgrade level"
        if not (0 <= sub_item < len(level.perks)):
            return "Invalid perk"

        perk = level.perks[sub_item]
        if self.is_achieved(item):
            status = "Chosen" if perk.chosen else "Not chosen"
        elif item == self.next_available:
            status = "Available"
        else:
            status = "Locked"

        text = f"{perk.name}: {status}"
        if perk.description:
            text += f". {perk.description}"
        return text

    def sub_item_action(self, item: int, sub_item: int) -> Optional[ActionResult]:
        level = self._level(item)
        if level is None:
            return ActionResult.failed("Invalid upgrade level")
        if self.is_achieved(item):
            return ActionResult.failed("Upgrade already purchased")
        if item != self.next_available:
            return ActionResult.failed("Complete previous level first")
        if not (0 <= sub_item < len(level.perks)):
            return ActionResult.failed("Invalid perk")

        # Affordability is re-read now; the cached level may be stale
        if not self.state.can_afford_upgrade(self.building, level.index):
            return ActionResult.failed("Not enough resources")

        if not self.state.purchase_upgrade(self.building, level.index, sub_item):
            return ActionResult.failed("Purchase failed")

        perk = level.perks[sub_item]
        self._purchased.add(item)
        self.initialize(self.building)
        logger.info("Purchased %s (%s) for %s", level.name, perk.name, self.building)
        return ActionResult.ok(f"Purchased {perk.name}", collapse_to=Level.ITEM)

    def item_name(self, item: int) -> Optional[str]:
        level = self._level(item)
        return level.name if level else None

    def sub_item_name(self, item: int, sub_item: int) -> Optional[str]:
        level = self._level(item)
        if level is None or not (0 <= sub_item < len(level.perks)):
            return None
        return level.perks[sub_item].name

    @staticmethod
    def _cost_text(level: UpgradeLevel) -> str:
        if not level.costs:
            return "Free"
        return ", ".join(f"{c.available} of {c.required} {c.good}" for c in level.costs)
