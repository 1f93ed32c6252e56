"""Shared Workers section.

Any adapter can register a ``WorkerSection`` as the handler for its workers
section. Items are worker slots; sub-items of a slot are "Unassign" (when the
slot is occupied) followed by one entry per race, in the order the accessor
returns them.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from .adapter import ActionResult, Memoized, SectionHandler
from .cursor import Level
from .gamestate import GameStateAccessor, RaceAvailability

logger = logging.getLogger(__name__)


class WorkerSection(SectionHandler):
    def __init__(
        self,
        state: GameStateAccessor,
        worker_ids_func: Optional[Callable[[str], List[int]]] = None,
    ) -> None:
        self.state = state
        # Hearths and relics keep separate worker pools, so the id getter is pluggable
        self.worker_ids_func = worker_ids_func or state.worker_ids
        self.building: Optional[str] = None
        self.worker_ids: List[int] = []
        self.races: Memoized[List[RaceAvailability]] = Memoized(
            lambda: self.state.races_with_free_workers(include_zero_free=True)
        )

    # ------------------------------------------------------------------
    # lifecycle

    def initialize(self, building: str) -> None:
        # The race list lives for the whole panel session
        if building != self.building:
            self.races.invalidate()
        self.building = building
        self.refresh_worker_ids()

    def clear(self) -> None:
        self.building = None
        self.worker_ids = []
        self.races.invalidate()

    def refresh_worker_ids(self) -> None:
        if self.building is None:
            return
        self.worker_ids = list(self.worker_ids_func(self.building) or [])

    @property
    def max_workers(self) -> int:
        return len(self.worker_ids)

    def has_workers(self) -> bool:
        return self.max_workers > 0

    def _valid_slot(self, slot: int) -> bool:
        return 0 <= slot < len(self.worker_ids)

    def _occupied(self, slot: int) -> bool:
        return self._valid_slot(slot) and not self.state.is_worker_slot_empty(self.building, slot)

    def _race_at(self, slot: int, sub_item: int) -> Optional[RaceAvailability]:
        race_index = sub_item - (1 if self._occupied(slot) else 0)
        races = self.races.get()
        if 0 <= race_index < len(races):
            return races[race_index]
        return None

    # ------------------------------------------------------------------
    # section handler

    def item_count(self) -> int:
        return self.max_workers

    def sub_item_count(self, item: int) -> int:
        if not self._valid_slot(item):
            return 0
        count = len(self.races.get())
        if self._occupied(item):
            count += 1  # "Unassign"
        return count

    def announce_item(self, item: int) -> Optional[str]:
        # Slot announcements always re-read race availability
        self.races.get(force=True)

        if not self._valid_slot(item):
            return "Invalid worker slot"
        worker_id = self.worker_ids[item]
        if worker_id <= 0:
            return f"Worker slot {item + 1}: Empty"
        desc = self.state.worker_description(worker_id)
        return f"Worker slot {item + 1}: {desc or 'Assigned'}"

    def announce_sub_item(self, item: int, sub_item: int) -> Optional[str]:
        if not self._valid_slot(item):
            return "Invalid worker slot"
        if self._occupied(item) and sub_item == 0:
            return "Unassign worker"

        race = self._race_at(item, sub_item)
        if race is None:
            return "Invalid option"
        bonus = self.state.race_bonus(self.building, race.name)
        if not bonus:
            return f"{race.name}: {race.free} available"
        # A bonus with a comma already carries its own description
        if "," in bonus:
            return f"{race.name}: {race.free} available, {bonus}"
        return f"{race.name}: {race.free} available, {bonus} specialist"

    def sub_item_action(self, item: int, sub_item: int) -> Optional[ActionResult]:
        if not self._valid_slot(item):
            return ActionResult.failed("Invalid worker slot")

        occupied = self._occupied(item)
        if occupied and sub_item == 0:
            if not self.state.unassign_worker_from_slot(self.building, item):
                return ActionResult.failed("Cannot unassign worker")
            self._after_change()
            return ActionResult.ok("Worker unassigned", collapse_to=Level.ITEM)

        race = self._race_at(item, sub_item)
        if race is None:
            return ActionResult.failed("Invalid option")
        if race.free <= 0:
            return ActionResult.failed(f"No free {race.name} workers")

        # The occupant must leave before the new worker takes the slot
        if occupied:
            if not self.state.unassign_worker_from_slot(self.building, item):
                return ActionResult.failed(f"Cannot replace worker with {race.name}")
            self.refresh_worker_ids()

        if not self.state.assign_worker_to_slot(self.building, item, race.name):
            self._after_change()
            return ActionResult.failed(f"Cannot assign {race.name}")

        self._after_change()
        desc = None
        if self._valid_slot(item):
            desc = self.state.worker_description(self.worker_ids[item])
        logger.info("Assigned %s to slot %d of %s", race.name, item, self.building)
        return ActionResult.ok(f"Assigned: {desc or race.name}", collapse_to=Level.ITEM)

    def _after_change(self) -> None:
        self.refresh_worker_ids()
        self.races.invalidate()

    # ------------------------------------------------------------------
    # names for search

    def item_name(self, item: int) -> Optional[str]:
        if not self._valid_slot(item):
            return None
        worker_id = self.worker_ids[item]
        if worker_id <= 0:
            return f"Slot {item + 1}"
        return self.state.worker_description(worker_id) or f"Slot {item + 1}"

    def sub_item_name(self, item: int, sub_item: int) -> Optional[str]:
        if not self._valid_slot(item):
            return None
        if self._occupied(item) and sub_item == 0:
            return "Unassign"
        race = self._race_at(item, sub_item)
        return race.name if race else None
