"""Adapter for houses: residents and upgrades."""

from __future__ import annotations

from typing import List, Optional

from ..adapter import BuildingAdapter, Section, SectionHandler
from ..config import NavigationSettings
from ..gamestate import GameStateAccessor
from ..upgrades import UpgradeSection


class ResidentsSection(SectionHandler):
    """Item 0 is the capacity, items 1+ are residents (or "None")."""

    def __init__(self, adapter: "HouseAdapter") -> None:
        self.adapter = adapter

    def item_count(self) -> int:
        return 1 + max(1, len(self.adapter.resident_ids))

    def _resident(self, item: int) -> Optional[int]:
        ids = self.adapter.resident_ids
        index = item - 1
        return ids[index] if 0 <= index < len(ids) else None

    def announce_item(self, item: int) -> Optional[str]:
        ids = self.adapter.resident_ids
        if item == 0:
            return f"Capacity: {len(ids)} of {self.adapter.capacity}"
        if not ids:
            return "None"
        resident = self._resident(item)
        if resident is None:
            return "Invalid resident"
        state = self.adapter.state
        name = state.actor_name(resident)
        if name is None:
            return "Unknown villager"
        race = state.actor_race(resident)
        return f"{name}, {race}" if race else name

    def item_name(self, item: int) -> Optional[str]:
        if item == 0:
            return "Capacity"
        if not self.adapter.resident_ids:
            return "None"
        resident = self._resident(item)
        if resident is None:
            return None
        return self.adapter.state.actor_name(resident)


class HouseAdapter(BuildingAdapter):
    NAME = "HouseAdapter"

    def __init__(self, state: GameStateAccessor, settings: Optional[NavigationSettings] = None) -> None:
        super().__init__(state, settings)
        self.resident_ids: List[int] = []
        self.capacity = 0
        self.upgrades = UpgradeSection(state)
        self.handlers = {
            "residents": ResidentsSection(self),
            "upgrades": self.upgrades,
        }

    def build_sections(self) -> List[Section]:
        self.resident_ids = self.state.residents(self.building)
        self.capacity = self.state.house_capacity(self.building)

        sections = [Section("Residents", "residents")]
        self.upgrades.initialize(self.building)
        if self.upgrades.has_upgrades():
            sections.append(Section("Upgrades", "upgrades"))
        return sections

    def clear_data(self) -> None:
        super().clear_data()
        self.resident_ids = []
        self.capacity = 0
        self.upgrades.clear()
