"""Adapter for buildings without specialised controls (decorations, warehouses...)."""

from __future__ import annotations

from typing import List, Optional

from ..adapter import BuildingAdapter, Section
from ..config import NavigationSettings
from ..gamestate import GameStateAccessor
from ..upgrades import UpgradeSection
from .common import InfoSection


class SimpleAdapter(BuildingAdapter):
    NAME = "SimpleAdapter"

    def __init__(self, state: GameStateAccessor, settings: Optional[NavigationSettings] = None) -> None:
        super().__init__(state, settings)
        self.upgrades = UpgradeSection(state)
        self.handlers = {
            "info": InfoSection(self),
            "upgrades": self.upgrades,
        }

    def build_sections(self) -> List[Section]:
        sections = [Section("Info", "info")]
        self.upgrades.initialize(self.building)
        if self.upgrades.has_upgrades():
            sections.append(Section("Upgrades", "upgrades"))
        return sections

    def clear_data(self) -> None:
        super().clear_data()
        self.upgrades.clear()
