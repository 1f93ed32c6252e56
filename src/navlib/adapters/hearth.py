"""Adapter for hearths: fire, sacrifices, hearth workers and upgrades."""

from __future__ import annotations

from typing import List, Optional

from ..adapter import ActionResult, BuildingAdapter, Modifiers, Section, SectionHandler
from ..config import NavigationSettings
from ..gamestate import GameStateAccessor
from ..speech import AudioCue
from ..upgrades import UpgradeSection
from ..workers import WorkerSection

FIRE_LOW = 0.3

FIRE_LEVEL = 0
FIRE_FUELS = 1


class FireSection(SectionHandler):
    """Item 0 is the fuel level; item 1 lists fuel types as toggleable sub-items."""

    def __init__(self, adapter: "HearthAdapter") -> None:
        self.adapter = adapter

    def _fuels(self):
        return self.adapter.state.hearth_fuels(self.adapter.building)

    def describe_section(self, name: str) -> Optional[str]:
        status = self.adapter.fire_status()
        return f"{name}, {status}" if status else None

    def item_count(self) -> int:
        return 2

    def sub_item_count(self, item: int) -> int:
        return len(self._fuels()) if item == FIRE_FUELS else 0

    def announce_item(self, item: int) -> Optional[str]:
        if item == FIRE_LEVEL:
            level = self.adapter.state.hearth_fire_level(self.adapter.building)
            if level <= 0:
                return "Fuel: Fire is out"
            return f"Fuel: {round(level * 100)} percent"
        if item == FIRE_FUELS:
            allowed = sum(1 for f in self._fuels() if f.allowed)
            return f"Fuel types: {allowed} of {len(self._fuels())} allowed"
        return None

    def announce_sub_item(self, item: int, sub_item: int) -> Optional[str]:
        fuels = self._fuels()
        if item != FIRE_FUELS or not (0 <= sub_item < len(fuels)):
            return None
        fuel = fuels[sub_item]
        return f"{fuel.good}: {'allowed' if fuel.allowed else 'blocked'}"

    def sub_item_action(self, item: int, sub_item: int) -> Optional[ActionResult]:
        fuels = self._fuels()
        if item != FIRE_FUELS or not (0 <= sub_item < len(fuels)):
            return None
        if not self.adapter.state.toggle_fuel(self.adapter.building, sub_item):
            return ActionResult.failed("Cannot change fuel")
        fuel = self._fuels()[sub_item]
        return ActionResult.ok(
            f"{fuel.good}: {'allowed' if fuel.allowed else 'blocked'}",
            cue=AudioCue.TOGGLE_ON if fuel.allowed else AudioCue.TOGGLE_OFF,
        )

    def item_name(self, item: int) -> Optional[str]:
        return {FIRE_LEVEL: "Fuel", FIRE_FUELS: "Fuel types"}.get(item)

    def sub_item_name(self, item: int, sub_item: int) -> Optional[str]:
        fuels = self._fuels()
        if item != FIRE_FUELS or not (0 <= sub_item < len(fuels)):
            return None
        return fuels[sub_item].good


class SacrificeSection(SectionHandler):
    """One item per sacrifice; +/- changes its level."""

    def __init__(self, adapter: "HearthAdapter") -> None:
        self.adapter = adapter

    def _sacrifices(self):
        return self.adapter.state.sacrifices(self.adapter.building)

    def item_count(self) -> int:
        return len(self._sacrifices())

    def announce_item(self, item: int) -> Optional[str]:
        entries = self._sacrifices()
        if not (0 <= item < len(entries)):
            return None
        entry = entries[item]
        level = f"level {entry.level} of {entry.max_level}" if entry.level > 0 else "off"
        text = f"{entry.name}: {level}"
        if entry.cost:
            text += f", costs {entry.cost}"
        return text + ". Plus/minus to adjust"

    def adjust_item(self, item: int, delta: int, modifiers: Modifiers) -> Optional[ActionResult]:
        entries = self._sacrifices()
        if not (0 <= item < len(entries)):
            return None
        entry = entries[item]
        new_level = max(0, min(entry.max_level, entry.level + modifiers.step(delta, self.adapter.settings.large_step)))
        if new_level == entry.level:
            return ActionResult.failed()
        if not self.adapter.state.set_sacrifice_level(self.adapter.building, item, new_level):
            return ActionResult.failed(f"Cannot change {entry.name}")
        if new_level == 0:
            return ActionResult.ok(f"{entry.name}: off", cue=AudioCue.TOGGLE_OFF)
        return ActionResult.ok(f"{entry.name}: level {new_level}", cue=AudioCue.CLICK)

    def item_name(self, item: int) -> Optional[str]:
        entries = self._sacrifices()
        return entries[item].name if 0 <= item < len(entries) else None


class HearthAdapter(BuildingAdapter):
    NAME = "HearthAdapter"

    def __init__(self, state: GameStateAccessor, settings: Optional[NavigationSettings] = None) -> None:
        super().__init__(state, settings)
        self.workers = WorkerSection(state, worker_ids_func=state.hearth_worker_ids)
        self.upgrades = UpgradeSection(state)
        self.handlers = {
            "fire": FireSection(self),
            "sacrifice": SacrificeSection(self),
            "workers": self.workers,
            "upgrades": self.upgrades,
        }

    def fire_status(self) -> Optional[str]:
        level = self.state.hearth_fire_level(self.building)
        if level <= 0:
            return "Fire out"
        if level < FIRE_LOW:
            return "Fire low"
        return None

    def opened_announcement(self) -> str:
        text = super().opened_announcement()
        status = self.fire_status()
        return f"{text}, {status}" if status else text

    def build_sections(self) -> List[Section]:
        self.workers.initialize(self.building)
        self.upgrades.initialize(self.building)

        sections = [Section("Fire", "fire")]
        # Sacrifices only exist once the hearth offers them
        if self.state.sacrifices(self.building):
            sections.append(Section("Sacrifice", "sacrifice"))
        if self.workers.has_workers():
            sections.append(Section("Workers", "workers"))
        if self.upgrades.has_upgrades():
            sections.append(Section("Upgrades", "upgrades"))
        return sections

    def clear_data(self) -> None:
        super().clear_data()
        self.workers.clear()
        self.upgrades.clear()
