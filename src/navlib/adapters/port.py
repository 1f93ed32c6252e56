"""Adapter for ports.

While idle the panel shows the expedition level (+/- on the section) and a
"Start expedition" section that acts on Enter. Once an expedition runs both
disappear and a Status section takes their place.
"""

from __future__ import annotations

from typing import List, Optional

from ..adapter import ActionResult, BuildingAdapter, Modifiers, Section, SectionHandler
from ..config import NavigationSettings
from ..gamestate import GameStateAccessor
from ..speech import AudioCue
from ..workers import WorkerSection
from .common import format_duration


class LevelSection(SectionHandler):
    def __init__(self, adapter: "PortAdapter") -> None:
        self.adapter = adapter

    def _text(self) -> str:
        state = self.adapter.state
        building = self.adapter.building
        level = state.port_level(building)
        duration = format_duration(state.port_duration(building, level))
        return f"Level {level} of {state.port_max_level(building)}, duration {duration}"

    def describe_section(self, name: str) -> Optional[str]:
        return f"{name}: {self._text()}. Plus/minus to adjust"

    def adjust_section(self, delta: int, modifiers: Modifiers) -> Optional[ActionResult]:
        state = self.adapter.state
        building = self.adapter.building
        current = state.port_level(building)
        target = max(1, min(state.port_max_level(building), current + modifiers.step(delta, self.adapter.settings.large_step)))
        if target == current:
            return ActionResult.failed()
        if not state.set_port_level(building, target):
            return ActionResult.failed("Cannot change level")
        self.adapter.refresh_data()
        return ActionResult.ok(self._text(), cue=AudioCue.CLICK)


class StartSection(SectionHandler):
    def __init__(self, adapter: "PortAdapter") -> None:
        self.adapter = adapter

    def describe_section(self, name: str) -> Optional[str]:
        return f"{name}. Enter to start"

    def section_action(self) -> Optional[ActionResult]:
        if not self.adapter.state.start_expedition(self.adapter.building):
            return ActionResult.failed("Cannot start expedition")
        self.adapter.refresh_data()
        return ActionResult.ok("Expedition started")


class StatusSection(SectionHandler):
    def __init__(self, adapter: "PortAdapter") -> None:
        self.adapter = adapter

    def describe_section(self, name: str) -> Optional[str]:
        progress = self.adapter.state.port_progress(self.adapter.building)
        return f"{name}: expedition in progress, {round(progress * 100)} percent"


class PortAdapter(BuildingAdapter):
    NAME = "PortAdapter"

    def __init__(self, state: GameStateAccessor, settings: Optional[NavigationSettings] = None) -> None:
        super().__init__(state, settings)
        self.workers = WorkerSection(state)
        self.handlers = {
            "level": LevelSection(self),
            "start": StartSection(self),
            "status": StatusSection(self),
            "workers": self.workers,
        }

    def build_sections(self) -> List[Section]:
        self.workers.initialize(self.building)
        sections: List[Section] = []
        if self.state.port_expedition_running(self.building):
            sections.append(Section("Status", "status"))
        else:
            sections.append(Section("Level", "level"))
            sections.append(Section("Start expedition", "start"))
        if self.workers.has_workers():
            sections.append(Section("Workers", "workers"))
        return sections

    def clear_data(self) -> None:
        super().clear_data()
        self.workers.clear()
