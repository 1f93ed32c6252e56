"""Adapter for relics (ruins, caches and other investigation sites).

The sections follow the investigation phase:

* idle: Info, Decisions (only when there is a choice), Requirements, Rewards
  and a "Start investigation" section that acts on Enter
* running: Info, Status (with a "Cancel investigation" item) and Workers
* resolved: Info and Status

Upgrades are appended in every phase when the relic has any.
"""

from __future__ import annotations

from typing import List, Optional

from ..adapter import ActionResult, BuildingAdapter, Section, SectionHandler
from ..config import NavigationSettings
from ..cursor import Level
from ..gamestate import GameStateAccessor, RelicDecision
from ..speech import AudioCue
from ..upgrades import UpgradeSection
from ..workers import WorkerSection
from .common import InfoSection, format_duration

IDLE = "idle"
RUNNING = "running"
RESOLVED = "resolved"


def describe_decision(decision: RelicDecision, selected: bool = False) -> str:
    parts = [decision.label, format_duration(decision.working_time)]
    if selected:
        parts.append("selected")
    if decision.requirements:
        parts.append("requires: " + ", ".join(f"{r.good} {r.amount}" for r in decision.requirements))
    if decision.rewards:
        parts.append("rewards: " + ", ".join(decision.rewards))
    return ", ".join(parts)


class DecisionSection(SectionHandler):
    """One item per decision; Enter selects it."""

    def __init__(self, adapter: "RelicAdapter") -> None:
        self.adapter = adapter

    def item_count(self) -> int:
        return len(self.adapter.decisions())

    def announce_item(self, item: int) -> Optional[str]:
        decisions = self.adapter.decisions()
        if not (0 <= item < len(decisions)):
            return None
        return describe_decision(decisions[item], item == self.adapter.selected_index())

    def item_action(self, item: int) -> Optional[ActionResult]:
        decisions = self.adapter.decisions()
        if not (0 <= item < len(decisions)):
            return None
        if not self.adapter.state.select_relic_decision(self.adapter.building, item):
            return ActionResult.failed("Cannot change decision")
        self.adapter.refresh_data()
        return ActionResult.ok(f"Selected: {decisions[item].label}", cue=AudioCue.CLICK)

    def item_name(self, item: int) -> Optional[str]:
        decisions = self.adapter.decisions()
        return decisions[item].label if 0 <= item < len(decisions) else None


class RequirementSection(SectionHandler):
    """Goods the selected decision consumes, with what the settlement has."""

    def __init__(self, adapter: "RelicAdapter") -> None:
        self.adapter = adapter

    def _requirements(self):
        decision = self.adapter.selected_decision()
        return decision.requirements if decision else []

    def describe_section(self, name: str) -> Optional[str]:
        if not self._requirements():
            return f"{name}: none"
        return None

    def item_count(self) -> int:
        return len(self._requirements())

    def announce_item(self, item: int) -> Optional[str]:
        requirements = self._requirements()
        if not (0 <= item < len(requirements)):
            return None
        entry = requirements[item]
        return f"{entry.good}: {entry.amount}"

    def item_name(self, item: int) -> Optional[str]:
        requirements = self._requirements()
        return requirements[item].good if 0 <= item < len(requirements) else None


class RewardSection(SectionHandler):
    def __init__(self, adapter: "RelicAdapter") -> None:
        self.adapter = adapter

    def _rewards(self) -> List[str]:
        decision = self.adapter.selected_decision()
        return decision.rewards if decision else []

    def describe_section(self, name: str) -> Optional[str]:
        if not self._rewards():
            return f"{name}: none"
        return None

    def item_count(self) -> int:
        return len(self._rewards())

    def announce_item(self, item: int) -> Optional[str]:
        rewards = self._rewards()
        return rewards[item] if 0 <= item < len(rewards) else None

    def item_name(self, item: int) -> Optional[str]:
        return self.announce_item(item)


class StartSection(SectionHandler):
    def __init__(self, adapter: "RelicAdapter") -> None:
        self.adapter = adapter

    def describe_section(self, name: str) -> Optional[str]:
        decision = self.adapter.selected_decision()
        if decision is None:
            return f"{name}. Enter to start"
        return f"{name}: {decision.label}, {format_duration(decision.working_time)}. Enter to start"

    def section_action(self) -> Optional[ActionResult]:
        if not self.adapter.state.start_relic_investigation(self.adapter.building):
            return ActionResult.failed("Cannot start investigation")
        self.adapter.refresh_data()
        return ActionResult.ok("Investigation started", collapse_to=Level.SECTION)


STATUS_PROGRESS = 0
STATUS_CANCEL = 1


class StatusSection(SectionHandler):
    """While running: progress, then "Cancel investigation". Once resolved: nothing to do."""

    def __init__(self, adapter: "RelicAdapter") -> None:
        self.adapter = adapter

    def _running(self) -> bool:
        return self.adapter.phase() == RUNNING

    def describe_section(self, name: str) -> Optional[str]:
        if self._running():
            return f"{name}: In progress"
        return f"{name}: Resolved"

    def item_count(self) -> int:
        return 2 if self._running() else 0

    def announce_item(self, item: int) -> Optional[str]:
        if not self._running():
            return None
        if item == STATUS_PROGRESS:
            progress = self.adapter.state.relic_progress(self.adapter.building)
            return f"Progress: {round(progress * 100)} percent"
        if item == STATUS_CANCEL:
            return "Cancel investigation"
        return None

    def item_action(self, item: int) -> Optional[ActionResult]:
        if not self._running() or item != STATUS_CANCEL:
            return None
        if not self.adapter.state.cancel_relic_investigation(self.adapter.building):
            return ActionResult.failed("Cannot cancel investigation")
        self.adapter.refresh_data()
        return ActionResult.ok("Investigation cancelled", cue=AudioCue.TOGGLE_OFF, collapse_to=Level.SECTION)

    def item_name(self, item: int) -> Optional[str]:
        if not self._running():
            return None
        return {STATUS_PROGRESS: "Progress", STATUS_CANCEL: "Cancel"}.get(item)


class RelicAdapter(BuildingAdapter):
    NAME = "RelicAdapter"

    def __init__(self, state: GameStateAccessor, settings: Optional[NavigationSettings] = None) -> None:
        super().__init__(state, settings)
        self.workers = WorkerSection(state, worker_ids_func=state.relic_worker_ids)
        self.upgrades = UpgradeSection(state)
        self.handlers = {
            "info": InfoSection(self),
            "decisions": DecisionSection(self),
            "requirements": RequirementSection(self),
            "rewards": RewardSection(self),
            "start": StartSection(self),
            "status": StatusSection(self),
            "workers": self.workers,
            "upgrades": self.upgrades,
        }

    def phase(self) -> str:
        return self.state.relic_state(self.building)

    def decisions(self) -> List[RelicDecision]:
        return self.state.relic_decisions(self.building)

    def selected_index(self) -> int:
        return self.state.relic_selected_decision(self.building)

    def selected_decision(self) -> Optional[RelicDecision]:
        decisions = self.decisions()
        index = self.selected_index()
        return decisions[index] if 0 <= index < len(decisions) else None

    def build_sections(self) -> List[Section]:
        self.workers.initialize(self.building)
        self.upgrades.initialize(self.building)

        sections = [Section("Info", "info")]
        phase = self.phase()
        if phase == IDLE:
            if len(self.decisions()) > 1:
                sections.append(Section("Decisions", "decisions"))
            sections.append(Section("Requirements", "requirements"))
            sections.append(Section("Rewards", "rewards"))
            sections.append(Section("Start investigation", "start"))
        else:
            sections.append(Section("Status", "status"))
            # Workers only matter while the investigation runs
            if phase == RUNNING and self.workers.has_workers():
                sections.append(Section("Workers", "workers"))
        if self.upgrades.has_upgrades():
            sections.append(Section("Upgrades", "upgrades"))
        return sections

    def clear_data(self) -> None:
        super().clear_data()
        self.workers.clear()
        self.upgrades.clear()
