"""Game State Accessor interface.

Everything the navigators know about the live simulation goes through this
facade. Reads return value snapshots; writes return ``True``/``False`` and never
raise for ordinary "not possible right now" conditions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Protocol


@dataclass(frozen=True)
class RaceAvailability:
    name: str
    free: int


@dataclass(frozen=True)
class GoodCost:
    good: str
    required: int
    available: int = 0

    @property
    def satisfied(self) -> bool:
        return self.available >= self.required


@dataclass(frozen=True)
class Perk:
    name: str
    description: Optional[str] = None
    chosen: bool = False


@dataclass(frozen=True)
class UpgradeLevel:
    index: int
    name: str
    achieved: bool = False
    costs: List[GoodCost] = field(default_factory=list)
    perks: List[Perk] = field(default_factory=list)

    @property
    def can_afford(self) -> bool:
        return all(c.satisfied for c in self.costs)


@dataclass(frozen=True)
class RecipeInfo:
    name: str
    product: str
    amount: int = 1
    time: float = 0.0
    grade: int = 0


@dataclass(frozen=True)
class IngredientOption:
    good: str
    amount: int
    allowed: bool = True


@dataclass(frozen=True)
class GoodAmount:
    good: str
    amount: int


@dataclass(frozen=True)
class FuelOption:
    good: str
    allowed: bool = True


@dataclass(frozen=True)
class SacrificeInfo:
    name: str
    level: int = 0
    max_level: int = 3
    cost: Optional[str] = None


@dataclass(frozen=True)
class RelicDecision:
    label: str
    working_time: float = 0.0
    requirements: List[GoodAmount] = field(default_factory=list)
    rewards: List[str] = field(default_factory=list)


class GameStateAccessor(Protocol):
    # Building
    def building_kind(self, building: str) -> str: ...
    def building_name(self, building: str) -> Optional[str]: ...
    def building_description(self, building: str) -> Optional[str]: ...
    def is_finished(self, building: str) -> bool: ...
    def is_sleeping(self, building: str) -> bool: ...
    def toggle_sleep(self, building: str) -> bool: ...

    # Workers
    def worker_ids(self, building: str) -> List[int]: ...
    def is_worker_slot_empty(self, building: str, slot: int) -> bool: ...
    def worker_description(self, worker_id: int) -> Optional[str]: ...
    def races_with_free_workers(self, include_zero_free: bool = True) -> List[RaceAvailability]: ...
    def race_bonus(self, building: str, race: str) -> Optional[str]: ...
    def assign_worker_to_slot(self, building: str, slot: int, race: str) -> bool: ...
    def unassign_worker_from_slot(self, building: str, slot: int) -> bool: ...

    # Upgrades
    def has_upgrades(self, building: str) -> bool: ...
    def upgrade_levels(self, building: str) -> List[UpgradeLevel]: ...
    def can_afford_upgrade(self, building: str, level: int) -> bool: ...
    def purchase_upgrade(self, building: str, level: int, perk: int) -> bool: ...

    # Recipes
    def recipes(self, building: str) -> List[RecipeInfo]: ...
    def is_recipe_active(self, building: str, recipe: int) -> bool: ...
    def toggle_recipe(self, building: str, recipe: int) -> bool: ...
    def recipe_limit(self, building: str, recipe: int) -> int: ...
    def set_recipe_limit(self, building: str, recipe: int, limit: int) -> bool: ...
    def ingredient_slot_count(self, building: str, recipe: int) -> int: ...
    def ingredient_options(self, building: str, recipe: int, slot: int) -> List[IngredientOption]: ...
    def toggle_ingredient(self, building: str, recipe: int, slot: int, option: int) -> bool: ...

    # Storage and residents
    def stored_goods(self, building: str) -> List[GoodAmount]: ...
    def residents(self, building: str) -> List[int]: ...
    def house_capacity(self, building: str) -> int: ...
    def actor_name(self, actor_id: int) -> Optional[str]: ...
    def actor_race(self, actor_id: int) -> Optional[str]: ...

    # Hearth
    def hearth_fire_level(self, building: str) -> float: ...
    def hearth_fuels(self, building: str) -> List[FuelOption]: ...
    def toggle_fuel(self, building: str, fuel: int) -> bool: ...
    def hearth_worker_ids(self, building: str) -> List[int]: ...
    def sacrifices(self, building: str) -> List[SacrificeInfo]: ...
    def set_sacrifice_level(self, building: str, sacrifice: int, level: int) -> bool: ...

    # Port
    def port_level(self, building: str) -> int: ...
    def port_max_level(self, building: str) -> int: ...
    def port_duration(self, building: str, level: int) -> float: ...
    def set_port_level(self, building: str, level: int) -> bool: ...
    def port_expedition_running(self, building: str) -> bool: ...
    def port_progress(self, building: str) -> float: ...
    def start_expedition(self, building: str) -> bool: ...

    # Relic investigations; state is "idle", "running" or "resolved"
    def relic_decisions(self, building: str) -> List[RelicDecision]: ...
    def relic_selected_decision(self, building: str) -> int: ...
    def select_relic_decision(self, building: str, decision: int) -> bool: ...
    def relic_state(self, building: str) -> str: ...
    def relic_progress(self, building: str) -> float: ...
    def start_relic_investigation(self, building: str) -> bool: ...
    def cancel_relic_investigation(self, building: str) -> bool: ...
    def relic_worker_ids(self, building: str) -> List[int]: ...
