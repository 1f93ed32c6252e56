"""Adapter for production buildings (workshops, camps, farms).

Recipes use all four levels:
- item: recipe
- sub-items: status, production info, limit, then one entry per ingredient slot
- sub-sub-items: the goods that can fill an ingredient slot (only when a slot
  has more than one option)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..adapter import ActionResult, BuildingAdapter, Modifiers, Section, SectionHandler
from ..config import NavigationSettings
from ..gamestate import GameStateAccessor, RecipeInfo
from ..speech import AudioCue
from ..upgrades import UpgradeSection
from ..workers import WorkerSection
from .common import InfoSection, format_number

logger = logging.getLogger(__name__)

RECIPE_STATUS = 0
RECIPE_PRODUCTION = 1
RECIPE_LIMIT = 2
RECIPE_INGREDIENTS_START = 3


class RecipesSection(SectionHandler):
    def __init__(self, adapter: "ProductionAdapter") -> None:
        self.adapter = adapter

    @property
    def recipes(self) -> List[RecipeInfo]:
        return self.adapter.recipes

    def _valid(self, item: int) -> bool:
        return 0 <= item < len(self.recipes)

    def _active_text(self, item: int) -> str:
        active = self.adapter.state.is_recipe_active(self.adapter.building, item)
        return "enabled" if active else "disabled"

    def _limit_text(self, item: int) -> str:
        limit = self.adapter.state.recipe_limit(self.adapter.building, item)
        return str(limit) if limit > 0 else "unlimited"

    def _slot_options(self, item: int, sub_item: int):
        slot = sub_item - RECIPE_INGREDIENTS_START
        if slot < 0:
            return []
        return self.adapter.state.ingredient_options(self.adapter.building, item, slot)

    # counts

    def item_count(self) -> int:
        return len(self.recipes)

    def sub_item_count(self, item: int) -> int:
        if not self._valid(item):
            return 0
        return RECIPE_INGREDIENTS_START + self.adapter.state.ingredient_slot_count(self.adapter.building, item)

    def sub_sub_item_count(self, item: int, sub_item: int) -> int:
        if not self._valid(item):
            return 0
        options = self._slot_options(item, sub_item)
        return len(options) if len(options) > 1 else 0

    # announcements

    def announce_item(self, item: int) -> Optional[str]:
        if not self._valid(item):
            return None
        recipe = self.recipes[item]
        return f"{recipe.name}: {self._active_text(item)}, limit {self._limit_text(item)}"

    def announce_sub_item(self, item: int, sub_item: int) -> Optional[str]:
        if not self._valid(item):
            return None
        recipe = self.recipes[item]
        if sub_item == RECIPE_STATUS:
            return f"Status: {self._active_text(item)}. Space to toggle"
        if sub_item == RECIPE_PRODUCTION:
            return (
                f"Produces: {recipe.amount} {recipe.product} every "
                f"{format_number(recipe.time)} seconds. {recipe.grade} stars"
            )
        if sub_item == RECIPE_LIMIT:
            return f"Limit: {self._limit_text(item)}. Plus/minus to adjust"

        slot = sub_item - RECIPE_INGREDIENTS_START
        options = self._slot_options(item, sub_item)
        if not options:
            return f"Ingredient {slot + 1}: Unknown"
        enabled = [f"{o.amount} {o.good}" for o in options if o.allowed]
        disabled = [f"{o.amount} {o.good}" for o in options if not o.allowed]
        text = f"Ingredient {slot + 1}: " + (", ".join(enabled) if enabled else "none enabled")
        if disabled:
            text += f". Disabled: {', '.join(disabled)}"
        if len(options) > 1:
            text += ". Enter to edit options"
        return text

    def announce_sub_sub_item(self, item: int, sub_item: int, sub_sub_item: int) -> Optional[str]:
        options = self._slot_options(item, sub_item) if self._valid(item) else []
        if not (0 <= sub_sub_item < len(options)):
            return "Invalid option"
        option = options[sub_sub_item]
        return f"{option.amount} {option.good}: {'enabled' if option.allowed else 'disabled'}. Space to toggle"

    # actions

    def _toggle(self, item: int) -> ActionResult:
        state = self.adapter.state
        building = self.adapter.building
        if not state.toggle_recipe(building, item):
            return ActionResult.failed("Cannot toggle recipe")
        active = state.is_recipe_active(building, item)
        logger.info("Toggled recipe %s to %s", self.recipes[item].name, active)
        return ActionResult.ok(
            f"{self.recipes[item].name}: {'enabled' if active else 'disabled'}",
            cue=AudioCue.TOGGLE_ON if active else AudioCue.TOGGLE_OFF,
        )

    def item_action(self, item: int) -> Optional[ActionResult]:
        if not self._valid(item):
            return None
        return self._toggle(item)

    def sub_item_action(self, item: int, sub_item: int) -> Optional[ActionResult]:
        if not self._valid(item) or sub_item != RECIPE_STATUS:
            return None
        return self._toggle(item)

    def sub_sub_item_action(self, item: int, sub_item: int, sub_sub_item: int) -> Optional[ActionResult]:
        options = self._slot_options(item, sub_item) if self._valid(item) else []
        if not (0 <= sub_sub_item < len(options)):
            return None
        state = self.adapter.state
        building = self.adapter.building
        slot = sub_item - RECIPE_INGREDIENTS_START
        if not state.toggle_ingredient(building, item, slot, sub_sub_item):
            return ActionResult.failed("Cannot change ingredient")
        option = state.ingredient_options(building, item, slot)[sub_sub_item]
        return ActionResult.ok(
            f"{option.amount} {option.good}: {'enabled' if option.allowed else 'disabled'}",
            cue=AudioCue.TOGGLE_ON if option.allowed else AudioCue.TOGGLE_OFF,
        )

    def adjust_item(self, item: int, delta: int, modifiers: Modifiers) -> Optional[ActionResult]:
        if not self._valid(item):
            return None
        state = self.adapter.state
        building = self.adapter.building
        step = modifiers.step(delta, self.adapter.settings.large_step)
        current = state.recipe_limit(building, item)
        # 0 means unlimited: + from unlimited starts counting, - stays unlimited
        if current == 0:
            new_limit = step if step > 0 else 0
        else:
            new_limit = max(0, current + step)
        if new_limit == current:
            return ActionResult.failed(f"Limit: {self._limit_text(item)}")
        if not state.set_recipe_limit(building, item, new_limit):
            return ActionResult.failed("Cannot change limit")
        return ActionResult.ok(f"Limit: {self._limit_text(item)}", cue=AudioCue.CLICK)

    # names

    def item_name(self, item: int) -> Optional[str]:
        return self.recipes[item].name if self._valid(item) else None

    def sub_item_name(self, item: int, sub_item: int) -> Optional[str]:
        if not self._valid(item):
            return None
        fixed = {RECIPE_STATUS: "Status", RECIPE_PRODUCTION: "Production", RECIPE_LIMIT: "Limit"}
        if sub_item in fixed:
            return fixed[sub_item]
        return f"Ingredient {sub_item - RECIPE_INGREDIENTS_START + 1}"


class StorageSection(SectionHandler):
    """Goods stored in the building; amounts are re-read on every announcement."""

    def __init__(self, adapter: BuildingAdapter) -> None:
        self.adapter = adapter

    def _goods(self):
        return self.adapter.state.stored_goods(self.adapter.building)

    def item_count(self) -> int:
        return len(self._goods())

    def announce_item(self, item: int) -> Optional[str]:
        goods = self._goods()
        if not (0 <= item < len(goods)):
            return None
        return f"{goods[item].good}: {goods[item].amount}"

    def item_name(self, item: int) -> Optional[str]:
        goods = self._goods()
        return goods[item].good if 0 <= item < len(goods) else None


class ProductionAdapter(BuildingAdapter):
    NAME = "ProductionAdapter"

    def __init__(self, state: GameStateAccessor, settings: Optional[NavigationSettings] = None) -> None:
        super().__init__(state, settings)
        self.recipes: List[RecipeInfo] = []
        self.workers = WorkerSection(state)
        self.upgrades = UpgradeSection(state)
        self.handlers = {
            "info": InfoSection(self, toggle_status=True),
            "workers": self.workers,
            "recipes": RecipesSection(self),
            "storage": StorageSection(self),
            "upgrades": self.upgrades,
        }

    def build_sections(self) -> List[Section]:
        self.recipes = self.state.recipes(self.building)
        self.workers.initialize(self.building)
        self.upgrades.initialize(self.building)

        sections = [Section("Info", "info")]
        if self.workers.has_workers():
            sections.append(Section("Workers", "workers"))
        if self.recipes:
            sections.append(Section("Recipes", "recipes"))
        if self.state.stored_goods(self.building):
            sections.append(Section("Storage", "storage"))
        if self.upgrades.has_upgrades():
            sections.append(Section("Upgrades", "upgrades"))
        return sections

    def clear_data(self) -> None:
        super().clear_data()
        self.recipes = []
        self.workers.clear()
        self.upgrades.clear()
