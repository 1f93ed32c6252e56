"""In-memory Game State Accessor backed by a YAML scenario file.

The real game is not available to this package, so scenarios describe a small
settlement (races, villagers, goods and buildings) that the CLI, the TUI and
the tests can navigate and mutate.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .gamestate import (
    FuelOption,
    GoodAmount,
    GoodCost,
    IngredientOption,
    Perk,
    RaceAvailability,
    RecipeInfo,
    RelicDecision,
    SacrificeInfo,
    UpgradeLevel,
)

logger = logging.getLogger(__name__)


class ScenarioError(RuntimeError):
    pass


RELIC_STATES = ("idle", "running", "resolved")


def _as_recipe(raw: Dict[str, Any]) -> Dict[str, Any]:
    ingredients = []
    for slot in raw.get("ingredients") or []:
        ingredients.append(
            [
                {
                    "good": str(opt.get("good", "")),
                    "amount": int(opt.get("amount", 1)),
                    "allowed": bool(opt.get("allowed", True)),
                }
                for opt in (slot or [])
            ]
        )
    return {
        "name": str(raw.get("name", "")),
        "product": str(raw.get("product") or raw.get("name", "")),
        "amount": int(raw.get("amount", 1)),
        "time": float(raw.get("time", 0)),
        "grade": int(raw.get("grade", 0)),
        "active": bool(raw.get("active", True)),
        "limit": int(raw.get("limit", 0)),
        "ingredients": ingredients,
    }


def _as_upgrade(index: int, raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "index": index,
        "name": str(raw.get("name") or f"Level {index + 1}"),
        "achieved": bool(raw.get("achieved", False)),
        "cost": {str(c["good"]): int(c.get("required", c.get("amount", 0))) for c in raw.get("cost") or []},
        "perks": [
            {
                "name": str(p.get("name", "")),
                "description": p.get("description"),
                "chosen": bool(p.get("chosen", False)),
            }
            for p in raw.get("perks") or []
        ],
    }


def _as_relic(raw: Dict[str, Any]) -> Dict[str, Any]:
    state = str(raw.get("state", "idle")).strip().lower()
    if state not in RELIC_STATES:
        raise ScenarioError(f"Relic state must be one of {', '.join(RELIC_STATES)}, got '{state}'")
    return {
        "decisions": [
            {
                "label": str(d.get("label", "")),
                "working_time": float(d.get("working_time", 0)),
                "requirements": {str(g["good"]): int(g.get("amount", 1)) for g in d.get("requirements") or []},
                "rewards": [str(r) for r in d.get("rewards") or []],
            }
            for d in raw.get("decisions") or []
        ],
        "selected": int(raw.get("selected", 0)),
        "state": state,
        "progress": float(raw.get("progress", 0)),
    }


def _as_building(building_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise ScenarioError(f"Building '{building_id}' must be a mapping")
    return {
        "kind": str(raw.get("kind", "simple")).strip().lower(),
        "name": raw.get("name") or building_id,
        "description": raw.get("description"),
        "finished": bool(raw.get("finished", True)),
        "sleeping": bool(raw.get("sleeping", False)),
        "workers": [int(w or 0) for w in raw.get("workers") or []],
        "recipes": [_as_recipe(r) for r in raw.get("recipes") or []],
        "storage": {str(g["good"]): int(g.get("amount", 0)) for g in raw.get("storage") or []},
        "upgrades": [_as_upgrade(i, u) for i, u in enumerate(raw.get("upgrades") or [])],
        "residents": [int(r) for r in raw.get("residents") or []],
        "capacity": int(raw.get("capacity", 0)),
        "fire_level": float(raw.get("fire_level", 1.0)),
        "fuels": [
            {"good": str(f.get("good", "")), "allowed": bool(f.get("allowed", True))}
            for f in raw.get("fuels") or []
        ],
        "hearth_workers": [int(w or 0) for w in raw.get("hearth_workers") or []],
        "sacrifices": [
            {
                "name": str(s.get("name", "")),
                "level": int(s.get("level", 0)),
                "max_level": int(s.get("max_level", 3)),
                "cost": s.get("cost"),
            }
            for s in raw.get("sacrifices") or []
        ],
        "relic_workers": [int(w or 0) for w in raw.get("relic_workers") or []],
        "relic": _as_relic(raw.get("relic") or {}),
        "port": {
            "level": int((raw.get("port") or {}).get("level", 1)),
            "max_level": int((raw.get("port") or {}).get("max_level", 1)),
            "base_duration": float((raw.get("port") or {}).get("base_duration", 60)),
            "running": bool((raw.get("port") or {}).get("running", False)),
            "progress": float((raw.get("port") or {}).get("progress", 0)),
        },
    }


class InMemoryGameState:
    """Mutable settlement snapshot implementing ``GameStateAccessor``."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, source_path: Optional[Path] = None) -> None:
        data = copy.deepcopy(data or {})
        self.source_path = source_path
        self.races: List[Dict[str, Any]] = [
            {
                "name": str(r["name"]),
                "free": int(r.get("free", 0)),
                "bonuses": dict(r.get("bonuses") or {}),
            }
            for r in data.get("races") or []
        ]
        self.villagers: Dict[int, Dict[str, Any]] = {
            int(vid): {"name": str(v.get("name", "")), "race": v.get("race")}
            for vid, v in (data.get("villagers") or {}).items()
        }
        self.goods: Dict[str, int] = {str(k): int(v) for k, v in (data.get("goods") or {}).items()}
        self.buildings: Dict[str, Dict[str, Any]] = {
            str(bid): _as_building(str(bid), raw or {}) for bid, raw in (data.get("buildings") or {}).items()
        }

    # ------------------------------------------------------------------
    # helpers

    def _building(self, building: str) -> Dict[str, Any]:
        try:
            return self.buildings[building]
        except KeyError:
            raise ScenarioError(f"Building not found: {building}") from None

    def _race(self, race: str) -> Optional[Dict[str, Any]]:
        for r in self.races:
            if r["name"] == race:
                return r
        return None

    def _new_villager(self, race: str) -> int:
        vid = max(self.villagers, default=0) + 1
        self.villagers[vid] = {"name": f"{race} {vid}", "race": race}
        return vid

    def _take_worker(self, race: str) -> Optional[int]:
        entry = self._race(race)
        if entry is None or entry["free"] <= 0:
            return None
        entry["free"] -= 1
        return self._new_villager(race)

    def _release_worker(self, worker_id: int) -> None:
        villager = self.villagers.get(worker_id)
        entry = self._race(villager["race"]) if villager else None
        if entry is not None:
            entry["free"] += 1

    def _slots(self, building: str) -> List[int]:
        # Hearths and relics staff their work from a separate worker pool
        b = self._building(building)
        if b["kind"] == "hearth":
            return b["hearth_workers"]
        if b["kind"] == "relic":
            return b["relic_workers"]
        return b["workers"]

    def building_ids(self) -> List[str]:
        return list(self.buildings)

    # ------------------------------------------------------------------
    # building

    def building_kind(self, building: str) -> str:
        return self._building(building)["kind"]

    def building_name(self, building: str) -> Optional[str]:
        return self._building(building)["name"]

    def building_description(self, building: str) -> Optional[str]:
        return self._building(building)["description"]

    def is_finished(self, building: str) -> bool:
        return self._building(building)["finished"]

    def is_sleeping(self, building: str) -> bool:
        return self._building(building)["sleeping"]

    def toggle_sleep(self, building: str) -> bool:
        b = self._building(building)
        if not b["finished"]:
            return False
        b["sleeping"] = not b["sleeping"]
        return True

    # ------------------------------------------------------------------
    # workers

    def worker_ids(self, building: str) -> List[int]:
        return list(self._building(building)["workers"])

    def is_worker_slot_empty(self, building: str, slot: int) -> bool:
        workers = self._slots(building)
        return not (0 <= slot < len(workers)) or workers[slot] <= 0

    def worker_description(self, worker_id: int) -> Optional[str]:
        villager = self.villagers.get(worker_id)
        if not villager:
            return None
        if villager.get("race"):
            return f"{villager['name']}, {villager['race']}"
        return villager["name"]

    def races_with_free_workers(self, include_zero_free: bool = True) -> List[RaceAvailability]:
        return [
            RaceAvailability(r["name"], r["free"])
            for r in self.races
            if include_zero_free or r["free"] > 0
        ]

    def race_bonus(self, building: str, race: str) -> Optional[str]:
        entry = self._race(race)
        if entry is None:
            return None
        kind = self.building_kind(building)
        return entry["bonuses"].get(building) or entry["bonuses"].get(kind)

    def _assign(self, workers: List[int], slot: int, race: str) -> bool:
        if not (0 <= slot < len(workers)) or workers[slot] > 0:
            return False
        worker_id = self._take_worker(race)
        if worker_id is None:
            return False
        workers[slot] = worker_id
        return True

    def _unassign(self, workers: List[int], slot: int) -> bool:
        if not (0 <= slot < len(workers)) or workers[slot] <= 0:
            return False
        self._release_worker(workers[slot])
        workers[slot] = 0
        return True

    def assign_worker_to_slot(self, building: str, slot: int, race: str) -> bool:
        return self._assign(self._slots(building), slot, race)

    def unassign_worker_from_slot(self, building: str, slot: int) -> bool:
        return self._unassign(self._slots(building), slot)

    # ------------------------------------------------------------------
    # upgrades

    def has_upgrades(self, building: str) -> bool:
        return bool(self._building(building)["upgrades"])

    def upgrade_levels(self, building: str) -> List[UpgradeLevel]:
        levels = []
        for u in self._building(building)["upgrades"]:
            levels.append(
                UpgradeLevel(
                    index=u["index"],
                    name=u["name"],
                    achieved=u["achieved"],
                    costs=[GoodCost(g, req, self.goods.get(g, 0)) for g, req in u["cost"].items()],
                    perks=[Perk(p["name"], p["description"], p["chosen"]) for p in u["perks"]],
                )
            )
        return levels

    def can_afford_upgrade(self, building: str, level: int) -> bool:
        upgrades = self._building(building)["upgrades"]
        if not (0 <= level < len(upgrades)):
            return False
        return all(self.goods.get(g, 0) >= req for g, req in upgrades[level]["cost"].items())

    def purchase_upgrade(self, building: str, level: int, perk: int) -> bool:
        upgrades = self._building(building)["upgrades"]
        if not (0 <= level < len(upgrades)):
            return False
        target = upgrades[level]
        if target["achieved"] or any(not u["achieved"] for u in upgrades[:level]):
            return False
        if not (0 <= perk < len(target["perks"])) or not self.can_afford_upgrade(building, level):
            return False
        for good, req in target["cost"].items():
            self.goods[good] = self.goods.get(good, 0) - req
        target["achieved"] = True
        target["perks"][perk]["chosen"] = True
        logger.info("Purchased %s / %s for %s", target["name"], target["perks"][perk]["name"], building)
        return True

    # ------------------------------------------------------------------
    # recipes

    def _recipe(self, building: str, recipe: int) -> Optional[Dict[str, Any]]:
        recipes = self._building(building)["recipes"]
        return recipes[recipe] if 0 <= recipe < len(recipes) else None

    def recipes(self, building: str) -> List[RecipeInfo]:
        return [
            RecipeInfo(r["name"], r["product"], r["amount"], r["time"], r["grade"])
            for r in self._building(building)["recipes"]
        ]

    def is_recipe_active(self, building: str, recipe: int) -> bool:
        r = self._recipe(building, recipe)
        return bool(r and r["active"])

    def toggle_recipe(self, building: str, recipe: int) -> bool:
        r = self._recipe(building, recipe)
        if r is None:
            return False
        r["active"] = not r["active"]
        return True

    def recipe_limit(self, building: str, recipe: int) -> int:
        r = self._recipe(building, recipe)
        return r["limit"] if r else 0

    def set_recipe_limit(self, building: str, recipe: int, limit: int) -> bool:
        r = self._recipe(building, recipe)
        if r is None or limit < 0:
            return False
        r["limit"] = limit
        return True

    def ingredient_slot_count(self, building: str, recipe: int) -> int:
        r = self._recipe(building, recipe)
        return len(r["ingredients"]) if r else 0

    def ingredient_options(self, building: str, recipe: int, slot: int) -> List[IngredientOption]:
        r = self._recipe(building, recipe)
        if r is None or not (0 <= slot < len(r["ingredients"])):
            return []
        return [IngredientOption(o["good"], o["amount"], o["allowed"]) for o in r["ingredients"][slot]]

    def toggle_ingredient(self, building: str, recipe: int, slot: int, option: int) -> bool:
        r = self._recipe(building, recipe)
        if r is None or not (0 <= slot < len(r["ingredients"])):
            return False
        options = r["ingredients"][slot]
        if not (0 <= option < len(options)):
            return False
        options[option]["allowed"] = not options[option]["allowed"]
        return True

    # ------------------------------------------------------------------
    # storage and residents

    def stored_goods(self, building: str) -> List[GoodAmount]:
        return [GoodAmount(g, a) for g, a in self._building(building)["storage"].items()]

    def residents(self, building: str) -> List[int]:
        return list(self._building(building)["residents"])

    def house_capacity(self, building: str) -> int:
        return self._building(building)["capacity"]

    def actor_name(self, actor_id: int) -> Optional[str]:
        villager = self.villagers.get(actor_id)
        return villager["name"] if villager else None

    def actor_race(self, actor_id: int) -> Optional[str]:
        villager = self.villagers.get(actor_id)
        return villager.get("race") if villager else None

    # ------------------------------------------------------------------
    # hearth

    def hearth_fire_level(self, building: str) -> float:
        return self._building(building)["fire_level"]

    def hearth_fuels(self, building: str) -> List[FuelOption]:
        return [FuelOption(f["good"], f["allowed"]) for f in self._building(building)["fuels"]]

    def toggle_fuel(self, building: str, fuel: int) -> bool:
        fuels = self._building(building)["fuels"]
        if not (0 <= fuel < len(fuels)):
            return False
        fuels[fuel]["allowed"] = not fuels[fuel]["allowed"]
        return True

    def hearth_worker_ids(self, building: str) -> List[int]:
        return list(self._building(building)["hearth_workers"])

    def sacrifices(self, building: str) -> List[SacrificeInfo]:
        return [
            SacrificeInfo(s["name"], s["level"], s["max_level"], s["cost"])
            for s in self._building(building)["sacrifices"]
        ]

    def set_sacrifice_level(self, building: str, sacrifice: int, level: int) -> bool:
        entries = self._building(building)["sacrifices"]
        if not (0 <= sacrifice < len(entries)):
            return False
        entry = entries[sacrifice]
        if not (0 <= level <= entry["max_level"]):
            return False
        entry["level"] = level
        return True

    # ------------------------------------------------------------------
    # port

    def port_level(self, building: str) -> int:
        return self._building(building)["port"]["level"]

    def port_max_level(self, building: str) -> int:
        return self._building(building)["port"]["max_level"]

    def port_duration(self, building: str, level: int) -> float:
        return self._building(building)["port"]["base_duration"] * level

    def set_port_level(self, building: str, level: int) -> bool:
        port = self._building(building)["port"]
        if port["running"] or not (1 <= level <= port["max_level"]):
            return False
        port["level"] = level
        return True

    def port_expedition_running(self, building: str) -> bool:
        return self._building(building)["port"]["running"]

    def port_progress(self, building: str) -> float:
        return self._building(building)["port"]["progress"]

    def start_expedition(self, building: str) -> bool:
        port = self._building(building)["port"]
        if port["running"] or not self.is_finished(building):
            return False
        port["running"] = True
        port["progress"] = 0.0
        return True

    # ------------------------------------------------------------------
    # relic

    def _relic(self, building: str) -> Dict[str, Any]:
        return self._building(building)["relic"]

    def relic_decisions(self, building: str) -> List[RelicDecision]:
        return [
            RelicDecision(
                label=d["label"],
                working_time=d["working_time"],
                requirements=[GoodAmount(g, a) for g, a in d["requirements"].items()],
                rewards=list(d["rewards"]),
            )
            for d in self._relic(building)["decisions"]
        ]

    def relic_selected_decision(self, building: str) -> int:
        return self._relic(building)["selected"]

    def select_relic_decision(self, building: str, decision: int) -> bool:
        relic = self._relic(building)
        if relic["state"] != "idle" or not (0 <= decision < len(relic["decisions"])):
            return False
        relic["selected"] = decision
        return True

    def relic_state(self, building: str) -> str:
        return self._relic(building)["state"]

    def relic_progress(self, building: str) -> float:
        return self._relic(building)["progress"]

    def _relic_requirements(self, building: str) -> Dict[str, int]:
        relic = self._relic(building)
        decisions = relic["decisions"]
        if not (0 <= relic["selected"] < len(decisions)):
            return {}
        return decisions[relic["selected"]]["requirements"]

    def start_relic_investigation(self, building: str) -> bool:
        relic = self._relic(building)
        if relic["state"] != "idle" or not self.is_finished(building):
            return False
        requirements = self._relic_requirements(building)
        if any(self.goods.get(g, 0) < need for g, need in requirements.items()):
            return False
        for good, need in requirements.items():
            self.goods[good] = self.goods.get(good, 0) - need
        relic["state"] = "running"
        relic["progress"] = 0.0
        return True

    def cancel_relic_investigation(self, building: str) -> bool:
        relic = self._relic(building)
        if relic["state"] != "running":
            return False
        # Delivered goods come back and the workers go home
        for good, need in self._relic_requirements(building).items():
            self.goods[good] = self.goods.get(good, 0) + need
        workers = self._building(building)["relic_workers"]
        for slot in range(len(workers)):
            self._unassign(workers, slot)
        relic["state"] = "idle"
        relic["progress"] = 0.0
        return True

    def relic_worker_ids(self, building: str) -> List[int]:
        return list(self._building(building)["relic_workers"])



def load_scenario(path: Path) -> InMemoryGameState:
    """Load a scenario YAML file into an ``InMemoryGameState``."""
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
    except FileNotFoundError as e:
        raise ScenarioError(f"Scenario file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ScenarioError(f"Invalid scenario file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ScenarioError(f"Scenario file {path} must contain a mapping")

    state = InMemoryGameState(data, source_path=Path(path))
    logger.info("Loaded scenario %s with %d buildings", path, len(state.buildings))
    return state
