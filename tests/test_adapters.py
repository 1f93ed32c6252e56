from __future__ import annotations

from pathlib import Path

import pytest

from navlib.adapter import Modifiers
from navlib.adapters import (
    HearthAdapter,
    HouseAdapter,
    PortAdapter,
    ProductionAdapter,
    RelicAdapter,
    SimpleAdapter,
    adapter_for,
)
from navlib.adapters.common import format_duration, format_number
from navlib.cursor import Level
from navlib.engine import NavigationEngine
from navlib.sandbox import InMemoryGameState, load_scenario
from navlib.speech import AudioCue, RecordingCues, RecordingSpeech

SCENARIO = Path(__file__).resolve().parent.parent / "scenarios" / "settlement.yaml"


@pytest.fixture
def state():
    return load_scenario(SCENARIO)


def open_adapter(state, building: str):
    adapter = adapter_for(state.building_kind(building))(state)
    adapter.open(building)
    return adapter


def section_names(adapter):
    return [s.name for s in adapter.sections()]


@pytest.mark.parametrize(
    "kind,expected",
    [
        ("production", ProductionAdapter),
        ("house", HouseAdapter),
        ("hearth", HearthAdapter),
        ("port", PortAdapter),
        ("relic", RelicAdapter),
        ("simple", SimpleAdapter),
        (" House ", HouseAdapter),
        ("decoration", SimpleAdapter),
        ("", SimpleAdapter),
    ],
)
def test_adapter_registry(kind, expected):
    assert adapter_for(kind) is expected


def test_production_sections(state):
    adapter = open_adapter(state, "bakery")
    assert section_names(adapter) == ["Info", "Workers", "Recipes", "Storage", "Upgrades"]
    assert adapter.opened_announcement() == "Bakery"
    assert adapter.announce_section(4) == "Upgrades, 0 of 2 achieved"


def test_unfinished_and_paused_buildings(state):
    sawmill = open_adapter(state, "sawmill")
    assert sawmill.opened_announcement() == "Sawmill, under construction"
    assert section_names(sawmill) == ["Info", "Workers"]
    result = sawmill.item_action(0, 1)
    assert not result.success
    assert result.message == "Cannot change status"

    camp = open_adapter(state, "lumber_camp")
    assert camp.opened_announcement() == "Lumber Camp, paused"


def test_recipe_tree(state):
    adapter = open_adapter(state, "bakery")
    recipes = 2
    assert adapter.item_count(recipes) == 2
    assert adapter.announce_item(recipes, 0) == "Bread: enabled, limit unlimited"
    assert adapter.announce_item(recipes, 1) == "Biscuits: disabled, limit 20"

    # status, production, limit + two ingredient slots
    assert adapter.sub_item_count(recipes, 0) == 5
    assert adapter.announce_sub_item(recipes, 0, 0) == "Status: enabled. Space to toggle"
    assert adapter.announce_sub_item(recipes, 0, 1) == "Produces: 5 Bread every 45 seconds. 2 stars"
    assert adapter.announce_sub_item(recipes, 1, 1) == "Produces: 8 Biscuits every 62.5 seconds. 1 stars"
    assert adapter.announce_sub_item(recipes, 0, 2) == "Limit: unlimited. Plus/minus to adjust"
    assert adapter.announce_sub_item(recipes, 0, 3) == (
        "Ingredient 1: 3 Flour. Disabled: 5 Grain. Enter to edit options"
    )
    assert adapter.announce_sub_item(recipes, 0, 4) == "Ingredient 2: 1 Water"

    # Only slots with a choice open a fourth level
    assert adapter.sub_sub_item_count(recipes, 0, 3) == 2
    assert adapter.sub_sub_item_count(recipes, 0, 4) == 0
    assert adapter.sub_sub_item_count(recipes, 0, 0) == 0
    assert adapter.announce_sub_sub_item(recipes, 0, 3, 1) == "5 Grain: disabled. Space to toggle"


def test_recipe_toggles(state):
    adapter = open_adapter(state, "bakery")
    result = adapter.item_action(2, 0)
    assert result.success
    assert result.message == "Bread: disabled"
    assert result.cue == AudioCue.TOGGLE_OFF
    assert result.collapse_to is None

    result = adapter.sub_item_action(2, 0, 0)
    assert result.message == "Bread: enabled"
    assert result.cue == AudioCue.TOGGLE_ON

    assert adapter.sub_item_action(2, 0, 1) is None

    result = adapter.sub_sub_item_action(2, 0, 3, 1)
    assert result.message == "5 Grain: enabled"
    assert state.ingredient_options("bakery", 0, 0)[1].allowed


def test_recipe_limit_adjustment(state):
    adapter = open_adapter(state, "bakery")
    plain = Modifiers()
    shift = Modifiers(shift=True)

    assert adapter.adjust_item_value(2, 0, 1, plain).message == "Limit: 1"
    assert adapter.adjust_item_value(2, 0, -1, plain).message == "Limit: unlimited"

    stuck = adapter.adjust_item_value(2, 0, -1, plain)
    assert not stuck.success
    assert stuck.cue == AudioCue.FAILED

    result = adapter.adjust_item_value(2, 0, 1, shift)
    assert result.message == "Limit: 10"
    assert result.cue == AudioCue.CLICK

    assert adapter.adjust_item_value(2, 1, -1, shift).message == "Limit: 10"
    assert adapter.adjust_item_value(2, 1, -1, shift).message == "Limit: unlimited"
    assert state.recipe_limit("bakery", 1) == 0


def test_info_status_toggle(state):
    adapter = open_adapter(state, "bakery")
    assert adapter.announce_item(0, 0) == "Name: Bakery"
    assert adapter.announce_item(0, 1) == "Description: Bakes bread and biscuits from flour."
    assert adapter.announce_item(0, 2) == "Status: Active. Space to toggle"
    assert adapter.item_action(0, 0) is None

    result = adapter.item_action(0, 2)
    assert result.message == "Paused"
    assert result.cue == AudioCue.TOGGLE_OFF
    assert state.is_sleeping("bakery")
    assert adapter.opened_announcement() == "Bakery, paused"


def test_storage_rereads_goods(state):
    adapter = open_adapter(state, "bakery")
    storage = 3
    assert adapter.announce_item(storage, 0) == "Bread: 4"
    state.buildings["bakery"]["storage"]["Bread"] = 9
    assert adapter.announce_item(storage, 0) == "Bread: 9"


def test_house(state):
    adapter = open_adapter(state, "shelter")
    assert section_names(adapter) == ["Residents", "Upgrades"]
    assert adapter.item_count(0) == 3
    assert adapter.announce_item(0, 0) == "Capacity: 2 of 4"
    assert adapter.announce_item(0, 1) == "Ada, Human"
    assert adapter.announce_item(0, 2) == "Lia, Lizard"
    assert adapter.announce_section(1) == "Upgrades, 1 of 1 achieved"
    assert adapter.announce_item(1, 0) == "Insulation: Achieved, Warm Walls"


def test_empty_house_lists_none(state):
    state.buildings["shelter"]["residents"] = []
    adapter = open_adapter(state, "shelter")
    assert adapter.item_count(0) == 2
    assert adapter.announce_item(0, 1) == "None"


def test_hearth_fire(state):
    adapter = open_adapter(state, "hearth")
    assert section_names(adapter) == ["Fire", "Sacrifice", "Workers"]
    assert adapter.opened_announcement() == "Ancient Hearth, Fire low"
    assert adapter.announce_section(0) == "Fire, Fire low"
    assert adapter.announce_item(0, 0) == "Fuel: 20 percent"
    assert adapter.announce_item(0, 1) == "Fuel types: 2 of 3 allowed"
    assert adapter.sub_item_count(0, 0) == 0
    assert adapter.sub_item_count(0, 1) == 3

    result = adapter.sub_item_action(0, 1, 2)
    assert result.message == "Oil: allowed"
    assert result.cue == AudioCue.TOGGLE_ON

    state.buildings["hearth"]["fire_level"] = 0.0
    assert adapter.opened_announcement() == "Ancient Hearth, Fire out"
    assert adapter.announce_item(0, 0) == "Fuel: Fire is out"


def test_hearth_sacrifices(state):
    adapter = open_adapter(state, "hearth")
    plain = Modifiers()
    assert adapter.announce_item(1, 0) == "Fire Blessing: off, costs 2 Coal per minute. Plus/minus to adjust"
    assert adapter.announce_item(1, 1) == "Longer Nights: level 1 of 2. Plus/minus to adjust"

    assert adapter.adjust_item_value(1, 0, 1, plain).message == "Fire Blessing: level 1"
    assert adapter.adjust_item_value(1, 1, 1, plain).message == "Longer Nights: level 2"
    assert not adapter.adjust_item_value(1, 1, 1, plain).success

    result = adapter.adjust_item_value(1, 1, -1, Modifiers(shift=True))
    assert result.message == "Longer Nights: off"
    assert result.cue == AudioCue.TOGGLE_OFF


def test_hearth_uses_its_own_worker_pool(state):
    adapter = open_adapter(state, "hearth")
    workers = 2
    assert adapter.item_count(workers) == 2
    assert adapter.announce_item(workers, 0) == "Worker slot 1: Lia, Lizard"
    assert adapter.announce_sub_item(workers, 1, 2) == "Lizard: 2 available, firekeeper specialist"

    result = adapter.sub_item_action(workers, 1, 2)
    assert result.success
    assert state.hearth_worker_ids("hearth")[1] > 0


def test_building_kind_is_case_insensitive():
    state = InMemoryGameState(
        {
            "races": [{"name": "Human", "free": 1}],
            "buildings": {"fire": {"kind": " Hearth ", "hearth_workers": [0], "workers": [5]}},
        }
    )
    assert state.building_kind("fire") == "hearth"
    adapter = open_adapter(state, "fire")
    assert isinstance(adapter, HearthAdapter)

    workers = section_names(adapter).index("Workers")
    result = adapter.sub_item_action(workers, 0, 0)
    assert result.success
    assert state.hearth_worker_ids("fire")[0] > 0
    assert state.worker_ids("fire") == [5]


def test_port_level_and_expedition(state):
    adapter = open_adapter(state, "harbor")
    assert section_names(adapter) == ["Level", "Start expedition", "Workers"]
    assert adapter.announce_section(0) == "Level: Level 1 of 5, duration 5 minutes. Plus/minus to adjust"

    result = adapter.adjust_section_value(0, 1, Modifiers())
    assert result.message == "Level 2 of 5, duration 10 minutes"
    assert adapter.adjust_section_value(0, 1, Modifiers(shift=True)).message == "Level 5 of 5, duration 25 minutes"
    assert not adapter.adjust_section_value(0, 1, Modifiers()).success
    adapter.adjust_section_value(0, -10, Modifiers())
    assert not adapter.adjust_section_value(0, -1, Modifiers()).success
    assert state.port_level("harbor") == 1

    assert adapter.item_count(1) == 0
    result = adapter.section_action(1)
    assert result.message == "Expedition started"
    assert section_names(adapter) == ["Status", "Workers"]
    assert adapter.announce_section(0) == "Status: expedition in progress, 0 percent"


def test_port_start_through_engine(state):
    adapter = PortAdapter(state)
    speech = RecordingSpeech()
    cues = RecordingCues()
    engine = NavigationEngine(adapter, speech, cues)
    engine.open("harbor")
    engine.move(1)
    engine.enter()
    assert speech.last == "Expedition started"
    assert cues.last == AudioCue.CONFIRM
    # The start section vanished; the cursor stays on a valid section
    assert engine.cursor.section == 1
    assert adapter.sections()[engine.cursor.section].name == "Workers"


def test_relic_idle_sections(state):
    adapter = open_adapter(state, "ruins")
    assert section_names(adapter) == ["Info", "Decisions", "Requirements", "Rewards", "Start investigation"]
    assert adapter.announce_item(1, 0) == (
        "Search the cellar, 2 minutes, selected, requires: Planks 4, rewards: Ancient tablet"
    )
    assert adapter.announce_item(2, 0) == "Planks: 4"
    assert adapter.announce_item(3, 0) == "Ancient tablet"
    assert adapter.announce_section(4) == "Start investigation: Search the cellar, 2 minutes. Enter to start"


def test_relic_decision_selection(state):
    adapter = open_adapter(state, "ruins")
    result = adapter.item_action(1, 1)
    assert result.message == "Selected: Clear the rubble"
    assert result.cue == AudioCue.CLICK
    assert state.relic_selected_decision("ruins") == 1
    assert adapter.announce_section(2) == "Requirements: none"
    assert adapter.item_count(2) == 0
    assert adapter.announce_item(3, 0) == "Bricks 10"


def test_relic_single_decision_has_no_decision_section():
    state = InMemoryGameState(
        {"buildings": {"cache": {"kind": "relic", "relic": {"decisions": [{"label": "Open", "working_time": 30}]}}}}
    )
    adapter = open_adapter(state, "cache")
    assert section_names(adapter) == ["Info", "Requirements", "Rewards", "Start investigation"]
    assert adapter.announce_section(2) == "Rewards: none"


def test_relic_start_consumes_goods_and_cancel_returns_them(state):
    adapter = open_adapter(state, "ruins")
    result = adapter.section_action(4)
    assert result.message == "Investigation started"
    assert result.collapse_to == Level.SECTION
    assert state.goods["Planks"] == 8
    assert section_names(adapter) == ["Info", "Status", "Workers"]
    assert adapter.announce_section(1) == "Status: In progress"
    assert adapter.announce_item(1, 0) == "Progress: 0 percent"
    assert adapter.announce_item(1, 1) == "Cancel investigation"

    result = adapter.item_action(1, 1)
    assert result.message == "Investigation cancelled"
    assert result.collapse_to == Level.SECTION
    assert state.relic_state("ruins") == "idle"
    assert state.goods["Planks"] == 12
    assert section_names(adapter)[-1] == "Start investigation"


def test_relic_start_fails_without_goods(state):
    state.goods["Planks"] = 2
    adapter = open_adapter(state, "ruins")
    result = adapter.section_action(4)
    assert not result.success
    assert result.message == "Cannot start investigation"
    assert state.relic_state("ruins") == "idle"
    assert state.goods["Planks"] == 2


def test_relic_uses_its_own_worker_pool(state):
    adapter = open_adapter(state, "ruins")
    adapter.section_action(4)
    workers = 2
    assert adapter.item_count(workers) == 2

    result = adapter.sub_item_action(workers, 0, 0)
    assert result.success
    assert state.relic_worker_ids("ruins")[0] > 0
    assert state.worker_ids("ruins") == []

    # Cancelling sends the investigators home
    adapter.item_action(1, 1)
    assert state.relic_worker_ids("ruins") == [0, 0]
    assert state.races[0]["free"] == 3


def test_relic_resolved():
    state = InMemoryGameState(
        {"buildings": {"cache": {"kind": "relic", "relic_workers": [0], "relic": {"state": "resolved"}}}}
    )
    adapter = open_adapter(state, "cache")
    assert section_names(adapter) == ["Info", "Status"]
    assert adapter.announce_section(1) == "Status: Resolved"
    assert adapter.item_count(1) == 0
    assert not state.start_relic_investigation("cache")
    assert not state.select_relic_decision("cache", 0)


def test_relic_start_through_engine(state):
    adapter = RelicAdapter(state)
    speech = RecordingSpeech()
    cues = RecordingCues()
    engine = NavigationEngine(adapter, speech, cues)
    engine.open("ruins")
    for _ in range(4):
        engine.move(1)
    engine.enter()
    assert speech.last == "Investigation started"
    assert engine.cursor.level == Level.SECTION
    assert engine.cursor.section < len(adapter.sections())


def test_simple_adapter_for_unknown_kind(state):
    adapter = open_adapter(state, "monument")
    assert isinstance(adapter, SimpleAdapter)
    assert section_names(adapter) == ["Info"]
    assert adapter.announce_item(0, 2) == "Status: Active"
    assert adapter.item_action(0, 2) is None


def test_close_clears_sections(state):
    adapter = open_adapter(state, "bakery")
    adapter.close()
    assert adapter.sections() == []
    assert adapter.building is None


@pytest.mark.parametrize(
    "seconds,expected",
    [(45, "45 seconds"), (300, "5 minutes"), (330, "5 minutes 30 seconds"), (0, "0 seconds")],
)
def test_format_duration(seconds, expected):
    assert format_duration(seconds) == expected


def test_format_number():
    assert format_number(45.0) == "45"
    assert format_number(62.5) == "62.5"
