from __future__ import annotations

from unittest.mock import Mock

from navlib.cursor import Level
from navlib.gamestate import GoodCost, Perk, UpgradeLevel
from navlib.sandbox import InMemoryGameState
from navlib.upgrades import UpgradeSection


def make_state() -> InMemoryGameState:
    return InMemoryGameState(
        {
            "goods": {"Planks": 12, "Bricks": 3},
            "buildings": {
                "bakery": {
                    "kind": "production",
                    "upgrades": [
                        {
                            "name": "Sturdy Oven",
                            "cost": [{"good": "Planks", "required": 5}],
                            "perks": [
                                {"name": "Faster Baking", "description": "Recipes take 10% less time"},
                                {"name": "Bigger Batches"},
                            ],
                        },
                        {
                            "name": "Stone Oven",
                            "cost": [
                                {"good": "Bricks", "required": 10},
                                {"good": "Planks", "required": 4},
                            ],
                            "perks": [{"name": "Hot Stones"}],
                        },
                    ],
                },
                "shed": {"kind": "simple"},
            },
        }
    )


def open_section(state, building: str = "bakery") -> UpgradeSection:
    section = UpgradeSection(state)
    section.initialize(building)
    return section


def test_levels_and_progress_announcements():
    section = open_section(make_state())
    assert section.has_upgrades()
    assert section.describe_section("Upgrades") == "Upgrades, 0 of 2 achieved"
    assert section.item_count() == 2
    assert section.sub_item_count(0) == 2
    assert section.announce_item(0) == "Sturdy Oven: 12 of 5 Planks"
    assert section.announce_item(1) == "Stone Oven: Locked, complete previous level first"


def test_perk_announcements():
    section = open_section(make_state())
    assert section.announce_sub_item(0, 0) == "Faster Baking: Available. Recipes take 10% less time"
    assert section.announce_sub_item(0, 1) == "Bigger Batches: Available"
    assert section.announce_sub_item(1, 0) == "Hot Stones: Locked"
    assert section.announce_sub_item(0, 9) == "Invalid perk"


def test_purchase_marks_level_achieved_and_collapses():
    state = make_state()
    section = open_section(state)

    result = section.sub_item_action(0, 1)
    assert result.success
    assert result.message == "Purchased Bigger Batches"
    assert result.collapse_to == Level.ITEM
    assert state.goods["Planks"] == 7

    assert section.describe_section("Upgrades") == "Upgrades, 1 of 2 achieved"
    assert section.announce_item(0) == "Sturdy Oven: Achieved, Bigger Batches"
    assert section.announce_sub_item(0, 0) == "Faster Baking: Not chosen. Recipes take 10% less time"
    assert section.announce_sub_item(0, 1) == "Bigger Batches: Chosen"
    assert section.announce_item(1) == "Stone Oven: 3 of 10 Bricks, 7 of 4 Planks, cannot afford"


def test_purchase_rejections():
    state = make_state()
    section = open_section(state)

    locked = section.sub_item_action(1, 0)
    assert not locked.success
    assert locked.message == "Complete previous level first"

    section.sub_item_action(0, 0)
    again = section.sub_item_action(0, 1)
    assert not again.success
    assert again.message == "Upgrade already purchased"

    poor = section.sub_item_action(1, 0)
    assert not poor.success
    assert poor.message == "Not enough resources"
    assert state.goods["Bricks"] == 3


def test_affordability_is_rechecked_at_purchase_time():
    state = Mock()
    state.has_upgrades.return_value = True
    # Cached level data claims the cost is covered...
    state.upgrade_levels.return_value = [
        UpgradeLevel(0, "Sturdy Oven", costs=[GoodCost("Planks", 5, 5)], perks=[Perk("Faster Baking")])
    ]
    # ...but the goods were spent in the meantime
    state.can_afford_upgrade.return_value = False
    section = open_section(state)

    result = section.sub_item_action(0, 0)
    assert not result.success
    assert result.message == "Not enough resources"
    state.purchase_upgrade.assert_not_called()


def test_purchase_is_remembered_when_game_state_lags():
    state = Mock()
    state.has_upgrades.return_value = True
    state.upgrade_levels.return_value = [
        UpgradeLevel(0, "Sturdy Oven", perks=[Perk("Faster Baking")]),
        UpgradeLevel(1, "Stone Oven", perks=[Perk("Hot Stones")]),
    ]
    state.can_afford_upgrade.return_value = True
    state.purchase_upgrade.return_value = True
    section = open_section(state)

    assert section.sub_item_action(0, 0).success
    assert section.is_achieved(0)
    assert section.next_available == 1
    assert section.announce_item(1) == "Stone Oven: Free"

    # A different building starts with a clean slate
    section.initialize("other")
    assert not section.is_achieved(0)


def test_building_without_upgrades():
    section = open_section(make_state(), "shed")
    assert not section.has_upgrades()
    assert section.item_count() == 0
    assert section.describe_section("Upgrades") is None


def test_names_for_search():
    section = open_section(make_state())
    assert section.item_name(1) == "Stone Oven"
    assert section.sub_item_name(0, 0) == "Faster Baking"
    assert section.sub_item_name(0, 5) is None
