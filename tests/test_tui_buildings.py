from __future__ import annotations

from pathlib import Path

from navtui.screens.buildings_screen import COLUMNS, building_rows, building_status
from navlib.sandbox import load_scenario

SCENARIO = Path(__file__).resolve().parent.parent / "scenarios" / "settlement.yaml"


def test_building_status():
    state = load_scenario(SCENARIO)
    assert building_status(state, "sawmill") == "under construction"
    assert building_status(state, "lumber_camp") == "paused"
    assert building_status(state, "harbor") == "working"


def test_building_rows_keep_id_hidden_from_columns():
    state = load_scenario(SCENARIO)
    rows = building_rows(state, ["ruins", "monument"])
    assert [r["_building"] for r in rows] == ["ruins", "monument"]
    assert rows[0] == {
        "ID": "ruins",
        "NAME": "Abandoned Ruins",
        "KIND": "relic",
        "STATUS": "working",
        "PANEL": "RelicAdapter",
        "_building": "ruins",
    }
    assert rows[1]["PANEL"] == "SimpleAdapter"
    assert all(not column.startswith("_") for column in COLUMNS)


def test_building_rows_follow_state_changes():
    state = load_scenario(SCENARIO)
    state.toggle_sleep("harbor")
    assert building_rows(state, ["harbor"])[0]["STATUS"] == "paused"
