from __future__ import annotations

import json
from pathlib import Path

import pytest

from navlib.config import ConfigError, load_config, resolve_config_path
from navlib.errors import format_config_error, format_error_message, suggest_troubleshooting_steps
from navlib.sandbox import ScenarioError, load_scenario


def write_config(tmp_path: Path, body: str) -> Path:
    cfg = tmp_path / "config.yaml"
    cfg.write_text(body.strip())
    return cfg


def test_load_config_resolves_scenarios_relative_to_file(tmp_path):
    cfg = write_config(
        tmp_path,
        """
version: 1
default_scenario: demo
scenarios:
  demo:
    path: scenarios/demo.yaml
    description: Demo settlement
  abs: /srv/scenarios/other.yaml
navigation:
  large_step: 5
  empty_message: Nothing here
speech:
  echo_cues: false
        """,
    )
    loaded = load_config(cfg)
    assert loaded.default_scenario == "demo"
    assert loaded.scenarios["demo"].path == tmp_path / "scenarios" / "demo.yaml"
    assert loaded.scenarios["demo"].description == "Demo settlement"
    assert loaded.scenarios["abs"].path == Path("/srv/scenarios/other.yaml")
    assert loaded.navigation.large_step == 5
    assert loaded.navigation.empty_message == "Nothing here"
    assert loaded.navigation.unknown_message == "Unknown item"
    assert loaded.speech.echo_cues is False
    assert loaded.source_path == cfg

    data = json.loads(loaded.to_json())
    assert data["default_scenario"] == "demo"


def test_env_vars_are_expanded(tmp_path, monkeypatch):
    monkeypatch.setenv("SCENARIO_DIR", "/data/panels")
    cfg = write_config(
        tmp_path,
        """
scenarios:
  demo: ${SCENARIO_DIR}/demo.yaml
        """,
    )
    loaded = load_config(cfg)
    assert loaded.scenarios["demo"].path == Path("/data/panels/demo.yaml")


@pytest.mark.parametrize("value", ["0", "-3", "lots"])
def test_invalid_large_step(tmp_path, value):
    cfg = write_config(tmp_path, f"navigation:\n  large_step: {value}\n")
    with pytest.raises(ConfigError):
        load_config(cfg)


def test_scenario_without_path(tmp_path):
    cfg = write_config(tmp_path, "scenarios:\n  demo:\n    description: no path\n")
    with pytest.raises(ConfigError, match="has no path"):
        load_config(cfg)


def test_invalid_yaml(tmp_path):
    cfg = write_config(tmp_path, "scenarios: [unclosed\n")
    with pytest.raises(ConfigError, match="Invalid YAML"):
        load_config(cfg)


def test_env_override_takes_priority(tmp_path, monkeypatch):
    cfg = write_config(tmp_path, "version: 1\n")
    monkeypatch.setenv("PANELNAV_CONFIG", str(cfg))
    assert resolve_config_path() == cfg


def test_env_override_must_exist(tmp_path, monkeypatch):
    monkeypatch.setenv("PANELNAV_CONFIG", str(tmp_path / "missing.yaml"))
    with pytest.raises(ConfigError, match="PANELNAV_CONFIG path not found"):
        resolve_config_path()


def test_xdg_lookup(tmp_path, monkeypatch):
    monkeypatch.delenv("PANELNAV_CONFIG", raising=False)
    home = tmp_path / "home"
    (home / "panelnav").mkdir(parents=True)
    cfg = home / "panelnav" / "config.yaml"
    cfg.write_text("version: 1\n")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_DIRS", str(tmp_path / "nowhere"))
    assert resolve_config_path() == cfg


def test_no_config_found(tmp_path, monkeypatch):
    monkeypatch.delenv("PANELNAV_CONFIG", raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "empty"))
    monkeypatch.setenv("XDG_CONFIG_DIRS", str(tmp_path / "nowhere"))
    with pytest.raises(ConfigError) as exc:
        resolve_config_path()
    assert "No configuration file found" in format_config_error(exc.value)


def test_load_scenario_errors(tmp_path):
    with pytest.raises(ScenarioError, match="Scenario file not found"):
        load_scenario(tmp_path / "missing.yaml")

    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    with pytest.raises(ScenarioError, match="must contain a mapping"):
        load_scenario(bad)


def test_unknown_building_raises(tmp_path):
    scenario = tmp_path / "s.yaml"
    scenario.write_text("buildings:\n  shed: {kind: simple}\n")
    state = load_scenario(scenario)
    assert state.building_ids() == ["shed"]
    with pytest.raises(ScenarioError, match="Building not found"):
        state.building_name("barn")


def test_error_formatting():
    missing = ScenarioError("Building not found: barn")
    msg = format_error_message("open building", missing, {"building": "barn"})
    assert "Building 'barn' not found" in msg
    assert any("buildings list" in s for s in suggest_troubleshooting_steps("open building", missing))

    unreadable = ScenarioError("Scenario file not found: /x.yaml")
    assert "Scenario 'demo' could not be read" in format_error_message(
        "load scenario", unreadable, {"scenario": "demo"}
    )

    assert format_error_message("walk", RuntimeError("boom")) == "Failed to walk: boom"
    assert format_config_error(ConfigError("Scenario 'x' has no path")).startswith(
        "Scenario configuration error"
    )
