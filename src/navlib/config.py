from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class ConfigError(RuntimeError):
    pass


@dataclass
class NavigationSettings:
    empty_message: str = "No items in this section"
    no_action_message: str = "No action available"
    unknown_message: str = "Unknown item"
    large_step: int = 10


@dataclass
class SpeechSettings:
    log_file: Optional[str] = None
    echo_cues: bool = True


@dataclass
class Scenario:
    name: str
    path: Path
    description: Optional[str] = None


@dataclass
class Config:
    version: int = 1
    default_scenario: Optional[str] = None
    scenarios: Dict[str, Scenario] = field(default_factory=dict)
    navigation: NavigationSettings = field(default_factory=NavigationSettings)
    speech: SpeechSettings = field(default_factory=SpeechSettings)
    source_path: Optional[Path] = None

    def to_json(self) -> str:
        def _default(o: Any):
            if isinstance(o, Path):
                return str(o)
            if hasattr(o, "__dict__"):
                return o.__dict__
            return str(o)

        return json.dumps(self, default=_default, indent=2, sort_keys=True)


def _expand_env(value: Any) -> Any:
    if isinstance(value, str):
        # Expand ${VAR} style
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {k: _expand_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env(v) for v in value]
    return value


def _as_scenario(name: str, raw: Any, base_dir: Path) -> Scenario:
    # Shorthand: `demo: path/to/file.yaml`
    if isinstance(raw, str):
        raw = {"path": raw}
    raw = raw or {}
    path_raw = raw.get("path")
    if not path_raw:
        raise ConfigError(f"Scenario '{name}' has no path")
    path = Path(str(path_raw)).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return Scenario(name=name, path=path, description=raw.get("description"))


def _as_navigation(raw: Dict[str, Any]) -> NavigationSettings:
    defaults = NavigationSettings()
    try:
        large_step = int(raw.get("large_step", defaults.large_step))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"navigation.large_step must be an integer: {e}") from e
    if large_step < 1:
        raise ConfigError("navigation.large_step must be at least 1")
    return NavigationSettings(
        empty_message=str(raw.get("empty_message", defaults.empty_message)),
        no_action_message=str(raw.get("no_action_message", defaults.no_action_message)),
        unknown_message=str(raw.get("unknown_message", defaults.unknown_message)),
        large_step=large_step,
    )


def resolve_config_path() -> Path:
    # Highest priority: explicit override
    override = os.environ.get("PANELNAV_CONFIG")
    if override:
        p = Path(override).expanduser()
        if p.is_file():
            return p
        raise ConfigError(f"PANELNAV_CONFIG path not found: {p}")

    # XDG base dirs
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
    candidates = [xdg_home / "panelnav" / "config.yaml"]

    xdg_dirs = os.environ.get("XDG_CONFIG_DIRS", "/etc/xdg")
    for d in xdg_dirs.split(":"):
        candidates.append(Path(d) / "panelnav" / "config.yaml")

    for c in candidates:
        if c.is_file():
            return c

    raise ConfigError(
        "No config file found. Set PANELNAV_CONFIG or create ~/.config/panelnav/config.yaml"
    )


def load_config(path: Optional[Path] = None) -> Config:
    cfg_path = path or resolve_config_path()
    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except FileNotFoundError as e:
        raise ConfigError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    data = _expand_env(data)
    base_dir = cfg_path.parent
    scenarios_raw = data.get("scenarios") or {}
    scenarios: Dict[str, Scenario] = {
        name: _as_scenario(name, raw, base_dir) for name, raw in scenarios_raw.items()
    }

    speech_raw = data.get("speech") or {}
    cfg = Config(
        version=int(data.get("version", 1)),
        default_scenario=data.get("default_scenario"),
        scenarios=scenarios,
        navigation=_as_navigation(data.get("navigation") or {}),
        speech=SpeechSettings(
            log_file=speech_raw.get("log_file"),
            echo_cues=bool(speech_raw.get("echo_cues", True)),
        ),
        source_path=cfg_path,
    )
    return cfg
