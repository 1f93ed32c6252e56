from __future__ import annotations

from pathlib import Path

import pytest

from navlib.commands import CommandParser, CommandType, ParsedCommand
from navlib.cursor import Level
from navlib.host import PanelHost
from navlib.sandbox import load_scenario
from navlib.speech import AudioCue, RecordingCues, RecordingSpeech

SCENARIO = Path(__file__).resolve().parent.parent / "scenarios" / "settlement.yaml"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("down", CommandType.DOWN),
        ("d", CommandType.DOWN),
        ("UP", CommandType.UP),
        ("enter", CommandType.ENTER),
        ("esc", CommandType.ESCAPE),
        ("space", CommandType.ACTION),
        ("left", CommandType.BACK),
        ("+", CommandType.INCREMENT),
        ("-", CommandType.DECREMENT),
        ("refresh", CommandType.REFRESH),
    ],
)
def test_parse_simple_commands(text, expected):
    parsed = CommandParser().parse(text)
    assert parsed.command_type == expected
    assert parsed.error is None
    assert parsed.raw_input == text


def test_parse_modifiers_and_delta():
    parser = CommandParser()
    parsed = parser.parse("shift:+")
    assert parsed.command_type == CommandType.INCREMENT
    assert parsed.modifiers.shift
    assert parsed.delta == 1

    parsed = parser.parse("ctrl:-")
    assert parsed.modifiers.ctrl and not parsed.modifiers.shift
    assert parsed.delta == -1
    assert parser.parse("down").delta == 0


def test_parse_search():
    parser = CommandParser()
    parsed = parser.parse("/brea")
    assert parsed.command_type == CommandType.SEARCH
    assert parsed.text == "brea"

    parsed = parser.parse("search Sturdy Oven")
    assert parsed.text == "Sturdy Oven"

    assert parser.parse("/").error == "search command requires a query"


@pytest.mark.parametrize(
    "text,error",
    [
        ("", "Empty command"),
        ("   ", "Empty command"),
        ("fly", "Unknown command: fly"),
        ("unknown", "Unknown command: unknown"),
        ("down twice", "down command does not accept arguments"),
    ],
)
def test_parse_errors(text, error):
    parsed = CommandParser().parse(text)
    assert parsed.error == error


def test_help_text_lists_commands():
    help_text = CommandParser().get_help_text()
    assert "shift:+" in help_text
    assert "/text" in help_text


@pytest.fixture
def host():
    state = load_scenario(SCENARIO)
    return PanelHost(state, RecordingSpeech(), RecordingCues())


def send(host, session, *commands):
    parser = CommandParser()
    results = [host.on_key(session, parser.parse(c)) for c in commands]
    return results[-1]


def test_focus_opens_panel_with_show_cue(host):
    session = host.on_focus("bakery")
    assert session.is_open
    assert session.adapter.NAME == "ProductionAdapter"
    assert host.speech.history == ["Bakery. Info"]
    assert host.cues.history == [AudioCue.PANEL_SHOW]


def test_keys_drive_engine(host):
    session = host.on_focus("bakery")
    assert send(host, session, "down", "down", "enter") is True
    assert host.speech.last == "Bread: enabled, limit unlimited"
    assert session.engine.cursor.level == Level.ITEM

    send(host, session, "+")
    assert host.speech.last == "Limit: 1"
    send(host, session, "shift:+")
    assert host.speech.last == "Limit: 11"

    send(host, session, "space")
    assert host.speech.last == "Bread: disabled"
    assert host.cues.last == AudioCue.TOGGLE_OFF


def test_search_then_escape_walks_back_up(host):
    session = host.on_focus("bakery")
    send(host, session, "/faster")
    assert host.speech.last == "Faster Baking: Available. Recipes take 10% less time"
    assert session.engine.cursor.level == Level.SUB_ITEM

    send(host, session, "esc")
    assert host.speech.last == "Sturdy Oven: 12 of 5 Planks"
    send(host, session, "left")
    assert host.speech.last == "Upgrades, 0 of 2 achieved"


def test_escape_at_top_closes_panel(host):
    session = host.on_focus("bakery")
    assert send(host, session, "escape") is False
    assert not session.is_open
    assert host.cues.last == AudioCue.PANEL_HIDE

    # Further keys are ignored once closed
    assert send(host, session, "down") is False


def test_invalid_command_is_ignored(host):
    session = host.on_focus("bakery")
    host.speech.clear()
    assert host.on_key(session, CommandParser().parse("fly")) is True
    assert host.speech.history == []


def test_refresh_reannounces_only_when_cursor_moved(host):
    session = host.on_focus("harbor")
    send(host, session, "down")
    host.speech.clear()
    send(host, session, "refresh")
    assert host.speech.history == []

    host.state.start_expedition("harbor")
    host.state.buildings["harbor"]["workers"] = []
    send(host, session, "refresh")
    assert host.speech.history == ["Status: expedition in progress, 0 percent"]


def test_blur_closes_open_session(host):
    session = host.on_focus("shelter")
    host.on_blur(session)
    assert not session.is_open
    assert host.cues.history == [AudioCue.PANEL_SHOW, AudioCue.PANEL_HIDE]
    host.on_blur(session)
    assert host.cues.history == [AudioCue.PANEL_SHOW, AudioCue.PANEL_HIDE]


def test_parsed_command_defaults():
    command = ParsedCommand(CommandType.ENTER, raw_input="enter")
    assert command.text is None
    assert not command.modifiers.shift
