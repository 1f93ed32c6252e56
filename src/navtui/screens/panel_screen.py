"""Panel screen: keyboard navigation of one building, spoken into a log."""

import logging
from typing import Dict, Optional

from textual import events
from textual.binding import Binding
from textual.containers import Vertical
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Footer, Header, Static

from navlib.adapter import Modifiers
from navlib.commands import CommandType, ParsedCommand
from navlib.host import PanelHost, PanelSession

from ..widgets.search_input import SearchInput
from ..widgets.speech_log import SpeechLog

logger = logging.getLogger(__name__)

# Textual key name -> panel command
KEY_COMMANDS: Dict[str, CommandType] = {
    "up": CommandType.UP,
    "down": CommandType.DOWN,
    "enter": CommandType.ENTER,
    "right": CommandType.ENTER,
    "escape": CommandType.ESCAPE,
    "left": CommandType.BACK,
    "space": CommandType.ACTION,
    "f5": CommandType.REFRESH,
}

# Typed characters -> (command, shift); "+" and "_" are the shifted keys
CHAR_COMMANDS: Dict[str, tuple] = {
    "=": (CommandType.INCREMENT, False),
    "+": (CommandType.INCREMENT, True),
    "-": (CommandType.DECREMENT, False),
    "_": (CommandType.DECREMENT, True),
}


def command_for_key(key: str, character: Optional[str]) -> Optional[ParsedCommand]:
    """Translate a textual key event into a panel command, if it is one."""
    if key in KEY_COMMANDS:
        return ParsedCommand(KEY_COMMANDS[key], raw_input=key)
    if character in CHAR_COMMANDS:
        command_type, shift = CHAR_COMMANDS[character]
        return ParsedCommand(command_type, raw_input=character, modifiers=Modifiers(shift=shift))
    return None


class PanelScreen(Screen):
    """Open panel for a single building."""

    BINDINGS = [
        Binding("slash", "focus_search", "Search"),
        Binding("ctrl+q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    PanelScreen #panel-search {
        display: none;
    }
    PanelScreen #panel-search.visible {
        display: block;
    }
    PanelScreen SpeechLog {
        height: 1fr;
    }
    """

    class Closed(Message):
        """Sent when Escape at the section level closes the panel."""

        def __init__(self, building: str) -> None:
            super().__init__()
            self.building = building

    def __init__(self, host_factory, building: str, **kwargs):
        super().__init__(**kwargs)
        self.host_factory = host_factory
        self.building = building
        self.host: Optional[PanelHost] = None
        self.session: Optional[PanelSession] = None

    def compose(self):
        with Vertical():
            yield Header()
            yield Static(self.building, id="panel-title")
            yield SpeechLog(id="speech-log")
            yield SearchInput(placeholder="Search this panel...", id="panel-search")
            yield Footer()

    def on_mount(self) -> None:
        speech_log = self.query_one("#speech-log", SpeechLog)
        self.host = self.host_factory(speech_log)
        self.session = self.host.on_focus(self.building)
        self._update_title()

    def on_unmount(self) -> None:
        if self.host and self.session and self.session.is_open:
            self.host.on_blur(self.session)

    def _update_title(self) -> None:
        if not self.session:
            return
        name = self.session.adapter.state.building_name(self.building) or self.building
        crumb = self.session.engine.cursor.get_breadcrumb()
        self.query_one("#panel-title", Static).update(f"{name}  |  {crumb}")

    def send(self, command: ParsedCommand) -> None:
        """Route a command to the host; closes the screen when the panel closes."""
        if not (self.host and self.session):
            return
        if not self.host.on_key(self.session, command):
            logger.info("Panel for %s closed", self.building)
            self.post_message(self.Closed(self.building))
            return
        self._update_title()

    def on_key(self, event: events.Key) -> None:
        search = self.query_one("#panel-search", SearchInput)
        if search.has_focus:
            if event.key == "escape":
                self._hide_search()
                event.stop()
                event.prevent_default()
            return

        command = command_for_key(event.key, event.character)
        if command is None:
            return
        event.stop()
        event.prevent_default()
        self.send(command)

    def action_focus_search(self) -> None:
        search = self.query_one("#panel-search", SearchInput)
        search.value = ""
        search.add_class("visible")
        search.focus()

    def action_quit(self) -> None:
        self.app.exit()

    def _hide_search(self) -> None:
        search = self.query_one("#panel-search", SearchInput)
        search.remove_class("visible")
        self.set_focus(None)

    def on_search_input_query_submitted(self, event: SearchInput.QuerySubmitted) -> None:
        self._hide_search()
        query = event.query.strip()
        if query:
            self.send(ParsedCommand(CommandType.SEARCH, raw_input=f"/{query}", text=query))
