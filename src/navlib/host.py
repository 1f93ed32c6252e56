"""Host focus protocol: the glue between key events and navigation sessions.

A host (CLI replay, TUI, or a game mod) calls ``on_focus`` when a building
panel gains focus, forwards every key through ``on_key`` and calls
``on_blur`` when focus leaves. A session pairs one adapter with one engine
and lives exactly as long as the focus.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .adapter import BuildingAdapter
from .adapters import adapter_for
from .commands import CommandType, ParsedCommand
from .config import NavigationSettings
from .engine import NavigationEngine
from .gamestate import GameStateAccessor
from .speech import AudioCue, AudioCueSink, SpeechSink

logger = logging.getLogger(__name__)


@dataclass
class PanelSession:
    building: str
    adapter: BuildingAdapter
    engine: NavigationEngine

    @property
    def is_open(self) -> bool:
        return self.engine.is_open


class PanelHost:
    """Create sessions on focus and route parsed commands to their engine."""

    def __init__(
        self,
        state: GameStateAccessor,
        speech: SpeechSink,
        cues: AudioCueSink,
        settings: Optional[NavigationSettings] = None,
    ) -> None:
        self.state = state
        self.speech = speech
        self.cues = cues
        self.settings = settings or NavigationSettings()

    def on_focus(self, building: str) -> PanelSession:
        """Open a panel for ``building``; the kind picks the adapter."""
        kind = self.state.building_kind(building)
        adapter = adapter_for(kind)(self.state, self.settings)
        engine = NavigationEngine(adapter, self.speech, self.cues, self.settings)
        logger.debug("focus %s (%s) -> %s", building, kind, adapter.NAME)
        self.cues.play(AudioCue.PANEL_SHOW)
        engine.open(building)
        return PanelSession(building, adapter, engine)

    def on_blur(self, session: PanelSession) -> None:
        if not session.is_open:
            return
        session.engine.close()
        self.cues.play(AudioCue.PANEL_HIDE)

    def on_key(self, session: PanelSession, command: ParsedCommand) -> bool:
        """Handle one command. Returns False once the panel should close."""
        if not session.is_open:
            return False
        if command.error:
            logger.warning("ignoring command %r: %s", command.raw_input, command.error)
            return True

        engine = session.engine
        ctype = command.command_type
        if ctype == CommandType.UP:
            engine.move(-1)
        elif ctype == CommandType.DOWN:
            engine.move(1)
        elif ctype == CommandType.ENTER:
            engine.enter()
        elif ctype == CommandType.ACTION:
            engine.perform_action()
        elif ctype == CommandType.BACK:
            engine.back()
        elif ctype in (CommandType.INCREMENT, CommandType.DECREMENT):
            engine.adjust(command.delta, command.modifiers)
        elif ctype == CommandType.SEARCH:
            engine.search(command.text or "")
        elif ctype == CommandType.REFRESH:
            if engine.refresh():
                engine.announce_current()
        elif ctype == CommandType.ESCAPE:
            if not engine.escape():
                self.on_blur(session)
                return False
        else:
            logger.warning("unhandled command %s", ctype)
        return True
