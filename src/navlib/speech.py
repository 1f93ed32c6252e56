"""Speech and audio cue sinks consumed by the navigation engine."""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Protocol


class AudioCue(Enum):
    """Semantic sound effects an action can trigger."""
    CONFIRM = "confirm"
    FAILED = "failed"
    TOGGLE_ON = "toggle_on"
    TOGGLE_OFF = "toggle_off"
    CLICK = "click"
    PANEL_SHOW = "panel_show"
    PANEL_HIDE = "panel_hide"


class SpeechSink(Protocol):
    def say(self, text: str) -> None:
        ...


class AudioCueSink(Protocol):
    def play(self, cue: AudioCue) -> None:
        ...


class RecordingSpeech:
    """Keeps every utterance; used by the CLI replay and the tests."""

    def __init__(self) -> None:
        self.history: List[str] = []

    def say(self, text: str) -> None:
        self.history.append(text)

    @property
    def last(self) -> Optional[str]:
        return self.history[-1] if self.history else None

    def clear(self) -> None:
        self.history.clear()


class RecordingCues:
    def __init__(self) -> None:
        self.history: List[AudioCue] = []

    def play(self, cue: AudioCue) -> None:
        self.history.append(cue)

    @property
    def last(self) -> Optional[AudioCue]:
        return self.history[-1] if self.history else None


class LoggingSpeech:
    """Speech sink that writes utterances to a logger."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def say(self, text: str) -> None:
        self.logger.info("say: %s", text)


class LoggingCues:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)

    def play(self, cue: AudioCue) -> None:
        self.logger.info("cue: %s", cue.value)
