"""Log widget standing in for the screen reader."""

import logging

from textual.widgets import Log

from navlib.speech import AudioCue

logger = logging.getLogger(__name__)


class SpeechLog(Log):
    """Writes utterances (and optionally audio cues) as lines.

    Implements both the speech sink and the audio cue sink so a panel screen
    can hand it straight to ``PanelHost``.
    """

    can_focus = False

    def __init__(self, echo_cues: bool = True, **kwargs):
        super().__init__(**kwargs)
        self.echo_cues = echo_cues

    def say(self, text: str) -> None:
        logger.debug("say: %s", text)
        self.write_line(text)

    def play(self, cue: AudioCue) -> None:
        logger.debug("cue: %s", cue.value)
        if self.echo_cues:
            self.write_line(f"  [{cue.value}]")
