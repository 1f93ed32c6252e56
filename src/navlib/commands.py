"""Parse panel key commands typed on the CLI or sent by a host."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .adapter import Modifiers


class CommandType(Enum):
    """Commands a focused panel understands."""
    UP = "up"
    DOWN = "down"
    ENTER = "enter"
    ESCAPE = "escape"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    SEARCH = "search"
    ACTION = "action"
    BACK = "back"
    REFRESH = "refresh"
    UNKNOWN = "unknown"


@dataclass
class ParsedCommand:
    """Result of parsing a command string."""
    command_type: CommandType
    raw_input: str
    text: Optional[str] = None
    modifiers: Modifiers = field(default_factory=Modifiers)
    error: Optional[str] = None

    @property
    def delta(self) -> int:
        if self.command_type == CommandType.INCREMENT:
            return 1
        if self.command_type == CommandType.DECREMENT:
            return -1
        return 0


class CommandParser:
    """Parser for panel commands.

    Words (``down``, ``enter``), key names (``esc``, ``space``) and symbols
    (``+``, ``-``) are accepted. A ``shift:`` prefix sets the shift modifier
    and ``/text`` searches for ``text``.
    """

    # Command aliases mapping
    ALIASES = {
        "u": "up",
        "k": "up",
        "d": "down",
        "j": "down",
        "e": "enter",
        "return": "enter",
        "esc": "escape",
        "x": "escape",
        "+": "increment",
        "=": "increment",
        "inc": "increment",
        "plus": "increment",
        "-": "decrement",
        "dec": "decrement",
        "minus": "decrement",
        "space": "action",
        "a": "action",
        "left": "back",
        "b": "back",
        "r": "refresh",
        "f5": "refresh",
        "find": "search",
    }

    MODIFIER_PREFIXES = ("shift:", "ctrl:")

    def parse(self, input_text: str) -> ParsedCommand:
        """Parse one command and return the parsed command."""
        raw = input_text
        input_text = input_text.strip()

        if not input_text:
            return ParsedCommand(CommandType.UNKNOWN, raw, error="Empty command")

        shift = ctrl = False
        lowered = input_text.lower()
        while lowered.startswith(self.MODIFIER_PREFIXES):
            if lowered.startswith("shift:"):
                shift = True
            else:
                ctrl = True
            input_text = input_text.split(":", 1)[1].strip()
            lowered = input_text.lower()
        modifiers = Modifiers(shift=shift, ctrl=ctrl)

        # "/text" is shorthand for "search text"
        if input_text.startswith("/"):
            return self._search(raw, input_text[1:], modifiers)

        parts = input_text.split(None, 1)
        command = parts[0].lower()
        rest = parts[1] if len(parts) > 1 else ""

        resolved_command = self.ALIASES.get(command, command)
        try:
            command_type = CommandType(resolved_command)
        except ValueError:
            return ParsedCommand(CommandType.UNKNOWN, raw, error=f"Unknown command: {command}")

        if command_type == CommandType.UNKNOWN:
            return ParsedCommand(CommandType.UNKNOWN, raw, error=f"Unknown command: {command}")
        if command_type == CommandType.SEARCH:
            return self._search(raw, rest, modifiers)

        error = self._validate_command_args(command_type, rest)
        return ParsedCommand(command_type, raw, modifiers=modifiers, error=error)

    def parse_many(self, inputs: List[str]) -> List[ParsedCommand]:
        return [self.parse(item) for item in inputs]

    def _search(self, raw: str, text: str, modifiers: Modifiers) -> ParsedCommand:
        text = text.strip()
        error = None if text else "search command requires a query"
        return ParsedCommand(CommandType.SEARCH, raw, text=text or None, modifiers=modifiers, error=error)

    def _validate_command_args(self, command_type: CommandType, rest: str) -> Optional[str]:
        """Only search takes an argument."""
        if rest:
            return f"{command_type.value} command does not accept arguments"
        return None

    def get_help_text(self) -> str:
        """Get help text for all commands."""
        return """Panel commands:

up / down (or u, d)        - Previous / next entry at this level
enter (or e)               - Open the entry, or act on it
escape (or esc)            - Go up a level; closes the panel at the top
back (or left)             - Go up a level, never closes
action (or space)          - Act on the entry without opening it
+ / -                      - Adjust a value (shift:+ for a large step)
/text (or search text)     - Jump to the next entry whose name contains text
refresh (or r)             - Re-read the building
"""
