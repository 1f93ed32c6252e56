"""Core library for panelnav.

Hierarchical panel navigation (cursor, engine, adapters), the shared worker
and upgrade sub-navigators, panel search, and the configuration and
in-memory game state used by the CLI and TUI.
"""

__all__ = [
    "adapter",
    "adapters",
    "commands",
    "config",
    "cursor",
    "engine",
    "gamestate",
    "host",
    "sandbox",
    "search",
    "speech",
    "upgrades",
    "workers",
]
