"""Error handling utilities for panelnav."""

from __future__ import annotations

from typing import Any


def format_error_message(operation: str, error: Exception, context: dict[str, Any] | None = None) -> str:
    """Format a user-friendly error message based on the exception type and context."""
    error_str = str(error)
    context = context or {}

    # Missing scenario files
    if "scenario file not found" in error_str.lower():
        scenario_name = context.get("scenario", "scenario")
        return (
            f"Scenario '{scenario_name}' could not be read. "
            f"Check the scenario path in your config file. "
            f"Original error: {error_str}"
        )

    # Building not found
    if "not found" in error_str.lower() or "does not exist" in error_str.lower():
        if "building" in operation.lower() or "building" in error_str.lower():
            building = context.get("building", "building")
            return (
                f"Building '{building}' not found. "
                f"Use 'panelnav buildings list' to see available buildings. "
                f"Original error: {error_str}"
            )

    # Malformed scenario or command input
    if any(word in error_str.lower() for word in ["yaml", "format", "parse", "invalid", "mapping"]):
        return (
            f"Scenario or command format error. "
            f"Original error: {error_str}"
        )

    # Generic error with helpful context
    return f"Failed to {operation}: {error_str}"


def suggest_troubleshooting_steps(operation: str, error: Exception) -> list[str]:
    """Suggest troubleshooting steps based on the operation and error."""
    error_str = str(error).lower()
    suggestions = []

    if "scenario file not found" in error_str:
        suggestions.extend([
            "List configured scenarios: panelnav scenarios list",
            "Relative scenario paths are resolved against the config file directory",
            "Ensure correct PANELNAV_CONFIG path is set",
        ])

    elif "not found" in error_str or "does not exist" in error_str:
        suggestions.extend([
            "List available buildings: panelnav buildings list",
            "Check the building id spelling (ids are the keys under 'buildings:')",
            "Pick another scenario with --scenario <name>",
        ])

    elif "yaml" in error_str or "invalid" in error_str or "mapping" in error_str:
        suggestions.extend([
            "Validate the scenario file with a YAML linter",
            "Check that every building entry is a mapping with a 'kind' key",
            "Commands look like: down, enter, space, +, shift:+, /bread",
        ])

    if not suggestions:
        suggestions.extend([
            "Check the logs with -v/--verbose flag for more details",
            "Verify your configuration file is correct",
            "Try the bundled scenario: scenarios/settlement.yaml",
        ])

    return suggestions


def format_config_error(error: Exception) -> str:
    """Format configuration-related error messages."""
    error_str = str(error)

    if "no config file found" in error_str.lower():
        return (
            "No configuration file found. Please either:\n"
            "  • Set PANELNAV_CONFIG=/path/to/config.yaml, or\n"
            "  • Create ~/.config/panelnav/config.yaml\n"
            "\n"
            "See the README for configuration examples."
        )

    if "scenario" in error_str.lower():
        return (
            f"Scenario configuration error: {error_str}\n"
            "Check your config file and ensure the scenario is properly defined."
        )

    return f"Configuration error: {error_str}"
