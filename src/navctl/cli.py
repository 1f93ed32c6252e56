from __future__ import annotations

import json
import logging
from typing import List, NoReturn, Optional, Tuple

import click
from tabulate import tabulate

from navlib.adapters import adapter_for
from navlib.commands import CommandParser
from navlib.config import Config, ConfigError, Scenario, load_config
from navlib.cursor import Level
from navlib.errors import format_config_error, format_error_message, suggest_troubleshooting_steps
from navlib.host import PanelHost
from navlib.sandbox import InMemoryGameState, ScenarioError, load_scenario
from navlib.search import SearchIndex
from navlib.speech import RecordingCues, RecordingSpeech


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--json-output",
    "json_output",
    is_flag=True,
    help="Output JSON instead of tables (pretty-printed)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging to stderr (what the CLI is doing)",
)
@click.option("--scenario", "scenario_name", help="Scenario name; uses default_scenario if omitted")
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool, scenario_name: Optional[str]) -> None:
    """Building panel navigator CLI.

    Walk the spoken building panels of a scenario loaded via XDG config or
    the PANELNAV_CONFIG environment variable. JSON output is always
    pretty-printed.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["verbose"] = verbose
    ctx.obj["scenario"] = scenario_name

    # Configure logging once per process
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _load_config(log: logging.Logger) -> Config:
    try:
        log.info("Loading config...")
        cfg = load_config()
        log.info("Loaded config from %s", getattr(cfg, "source_path", "<unknown>"))
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)
    return cfg


def _pick_scenario(ctx: click.Context, cfg: Config, name: Optional[str] = None) -> Scenario:
    name = name or ctx.obj.get("scenario") or cfg.default_scenario
    if not name and len(cfg.scenarios) == 1:
        name = next(iter(cfg.scenarios))
    if not name:
        click.echo("No scenario specified and no default_scenario set in config", err=True)
        raise SystemExit(2)

    scenario = cfg.scenarios.get(name)
    if not scenario:
        click.echo(f"Scenario not found: {name}", err=True)
        raise SystemExit(2)
    return scenario


def _fail(ctx: click.Context, operation: str, error: Exception, context: dict) -> NoReturn:
    """Print a helpful error without a stack and exit with status 2."""
    click.echo(format_error_message(operation, error, context), err=True)
    if ctx.obj.get("verbose"):
        suggestions = suggest_troubleshooting_steps(operation, error)
        if suggestions:
            click.echo("\nTroubleshooting suggestions:", err=True)
            for suggestion in suggestions[:3]:  # Show top 3 suggestions
                click.echo(f"  • {suggestion}", err=True)
    raise SystemExit(2)


def _load_state(ctx: click.Context, log: logging.Logger) -> Tuple[Config, InMemoryGameState]:
    cfg = _load_config(log)
    scenario = _pick_scenario(ctx, cfg)
    try:
        log.info("Loading scenario '%s' from %s", scenario.name, scenario.path)
        state = load_scenario(scenario.path)
    except ScenarioError as e:
        _fail(ctx, "load scenario", e, {"scenario": scenario.name})
    return cfg, state


def _check_building(ctx: click.Context, state: InMemoryGameState, building: str) -> None:
    if building not in state.buildings:
        _fail(ctx, "open building", ScenarioError(f"Building not found: {building}"), {"building": building})


def _address(section: int, item: Optional[int] = None, sub_item: Optional[int] = None) -> str:
    parts = [section, item, sub_item]
    return " > ".join(str(p + 1) for p in parts if p is not None)


# SCENARIOS commands


@cli.group()
@click.pass_context
def scenarios(ctx: click.Context) -> None:  # noqa: D401
    """Scenario-related commands."""
    pass


@scenarios.command("list")
@click.pass_context
def scenarios_list(ctx: click.Context) -> None:
    """List configured scenarios."""
    log = logging.getLogger("navctl.scenarios")
    cfg = _load_config(log)

    rows = []
    for name, sc in sorted(cfg.scenarios.items()):
        rows.append(
            [
                name,
                str(sc.path),
                sc.description or "—",
                "yes" if (cfg.default_scenario == name) else "—",
            ]
        )

    if ctx.obj.get("json"):
        out = {
            "scenarios": [
                {
                    "name": r[0],
                    "path": r[1],
                    "description": None if r[2] == "—" else r[2],
                    "default": r[3] == "yes",
                }
                for r in rows
            ]
        }
        click.echo(json.dumps(out, indent=2, sort_keys=True))
    else:
        log.info("Rendering table output for %d scenarios", len(rows))
        click.echo(tabulate(rows, headers=["NAME", "PATH", "DESCRIPTION", "DEFAULT"]))


@scenarios.command("show")
@click.argument("name", required=False)
@click.pass_context
def scenarios_show(ctx: click.Context, name: Optional[str]) -> None:
    """Show details for a scenario."""
    log = logging.getLogger("navctl.scenarios")
    cfg = _load_config(log)
    scenario = _pick_scenario(ctx, cfg, name)

    try:
        state = load_scenario(scenario.path)
    except ScenarioError as e:
        _fail(ctx, "load scenario", e, {"scenario": scenario.name})

    free = {r.name: r.free for r in state.races_with_free_workers(include_zero_free=True)}
    if ctx.obj.get("json"):
        out = {
            "name": scenario.name,
            "path": str(scenario.path),
            "description": scenario.description,
            "default": cfg.default_scenario == scenario.name,
            "buildings": len(state.buildings),
            "races": free,
            "goods": dict(state.goods),
        }
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    rows = [
        ["name", scenario.name],
        ["path", str(scenario.path)],
        ["description", scenario.description or "—"],
        ["buildings", len(state.buildings)],
        ["races", ", ".join(f"{k} ({v} free)" for k, v in free.items()) or "—"],
        ["goods", ", ".join(f"{k}: {v}" for k, v in state.goods.items()) or "—"],
        ["default", "yes" if (cfg.default_scenario == scenario.name) else "—"],
    ]
    log.info("Rendering scenario details for '%s'", scenario.name)
    click.echo(tabulate(rows, headers=["FIELD", "VALUE"]))


def main() -> None:  # entry point
    cli(standalone_mode=True)


# BUILDINGS commands


@cli.group()
@click.pass_context
def buildings(ctx: click.Context) -> None:  # noqa: D401
    """Building commands."""
    pass


@buildings.command("list")
@click.pass_context
def buildings_list(ctx: click.Context) -> None:
    """List buildings in the scenario with the panel adapter each one gets."""
    log = logging.getLogger("navctl.buildings")
    _, state = _load_state(ctx, log)

    items = []
    for bid in state.building_ids():
        kind = state.building_kind(bid)
        if not state.is_finished(bid):
            status = "under construction"
        elif state.is_sleeping(bid):
            status = "paused"
        else:
            status = "working"
        items.append(
            {
                "id": bid,
                "kind": kind,
                "name": state.building_name(bid),
                "adapter": adapter_for(kind).NAME,
                "status": status,
            }
        )

    if ctx.obj.get("json"):
        click.echo(json.dumps({"buildings": items}, indent=2, sort_keys=True))
        return

    if not items:
        click.echo("No buildings found")
        return

    rows = [[it["id"], it["kind"], it["name"], it["adapter"], it["status"]] for it in items]
    log.info("Rendering %d buildings", len(rows))
    click.echo(tabulate(rows, headers=["ID", "KIND", "NAME", "ADAPTER", "STATUS"]))


@buildings.command("tree")
@click.argument("building")
@click.pass_context
def buildings_tree(ctx: click.Context, building: str) -> None:
    """Show the searchable tree of a building panel (sections, items, sub-items)."""
    log = logging.getLogger("navctl.buildings")
    cfg, state = _load_state(ctx, log)
    _check_building(ctx, state, building)

    adapter = adapter_for(state.building_kind(building))(state, cfg.navigation)
    try:
        adapter.open(building)
        entries = []
        for entry in SearchIndex(adapter).entries():
            if entry.sub_item is not None:
                text = adapter.announce_sub_item(entry.section, entry.item, entry.sub_item)
            elif entry.item is not None:
                text = adapter.announce_item(entry.section, entry.item)
            else:
                text = adapter.announce_section(entry.section)
            entries.append(
                {
                    "address": _address(entry.section, entry.item, entry.sub_item),
                    "level": int(entry.address.level),
                    "name": entry.name,
                    "text": text,
                }
            )
    except Exception as e:  # surface helpful error without stack
        _fail(ctx, "walk building tree", e, {"building": building})
    finally:
        adapter.close()

    if ctx.obj.get("json"):
        click.echo(json.dumps({"building": building, "entries": entries}, indent=2, sort_keys=True))
        return

    rows = [["  " * e["level"] + e["name"], e["address"], e["text"] or "—"] for e in entries]
    log.info("Rendering %d tree entries for '%s'", len(rows), building)
    click.echo(tabulate(rows, headers=["NAME", "ADDRESS", "ANNOUNCEMENT"]))


# SEARCH command


@cli.command()
@click.argument("building")
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, building: str, query: str) -> None:
    """Find entries of a building panel whose name contains QUERY."""
    log = logging.getLogger("navctl.search")
    cfg, state = _load_state(ctx, log)
    _check_building(ctx, state, building)

    host = PanelHost(state, RecordingSpeech(), RecordingCues(), cfg.navigation)
    session = host.on_focus(building)
    try:
        results = session.engine.search_results(query)
    finally:
        host.on_blur(session)
    log.info("Found %d matches for %r", len(results), query)

    if ctx.obj.get("json"):
        out = {
            "building": building,
            "query": query,
            "results": [
                {
                    "section": r.section,
                    "item": r.item,
                    "sub_item": r.sub_item,
                    "address": _address(r.section, r.item, r.sub_item),
                    "name": r.name,
                }
                for r in results
            ],
        }
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    if not results:
        click.echo(f"No match for {query}")
        return

    rows = [[_address(r.section, r.item, r.sub_item), Level(r.address.level).name, r.name] for r in results]
    click.echo(tabulate(rows, headers=["ADDRESS", "LEVEL", "NAME"]))


# PLAY command


@cli.command()
@click.argument("building")
@click.argument("commands", nargs=-1)
@click.pass_context
def play(ctx: click.Context, building: str, commands: Tuple[str, ...]) -> None:
    """Open BUILDING's panel and replay COMMANDS, printing what would be spoken.

    Commands: up, down, enter, escape, back, space, +, -, shift:+, /text, refresh.
    """
    log = logging.getLogger("navctl.play")
    cfg, state = _load_state(ctx, log)
    _check_building(ctx, state, building)

    parser = CommandParser()
    parsed = parser.parse_many(list(commands))
    for cmd in parsed:
        if cmd.error:
            _fail(ctx, "parse command", ValueError(f"Invalid command '{cmd.raw_input}': {cmd.error}"), {})

    speech = RecordingSpeech()
    cues = RecordingCues()
    host = PanelHost(state, speech, cues, cfg.navigation)

    steps: List[dict] = []

    def record(label: str) -> None:
        steps.append(
            {
                "command": label,
                "speech": list(speech.history),
                "cues": [c.value for c in cues.history],
                "address": session.engine.cursor.get_breadcrumb() if session.is_open else None,
            }
        )
        speech.clear()
        cues.history.clear()

    session = host.on_focus(building)
    record("open")
    closed = False
    for cmd in parsed:
        log.info("Command %s", cmd.raw_input)
        if not host.on_key(session, cmd):
            closed = True
            record(cmd.raw_input)
            break
        record(cmd.raw_input)

    if not closed:
        host.on_blur(session)

    if ctx.obj.get("json"):
        out = {"building": building, "closed_by_escape": closed, "steps": steps}
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    rows = []
    for step in steps:
        row = [step["command"], " / ".join(step["speech"]) or "—", step["address"] or "—"]
        if cfg.speech.echo_cues:
            row.append(", ".join(step["cues"]) or "—")
        rows.append(row)
    headers = ["COMMAND", "SPEECH", "ADDRESS"]
    if cfg.speech.echo_cues:
        headers.append("CUES")
    click.echo(tabulate(rows, headers=headers))


@cli.command()
@click.pass_context
def tui(ctx: click.Context) -> None:
    """Launch interactive TUI for exploring building panels."""
    try:
        from navtui.app import run_tui
        run_tui(scenario_name=ctx.obj.get("scenario"))
    except ImportError as e:
        click.echo(f"TUI dependencies not available: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        error_msg = format_error_message("launch TUI", e, {})
        click.echo(error_msg, err=True)
        raise SystemExit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
