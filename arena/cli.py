"""Terminal front-end: list, resolve, validate and audit formats."""
from __future__ import annotations
import argparse
import json
from pathlib import Path
from typing import List, Optional

from rich.box import ROUNDED
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from arena.core.errors import ArenaError, DataLoadError
from arena.core.logging import logger
from arena.system.engine import RulesEngine
from arena.system.settings import Settings

console = Console()

def _formats(engine: RulesEngine, args) -> int:
    for section, formats in engine.sections().items():
        table = Table(title=f"[bold cyan]{section}[/bold cyan]", box=ROUNDED, show_header=True)
        table.add_column("Format", style="bright_white")
        table.add_column("Game type")
        table.add_column("Mod")
        table.add_column("Search", justify="center")
        for fmt in formats:
            if not fmt.search_show and not args.all:
                continue
            table.add_row(fmt.name, fmt.game_type, fmt.mod or "-", "yes" if fmt.search_show else "no")
        console.print(table)
    return 0

def _resolve(engine: RulesEngine, args) -> int:
    rs = engine.resolve(args.name, args.mod)
    fmt = rs.format
    meta = (f"section: {fmt.section or '-'}   game type: {fmt.game_type}   mod: {rs.mod or '-'}\n"
            f"team size: {fmt.min_team_size}-{fmt.max_team_size}   max level: {fmt.max_level}"
            f"   default level: {fmt.default_level}   forced level: {fmt.max_forced_level or '-'}")
    console.print(Panel(meta, title=f"[bold]{rs.name}[/bold]", box=ROUNDED))
    console.print("[bold]Chain:[/bold] " + " -> ".join(rs.chain))

    bans = Table(title="Banlist", box=ROUNDED)
    bans.add_column("Entry", style="red")
    bans.add_column("Kind")
    for ban in sorted(rs.bans, key=lambda b: b.raw):
        bans.add_row(ban.raw, ban.kind.value)
    console.print(bans)
    if rs.allowed:
        console.print("[bold]Allowed:[/bold] " + ", ".join(sorted(rs.allowed)))

    hooks = Table(title="Hooks", box=ROUNDED)
    hooks.add_column("Point")
    hooks.add_column("Handlers")
    for point, handlers in rs.hooks.items():
        hooks.add_row(point, ", ".join(f"{h.name} ({h.owner})" for h in handlers))
    console.print(hooks)
    return 0

def _read_team(path: str) -> list:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise DataLoadError(path, str(e)) from e

def _validate(engine: RulesEngine, args) -> int:
    team = _read_team(args.team)
    problems = engine.validate_team(args.name, team)
    if not problems:
        console.print(Panel("[green]valid[/green]", title=args.name, box=ROUNDED))
        return 0
    console.print(Panel("\n".join(f"- {p}" for p in problems), title=f"[red]{args.name}: rejected[/red]", box=ROUNDED))
    return 1

def _audit(engine: RulesEngine, args) -> int:
    defects = engine.audit()
    if not defects:
        console.print("[green]No configuration defects.[/green]")
        return 0
    table = Table(title=f"{len(defects)} configuration defect(s)", box=ROUNDED)
    table.add_column("Defect", style="yellow")
    for d in defects:
        table.add_row(d)
    console.print(table)
    return 1

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="arena", description="Format rules engine")
    parser.add_argument("--assets", default=None, help="Assets directory (default: bundled assets/)")
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARN", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("formats", help="List formats by section")
    p.add_argument("--all", action="store_true", help="Include formats hidden from search")
    p.set_defaults(func=_formats)

    p = sub.add_parser("resolve", help="Show a resolved format")
    p.add_argument("name")
    p.add_argument("--mod", default=None, help="Apply a mod variant")
    p.set_defaults(func=_resolve)

    p = sub.add_parser("validate", help="Validate a team JSON file against a format")
    p.add_argument("name")
    p.add_argument("team", help="Path to a JSON list of sets")
    p.set_defaults(func=_validate)

    p = sub.add_parser("audit", help="Report configuration defects")
    p.set_defaults(func=_audit)
    return parser

def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.load()
    engine = RulesEngine(args.assets, settings=settings)
    if args.log_level:
        logger.set_level(args.log_level)
    try:
        engine.load()
        return args.func(engine, args)
    except ArenaError as e:
        console.print(f"[red]{e}[/red]")
        return 2

__all__ = ["run","build_parser"]
