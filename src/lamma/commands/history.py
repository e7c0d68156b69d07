"""Show the recorded action history."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lamma.audit import read_events
from lamma.config import get_config

console = Console()


def history(
    site: Optional[str] = typer.Option(None, "--site", help="Only actions on this site/target"),
    action: Optional[str] = typer.Option(None, help="Action prefix, e.g. php or site.add"),
    failed: bool = typer.Option(False, "--failed", help="Only failed actions"),
    limit: int = typer.Option(20, help="Number of entries to show"),
) -> None:
    """List recent lamma actions, newest first."""
    events = read_events(get_config(), action=action, target=site, failed_only=failed, limit=limit)
    if not events:
        console.print("No recorded actions.")
        return

    table = Table(title=f"Recent actions ({len(events)})")
    table.add_column("When", style="cyan")
    table.add_column("Action")
    table.add_column("Target")
    table.add_column("Actor")
    table.add_column("Result")
    table.add_column("ms", justify="right")
    for e in events:
        result = f"[green]{e.outcome}[/green]" if e.succeeded else f"[red]{e.outcome}[/red]"
        table.add_row(
            e.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S"),
            e.action,
            e.target,
            e.actor,
            result,
            str(e.duration_ms or 0),
        )
    console.print(table)
