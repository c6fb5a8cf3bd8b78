"""Resource-record inspection commands."""

from __future__ import annotations

from typing import Optional

import typer

from stockpile.db import get_connection, init_db
from stockpile.db.models import RESOURCE_STATUSES
from stockpile.db.resources import list_resources

resources_app = typer.Typer(help="Inspect scraped resource records.", no_args_is_help=True)

_STATUS_ICONS = {"pending": "⏳", "completed": "✅", "failed": "❌"}


@resources_app.command("list")
def resources_list(
    subtopic_id: str = typer.Argument(..., help="Subtopic id."),
    status: Optional[str] = typer.Option(
        None, "--status", help=f"Filter by status: {' | '.join(RESOURCE_STATUSES)}."
    ),
) -> None:
    """List a subtopic's resource records in creation order."""
    conn = get_connection()
    init_db(conn)
    try:
        records = list_resources(conn, subtopic_id, status=status)
    finally:
        conn.close()

    if not records:
        typer.echo("No resources found.")
        return
    for r in records:
        icon = _STATUS_ICONS.get(r.status, "?")
        typer.echo(f"{icon} [{r.id[:8]}…] {r.status:<9} {r.url}")
        if r.title:
            typer.echo(f"    Title   : {r.title}")
        if r.status == "failed" and r.full_content:
            typer.echo(f"    Error   : {r.full_content}")
        elif r.summary:
            typer.echo(f"    Summary : {r.summary}")
