"""Stockpile CLI — entry-point for all backend operations.

Usage:
    python cli/main.py --help

Command groups:
    db         → database setup
    topic      → topic seeding
    subtopic   → subtopic seeding
    query      → preview the search query for a subtopic
    scrape     → run the resource pipeline
    resources  → inspect scraped resource records
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from stockpile.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import logging
from typing import List, Optional

import typer

from cli.commands.resources import resources_app
from cli.commands.topics import subtopic_app, topic_app
from stockpile.config import settings
from stockpile.db import get_connection, init_db
from stockpile.errors import InitError
from stockpile.query import compose_query

app = typer.Typer(
    name="stockpile",
    help="Stockpile resource discovery CLI.",
    no_args_is_help=True,
)
app.add_typer(topic_app, name="topic")
app.add_typer(subtopic_app, name="subtopic")
app.add_typer(resources_app, name="resources")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level."),
) -> None:
    """Configure logging for every sub-command."""
    level = "DEBUG" if verbose else settings.log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")


@db_app.command("init")
def db_init() -> None:
    """Initialise the SQLite database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Query preview
# ---------------------------------------------------------------------------
@app.command("query")
def query(
    topic: str = typer.Argument(..., help="Topic name."),
    subtopic: str = typer.Argument(..., help="Subtopic name."),
    category: Optional[str] = typer.Option(None, "--category", "-c", help="Category hint."),
    locale: str = typer.Option(settings.search_locale, "--locale", help="Keyword locale."),
) -> None:
    """Print the search query the pipeline would use."""
    typer.echo(compose_query(topic, subtopic, category, locale=locale))


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    subtopic_ids: List[str] = typer.Argument(..., help="One or more subtopic ids."),
    backend: Optional[str] = typer.Option(
        None, "--backend", "-b", help="Scrape backend: direct | browser (default from settings)."
    ),
) -> None:
    """Discover and extract resources for the given subtopics."""
    from stockpile.pipeline import start_scraping

    typer.echo(f"[scrape] Starting scraping for {len(subtopic_ids)} subtopic(s) …")
    try:
        message = start_scraping(subtopic_ids, backend=backend)
    except ValueError as exc:
        typer.echo(f"[scrape] {exc}", err=True)
        raise typer.Exit(1) from exc
    except InitError as exc:
        typer.echo(f"[scrape] Backend unavailable: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"[scrape] {message}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
