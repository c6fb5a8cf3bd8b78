"""Topic and subtopic seeding commands."""

from __future__ import annotations

from typing import Optional

import typer

from stockpile.db import get_connection, init_db
from stockpile.db.topics import create_subtopic, create_topic, get_topic, list_subtopics
from stockpile.query import CATEGORIES

topic_app = typer.Typer(help="Manage research topics.", no_args_is_help=True)
subtopic_app = typer.Typer(help="Manage subtopics of a topic.", no_args_is_help=True)


@topic_app.command("add")
def topic_add(
    name: str = typer.Argument(..., help="Topic name, e.g. 'Japan'."),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
) -> None:
    """Create a topic and print its id."""
    conn = get_connection()
    init_db(conn)
    try:
        topic = create_topic(conn, name, description)
    finally:
        conn.close()
    typer.echo(f"✅ Created topic {topic.name!r}  [{topic.id}]")


@subtopic_app.command("add")
def subtopic_add(
    topic_id: str = typer.Argument(..., help="Parent topic id."),
    name: str = typer.Argument(..., help="Subtopic name, e.g. 'Economy'."),
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help=f"Category hint: {' | '.join(CATEGORIES)}."
    ),
) -> None:
    """Create a subtopic under an existing topic."""
    if category and category not in CATEGORIES:
        typer.echo(f"Unknown category {category!r}. Use one of: {', '.join(CATEGORIES)}", err=True)
        raise typer.Exit(1)

    conn = get_connection()
    init_db(conn)
    try:
        if get_topic(conn, topic_id) is None:
            typer.echo(f"Topic not found: {topic_id}", err=True)
            raise typer.Exit(1)
        subtopic = create_subtopic(conn, topic_id, name, category=category)
    finally:
        conn.close()
    typer.echo(f"✅ Created subtopic {subtopic.name!r}  [{subtopic.id}]")


@subtopic_app.command("list")
def subtopic_list(
    topic_id: str = typer.Argument(..., help="Parent topic id."),
) -> None:
    """List the subtopics of a topic."""
    conn = get_connection()
    init_db(conn)
    try:
        subtopics = list_subtopics(conn, topic_id)
    finally:
        conn.close()
    if not subtopics:
        typer.echo("No subtopics found.")
        return
    for s in subtopics:
        typer.echo(f"  {s.id}  {s.name!r}  [{s.category or '-'}]")
