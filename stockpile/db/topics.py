"""Minimal topic / subtopic persistence: seeding and the pipeline's lookup."""

from __future__ import annotations

import sqlite3
import uuid
from time import time
from typing import Optional

from stockpile.db.models import Subtopic, SubtopicWithTopic, Topic


def _row_to_topic(row: sqlite3.Row) -> Topic:
    return Topic(
        id=row["id"],
        name=row["name"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_subtopic(row: sqlite3.Row) -> Subtopic:
    return Subtopic(
        id=row["id"],
        topic_id=row["topic_id"],
        name=row["name"],
        description=row["description"],
        category=row["category"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def create_topic(
    conn: sqlite3.Connection,
    name: str,
    description: Optional[str] = None,
) -> Topic:
    """Insert a new topic and return it."""
    tid = str(uuid.uuid4())
    now = int(time())
    with conn:
        conn.execute(
            """
            INSERT INTO topics (id, name, description, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (tid, name, description, now, now),
        )
    return get_topic(conn, tid)  # type: ignore[return-value]


def get_topic(conn: sqlite3.Connection, topic_id: str) -> Optional[Topic]:
    row = conn.execute("SELECT * FROM topics WHERE id = ?", (topic_id,)).fetchone()
    return _row_to_topic(row) if row else None


def create_subtopic(
    conn: sqlite3.Connection,
    topic_id: str,
    name: str,
    category: Optional[str] = None,
    description: Optional[str] = None,
) -> Subtopic:
    """Insert a new subtopic under *topic_id* and return it.

    Raises:
        ValueError: If the parent topic does not exist.
    """
    if get_topic(conn, topic_id) is None:
        raise ValueError(f"Topic not found: {topic_id!r}")

    sid = str(uuid.uuid4())
    now = int(time())
    with conn:
        conn.execute(
            """
            INSERT INTO subtopics (id, topic_id, name, description, category, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (sid, topic_id, name, description, category, now, now),
        )
    return get_subtopic(conn, sid)  # type: ignore[return-value]


def get_subtopic(conn: sqlite3.Connection, subtopic_id: str) -> Optional[Subtopic]:
    row = conn.execute("SELECT * FROM subtopics WHERE id = ?", (subtopic_id,)).fetchone()
    return _row_to_subtopic(row) if row else None


def list_subtopics(conn: sqlite3.Connection, topic_id: str) -> list[Subtopic]:
    rows = conn.execute(
        "SELECT * FROM subtopics WHERE topic_id = ? ORDER BY created_at, rowid",
        (topic_id,),
    ).fetchall()
    return [_row_to_subtopic(r) for r in rows]


def get_subtopic_with_topic(
    conn: sqlite3.Connection, subtopic_id: str
) -> Optional[SubtopicWithTopic]:
    """Return the subtopic joined with its parent topic's name, or ``None``."""
    row = conn.execute(
        """
        SELECT s.id, s.name, s.category, t.name AS topic_name
        FROM subtopics s
        JOIN topics t ON t.id = s.topic_id
        WHERE s.id = ?
        """,
        (subtopic_id,),
    ).fetchone()
    if row is None:
        return None
    return SubtopicWithTopic(
        id=row["id"],
        name=row["name"],
        topic_name=row["topic_name"],
        category=row["category"],
    )
