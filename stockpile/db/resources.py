"""CRUD operations for the ``resource_stocks`` table.

Records only ever move ``pending → completed`` or ``pending → failed``; there
is no delete operation.
"""

from __future__ import annotations

import sqlite3
import uuid
from time import time
from typing import Optional

from stockpile.db.models import RESOURCE_STATUSES, ResourceRecord


def _row_to_record(row: sqlite3.Row) -> ResourceRecord:
    return ResourceRecord(
        id=row["id"],
        subtopic_id=row["subtopic_id"],
        url=row["url"],
        title=row["title"],
        summary=row["summary"],
        full_content=row["full_content"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def create_resource(conn: sqlite3.Connection, subtopic_id: str, url: str) -> ResourceRecord:
    """Insert a ``pending`` record for *url* and return it."""
    rid = str(uuid.uuid4())
    now = int(time())
    with conn:
        conn.execute(
            """
            INSERT INTO resource_stocks (id, subtopic_id, url, status, created_at, updated_at)
            VALUES (?, ?, ?, 'pending', ?, ?)
            """,
            (rid, subtopic_id, url, now, now),
        )
    return get_resource(conn, rid)  # type: ignore[return-value]


def get_resource(conn: sqlite3.Connection, record_id: str) -> Optional[ResourceRecord]:
    """Fetch a single record by id.  Returns ``None`` if not found."""
    row = conn.execute(
        "SELECT * FROM resource_stocks WHERE id = ?", (record_id,)
    ).fetchone()
    return _row_to_record(row) if row else None


def update_resource_content(
    conn: sqlite3.Connection,
    record_id: str,
    title: Optional[str],
    summary: Optional[str],
    full_content: str,
    status: str,
) -> ResourceRecord:
    """Move a ``pending`` record to its terminal state.

    Raises:
        ValueError: If the record does not exist, is no longer ``pending``,
            or *status* is not a terminal status.
    """
    if status not in RESOURCE_STATUSES or status == "pending":
        raise ValueError(f"Invalid terminal status {status!r}")

    now = int(time())
    with conn:
        cur = conn.execute(
            """
            UPDATE resource_stocks
            SET title = ?, summary = ?, full_content = ?, status = ?, updated_at = ?
            WHERE id = ? AND status = 'pending'
            """,
            (title, summary, full_content, status, now, record_id),
        )
    if cur.rowcount == 0:
        existing = get_resource(conn, record_id)
        if existing is None:
            raise ValueError(f"Resource not found: {record_id!r}")
        raise ValueError(
            f"Resource {record_id!r} is already {existing.status!r}; only pending records can be updated"
        )
    return get_resource(conn, record_id)  # type: ignore[return-value]


def list_resources(
    conn: sqlite3.Connection,
    subtopic_id: str,
    status: Optional[str] = None,
) -> list[ResourceRecord]:
    """Return a subtopic's records in creation order, optionally by status."""
    if status:
        rows = conn.execute(
            """
            SELECT * FROM resource_stocks
            WHERE subtopic_id = ? AND status = ?
            ORDER BY created_at, rowid
            """,
            (subtopic_id, status),
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM resource_stocks WHERE subtopic_id = ? ORDER BY created_at, rowid",
            (subtopic_id,),
        ).fetchall()
    return [_row_to_record(r) for r in rows]
