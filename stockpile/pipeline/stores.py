"""Collaborator interfaces consumed by the pipeline, with SQLite adapters.

The pipeline only depends on the two protocols below; the SQLite classes are
the implementations used by the CLI and the HTTP API.
"""

from __future__ import annotations

import sqlite3
import threading
from typing import Optional, Protocol

from stockpile.db.models import ResourceRecord, SubtopicWithTopic
from stockpile.db.resources import create_resource, update_resource_content
from stockpile.db.topics import get_subtopic_with_topic


class SubtopicLookup(Protocol):
    def get_with_topic(self, subtopic_id: str) -> Optional[SubtopicWithTopic]:
        """Return the subtopic with its topic name, or ``None`` if unknown."""


class ResourceStore(Protocol):
    def create(self, subtopic_id: str, url: str) -> ResourceRecord:
        """Insert and return a ``pending`` record."""

    def update_content(
        self,
        record_id: str,
        title: Optional[str],
        summary: Optional[str],
        full_content: str,
        status: str,
    ) -> None:
        """Move a ``pending`` record to ``completed`` or ``failed``."""


class SqliteSubtopicLookup:
    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def get_with_topic(self, subtopic_id: str) -> Optional[SubtopicWithTopic]:
        return get_subtopic_with_topic(self._conn, subtopic_id)


class SqliteResourceStore:
    """``resource_stocks`` writer safe to share between fetch worker threads.

    All writes go through one lock because a single ``sqlite3.Connection`` is
    shared by every worker.  Pass the connection's own *lock* when several
    stores write through the same connection.
    """

    def __init__(
        self, conn: sqlite3.Connection, lock: Optional[threading.Lock] = None
    ) -> None:
        self._conn = conn
        self._lock = lock if lock is not None else threading.Lock()

    def create(self, subtopic_id: str, url: str) -> ResourceRecord:
        with self._lock:
            return create_resource(self._conn, subtopic_id, url)

    def update_content(
        self,
        record_id: str,
        title: Optional[str],
        summary: Optional[str],
        full_content: str,
        status: str,
    ) -> None:
        with self._lock:
            update_resource_content(
                self._conn, record_id, title, summary, full_content, status
            )
