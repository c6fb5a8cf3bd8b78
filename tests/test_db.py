"""Database layer tests.

All tests use an in-memory SQLite database so they are fast, isolated and
side-effect free (nothing written to ~/.stockpile).
"""

from __future__ import annotations

import sqlite3

import pytest

from stockpile.db.connection import get_connection
from stockpile.db.migrations import init_db
from stockpile.db.resources import (
    create_resource,
    get_resource,
    list_resources,
    update_resource_content,
)
from stockpile.db.topics import (
    create_subtopic,
    create_topic,
    get_subtopic_with_topic,
    list_subtopics,
)


class TestConnection:
    def test_foreign_keys_enabled(self, conn: sqlite3.Connection) -> None:
        assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1

    def test_wal_mode(self, conn: sqlite3.Connection) -> None:
        # In-memory DBs always return 'memory', on-disk returns 'wal'
        assert conn.execute("PRAGMA journal_mode").fetchone()[0] in ("wal", "memory")

    def test_on_disk_database_created(self, tmp_path) -> None:
        path = tmp_path / "nested" / "stockpile.db"
        c = get_connection(db_path=path)
        init_db(c)
        c.close()
        assert path.exists()


class TestInitDb:
    def test_tables_exist(self, conn: sqlite3.Connection) -> None:
        tables = {
            r[0]
            for r in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        assert {"topics", "subtopics", "resource_stocks"} <= tables

    def test_idempotent(self, conn: sqlite3.Connection) -> None:
        init_db(conn)
        init_db(conn)


class TestTopics:
    def test_subtopic_with_topic(self, conn: sqlite3.Connection) -> None:
        topic = create_topic(conn, "Japan", "An island country")
        sub = create_subtopic(conn, topic.id, "Economy", category="technical")

        found = get_subtopic_with_topic(conn, sub.id)

        assert found is not None
        assert found.name == "Economy"
        assert found.topic_name == "Japan"
        assert found.category == "technical"

    def test_missing_subtopic_is_none(self, conn: sqlite3.Connection) -> None:
        assert get_subtopic_with_topic(conn, "nope") is None

    def test_subtopic_requires_topic(self, conn: sqlite3.Connection) -> None:
        with pytest.raises(ValueError, match="Topic not found"):
            create_subtopic(conn, "missing", "Economy")

    def test_list_subtopics_in_creation_order(self, seeded, conn) -> None:
        names = [s.name for s in list_subtopics(conn, seeded["topic"])]
        assert names == ["Economy", "Edo period", "Food"]


class TestResources:
    def test_create_is_pending(self, seeded, conn) -> None:
        record = create_resource(conn, seeded["economy"], "https://a.example/1")
        assert record.status == "pending"
        assert record.full_content is None
        assert record.title is None

    def test_complete_record(self, seeded, conn) -> None:
        record = create_resource(conn, seeded["economy"], "https://a.example/1")
        updated = update_resource_content(
            conn, record.id, "Title", "Summary", "Full body", "completed"
        )
        assert updated.status == "completed"
        assert updated.title == "Title"
        assert updated.summary == "Summary"
        assert updated.full_content == "Full body"

    def test_terminal_records_never_regress(self, seeded, conn) -> None:
        record = create_resource(conn, seeded["economy"], "https://a.example/1")
        update_resource_content(conn, record.id, None, None, "boom", "failed")

        with pytest.raises(ValueError, match="already 'failed'"):
            update_resource_content(conn, record.id, "T", "S", "body", "completed")
        assert get_resource(conn, record.id).status == "failed"

    def test_pending_is_not_a_terminal_status(self, seeded, conn) -> None:
        record = create_resource(conn, seeded["economy"], "https://a.example/1")
        with pytest.raises(ValueError, match="Invalid terminal status"):
            update_resource_content(conn, record.id, None, None, "x", "pending")

    def test_unknown_record(self, conn) -> None:
        with pytest.raises(ValueError, match="Resource not found"):
            update_resource_content(conn, "missing", None, None, "x", "failed")

    def test_list_in_creation_order_and_by_status(self, seeded, conn) -> None:
        urls = [f"https://a.example/{i}" for i in range(4)]
        records = [create_resource(conn, seeded["economy"], u) for u in urls]
        update_resource_content(conn, records[1].id, None, None, "err", "failed")

        assert [r.url for r in list_resources(conn, seeded["economy"])] == urls
        failed = list_resources(conn, seeded["economy"], status="failed")
        assert [r.url for r in failed] == [urls[1]]
        assert list_resources(conn, seeded["history"]) == []
