"""Shared fixtures: in-memory DB, seeded subtopics and a scriptable fetcher.

``FakeFetcher`` implements :class:`ResourceFetcher` without any network
access.  Discovery results and fetch results are scripted per query / URL;
an exception instance in either map is raised instead of returned.
"""

from __future__ import annotations

import sqlite3
import threading
from typing import Callable, Generator, Optional

import pytest

from stockpile.db.connection import get_connection
from stockpile.db.migrations import init_db
from stockpile.db.topics import create_subtopic, create_topic
from stockpile.errors import InitError
from stockpile.scraper.fetcher import ResourceFetcher
from stockpile.scraper.models import ScrapedContent


class FakeFetcher(ResourceFetcher):
    def __init__(
        self,
        discoveries: Optional[dict] = None,
        contents: Optional[dict] = None,
        init_error: Optional[InitError] = None,
        shutdown_error: Optional[Exception] = None,
        concurrent: bool = False,
        on_fetch: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.discoveries = discoveries or {}
        self.contents = contents or {}
        self.init_error = init_error
        self.shutdown_error = shutdown_error
        self.supports_concurrency = concurrent
        self.on_fetch = on_fetch

        self.initialize_calls = 0
        self.shutdown_calls = 0
        self.queries: list[tuple[str, int]] = []
        self.fetched: list[str] = []
        self.fetch_threads: set[int] = set()
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "fake"

    def initialize(self) -> None:
        self.initialize_calls += 1
        if self.init_error is not None:
            raise self.init_error

    def discover(self, query: str, max_results: int) -> list[str]:
        self.queries.append((query, max_results))
        result = self.discoveries.get(query, [])
        if isinstance(result, Exception):
            raise result
        return list(result)[:max_results]

    def fetch_content(self, url: str) -> ScrapedContent:
        with self._lock:
            self.fetched.append(url)
            self.fetch_threads.add(threading.get_ident())
        if self.on_fetch is not None:
            self.on_fetch(url)
        result = self.contents.get(url)
        if result is None:
            result = ScrapedContent(source_url=url, title=f"Title of {url}", body="x" * 300)
        if isinstance(result, Exception):
            raise result
        return result

    def shutdown(self) -> None:
        self.shutdown_calls += 1
        if self.shutdown_error is not None:
            raise self.shutdown_error


@pytest.fixture()
def make_fetcher() -> Callable[..., FakeFetcher]:
    """Factory for :class:`FakeFetcher` instances."""
    return FakeFetcher


@pytest.fixture()
def conn() -> Generator[sqlite3.Connection, None, None]:
    """In-memory connection with the schema initialised."""
    connection = get_connection(db_path=":memory:")  # type: ignore[arg-type]
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture()
def seeded(conn: sqlite3.Connection) -> dict[str, str]:
    """One topic with three subtopics; returns a name → id mapping."""
    topic = create_topic(conn, "Japan")
    economy = create_subtopic(conn, topic.id, "Economy", category="technical")
    history = create_subtopic(conn, topic.id, "Edo period", category="history")
    food = create_subtopic(conn, topic.id, "Food")
    return {
        "topic": topic.id,
        "economy": economy.id,
        "history": history.id,
        "food": food.id,
    }
