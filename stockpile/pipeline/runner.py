"""Subtopic → query → discovery → fetch → persisted resource records.

``ResourcePipeline.run`` is the orchestrator; ``start_scraping`` wires it to
the configured backend and the SQLite collaborators and is the single entry
point used by the CLI and the HTTP API.

Every per-URL and per-subtopic failure is turned into state (a ``failed``
record or a skipped subtopic) plus a log line.  Only
:class:`~stockpile.errors.InitError` escapes ``run``.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional

from stockpile.config import settings
from stockpile.db import get_connection, init_db
from stockpile.db.models import ResourceRecord, SubtopicWithTopic
from stockpile.errors import FetchError, SubtopicNotFoundError
from stockpile.pipeline.stores import (
    ResourceStore,
    SqliteResourceStore,
    SqliteSubtopicLookup,
    SubtopicLookup,
)
from stockpile.query import compose_query
from stockpile.scraper.fetcher import ResourceFetcher, build_fetcher

logger = logging.getLogger(__name__)

INSUFFICIENT_POLICIES = ("completed", "failed")
_CANCELLED = "Cancelled before fetch"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UrlOutcome:
    """Terminal state reached by one discovered URL."""

    subtopic_id: str
    url: str
    record_id: str
    status: str
    error: Optional[str] = None


@dataclass
class PipelineSummary:
    """Counts and per-URL outcomes accumulated over one run."""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: list[str] = field(default_factory=list)
    outcomes: list[UrlOutcome] = field(default_factory=list)
    cancelled: bool = False

    def record(self, outcome: UrlOutcome) -> None:
        self.outcomes.append(outcome)
        self.attempted += 1
        if outcome.status == "completed":
            self.succeeded += 1
        else:
            self.failed += 1

    def message(self) -> str:
        text = (
            f"Scraping completed. Attempted {self.attempted} resource(s), "
            f"{self.succeeded} succeeded."
        )
        if self.cancelled:
            text += " Run was cancelled before all subtopics were processed."
        return text


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class ResourcePipeline:
    """Run discovery and extraction for a batch of subtopics.

    The fetcher is owned by this pipeline for the duration of :meth:`run`:
    it is initialised once before the first subtopic and shut down once at
    the end, even when subtopics fail.

    Subtopics are processed one after another.  Within a subtopic, URLs are
    fetched sequentially unless ``max_workers > 1`` *and* the fetcher reports
    ``supports_concurrency``; in that case every ``pending`` record of the
    subtopic is created first, in discovery order, and the fetches fan out to
    a thread pool.
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        lookup: SubtopicLookup,
        store: ResourceStore,
        *,
        max_results: Optional[int] = None,
        summary_chars: Optional[int] = None,
        insufficient_status: Optional[str] = None,
        max_workers: Optional[int] = None,
        locale: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self._fetcher = fetcher
        self._lookup = lookup
        self._store = store
        self._max_results = max_results if max_results is not None else settings.discovery_max_results
        self._summary_chars = summary_chars if summary_chars is not None else settings.summary_chars
        self._insufficient_status = insufficient_status or settings.insufficient_content_status
        self._locale = locale or settings.search_locale
        self._cancel_event = cancel_event

        if self._insufficient_status not in INSUFFICIENT_POLICIES:
            raise ValueError(
                f"insufficient_status must be one of {INSUFFICIENT_POLICIES}, "
                f"got {self._insufficient_status!r}"
            )

        workers = max_workers if max_workers is not None else settings.fetch_concurrency
        if workers > 1 and not fetcher.supports_concurrency:
            logger.info(
                "Backend %r holds a single session; fetching sequentially", fetcher.name
            )
            workers = 1
        self._max_workers = max(workers, 1)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self, subtopic_ids: Iterable[str]) -> PipelineSummary:
        """Process *subtopic_ids* in order and return the aggregated summary.

        Raises:
            InitError: The fetcher could not be initialised.  Nothing is
                persisted in that case.
        """
        summary = PipelineSummary()
        try:
            self._fetcher.initialize()
            for subtopic_id in subtopic_ids:
                if self._cancelled():
                    summary.cancelled = True
                    break
                self._run_subtopic(subtopic_id, summary)
        finally:
            self._shutdown()

        if summary.cancelled:
            logger.warning("Run cancelled after %d resource(s)", summary.attempted)
        logger.info(
            "Run finished: %d attempted, %d succeeded, %d failed, %d subtopic(s) skipped",
            summary.attempted,
            summary.succeeded,
            summary.failed,
            len(summary.skipped),
        )
        return summary

    # ------------------------------------------------------------------
    # Per subtopic
    # ------------------------------------------------------------------

    def _cancelled(self) -> bool:
        return self._cancel_event is not None and self._cancel_event.is_set()

    def _resolve(self, subtopic_id: str) -> SubtopicWithTopic:
        subtopic = self._lookup.get_with_topic(subtopic_id)
        if subtopic is None:
            raise SubtopicNotFoundError(f"Subtopic not found: {subtopic_id!r}")
        return subtopic

    def _run_subtopic(self, subtopic_id: str, summary: PipelineSummary) -> None:
        logger.info("Processing subtopic %s", subtopic_id)
        try:
            subtopic = self._resolve(subtopic_id)
        except SubtopicNotFoundError as exc:
            logger.warning("%s; skipping", exc)
            summary.skipped.append(subtopic_id)
            return
        except Exception:
            logger.exception("Lookup failed for subtopic %s; skipping", subtopic_id)
            summary.skipped.append(subtopic_id)
            return

        query = compose_query(subtopic.topic_name, subtopic.name, subtopic.category, self._locale)
        logger.info("Generated search query: %s", query)

        try:
            urls = self._fetcher.discover(query, self._max_results)
        except FetchError as exc:
            logger.warning("Discovery failed for subtopic %s: %s; skipping", subtopic_id, exc)
            summary.skipped.append(subtopic_id)
            return
        except Exception:
            logger.exception("Unexpected discovery error for subtopic %s; skipping", subtopic_id)
            summary.skipped.append(subtopic_id)
            return

        if not urls:
            logger.info("No candidate links for subtopic %s", subtopic_id)
            return

        if self._max_workers > 1:
            self._process_parallel(subtopic_id, urls, summary)
        else:
            self._process_sequential(subtopic_id, urls, summary)

    def _process_sequential(
        self, subtopic_id: str, urls: list[str], summary: PipelineSummary
    ) -> None:
        for url in urls:
            if self._cancelled():
                summary.cancelled = True
                return
            record = self._store.create(subtopic_id, url)
            summary.record(self._fetch_one(record))

    def _process_parallel(
        self, subtopic_id: str, urls: list[str], summary: PipelineSummary
    ) -> None:
        records = [self._store.create(subtopic_id, url) for url in urls]
        with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
            futures = [pool.submit(self._fetch_one, record) for record in records]
            # Results are folded in discovery order, on this thread only.
            for record, future in zip(records, futures):
                try:
                    outcome = future.result()
                except Exception as exc:
                    logger.exception("Fetch worker crashed on %s", record.url)
                    outcome = self._fail(record, f"{type(exc).__name__}: {exc}")
                if outcome.error == _CANCELLED:
                    summary.cancelled = True
                summary.record(outcome)

    # ------------------------------------------------------------------
    # Per URL
    # ------------------------------------------------------------------

    def _fetch_one(self, record: ResourceRecord) -> UrlOutcome:
        """Fetch one record's URL and move the record to its terminal state."""
        url = record.url
        if self._cancelled():
            return self._fail(record, _CANCELLED)

        try:
            content = self._fetcher.fetch_content(url)
        except FetchError as exc:
            error = f"{type(exc).__name__}: {exc}"
            logger.warning("Failed to scrape %s: %s", url, error)
            return self._fail(record, error)
        except Exception as exc:
            logger.exception("Unexpected error while scraping %s", url)
            return self._fail(record, f"{type(exc).__name__}: {exc}")

        if not content.sufficient:
            logger.info("Insufficient content extracted from %s", url)
            if self._insufficient_status == "failed":
                return self._fail(record, f"Insufficient content extracted from {url}")

        self._store.update_content(
            record.id,
            content.title,
            content.body[: self._summary_chars],
            content.body,
            "completed",
        )
        logger.info("Stored %d char(s) from %s", len(content.body), url)
        return UrlOutcome(record.subtopic_id, url, record.id, "completed")

    def _fail(self, record: ResourceRecord, error: str) -> UrlOutcome:
        self._store.update_content(record.id, None, None, error, "failed")
        return UrlOutcome(record.subtopic_id, record.url, record.id, "failed", error)

    def _shutdown(self) -> None:
        try:
            self._fetcher.shutdown()
        except FetchError as exc:
            logger.warning("Backend %r did not shut down cleanly: %s", self._fetcher.name, exc)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def start_scraping(
    subtopic_ids: Iterable[str],
    *,
    conn: Optional[sqlite3.Connection] = None,
    backend: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None,
    lock: Optional[threading.Lock] = None,
) -> str:
    """Scrape resources for *subtopic_ids* and return a human-readable summary.

    Opens (and closes) its own DB connection unless *conn* is given.  Callers
    sharing *conn* between runs pass the same *lock* so their writes are
    serialised against each other.

    Raises:
        InitError: The scrape backend could not be initialised.
        ValueError: *backend* names an unknown backend.
    """
    fetcher = build_fetcher(backend)
    own_conn = conn is None
    if conn is None:
        conn = get_connection()
        init_db(conn)

    try:
        pipeline = ResourcePipeline(
            fetcher,
            SqliteSubtopicLookup(conn),
            SqliteResourceStore(conn, lock=lock),
            cancel_event=cancel_event,
        )
        summary = pipeline.run(list(subtopic_ids))
    finally:
        if own_conn:
            conn.close()

    return summary.message()
