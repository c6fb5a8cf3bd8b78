"""Resource-fetcher abstraction shared by the discovery/fetch backends.

Two backends implement :class:`ResourceFetcher`:

  * ``direct``  — :class:`~stockpile.scraper.direct.DirectFetcher`; httpx
    against a MediaWiki opensearch endpoint plus static markup parsing.
  * ``browser`` — :class:`~stockpile.scraper.browser.BrowserFetcher`; a
    Playwright-driven browser session that searches a live search engine.

Every method reports failure by raising a :class:`~stockpile.errors.FetchError`
subclass and never anything else, so callers can absorb per-URL errors with a
single ``except`` clause.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from stockpile.config import settings
from stockpile.scraper.models import ScrapedContent

BACKENDS = ("direct", "browser")


class ResourceFetcher(ABC):
    """Lifecycle: ``initialize`` once, any number of calls, ``shutdown`` once."""

    #: Whether ``discover``/``fetch_content`` may be called from several
    #: threads at once on the same instance.
    supports_concurrency: bool = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name."""

    @abstractmethod
    def initialize(self) -> None:
        """Acquire the session state the backend needs.

        Raises:
            InitError: The backend is unreachable or misconfigured.
        """

    @abstractmethod
    def discover(self, query: str, max_results: int) -> list[str]:
        """Return at most *max_results* deduplicated candidate URLs.

        An empty list (not an error) means the backend found nothing.

        Raises:
            DiscoveryError: The search backend itself failed.
        """

    @abstractmethod
    def fetch_content(self, url: str) -> ScrapedContent:
        """Retrieve *url* and return its extracted title and body.

        Raises:
            NetworkError, FetchTimeoutError: Per-URL, recoverable.
        """

    @abstractmethod
    def shutdown(self) -> None:
        """Release backend resources.  Safe after a partial ``initialize``."""


def build_fetcher(backend: Optional[str] = None) -> ResourceFetcher:
    """Return an uninitialised fetcher for *backend* (default from settings).

    Raises:
        ValueError: If *backend* is not one of :data:`BACKENDS`.
    """
    choice = (backend or settings.scrape_backend).strip().lower()
    if choice == "direct":
        from stockpile.scraper.direct import DirectFetcher

        return DirectFetcher()
    if choice == "browser":
        from stockpile.scraper.browser import BrowserFetcher

        return BrowserFetcher()
    raise ValueError(f"Unknown scrape backend {choice!r}. Use one of: {', '.join(BACKENDS)}")
