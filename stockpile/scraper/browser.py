"""Browser-automation backend driven through Playwright.

One live page serialises every navigation, so a :class:`BrowserFetcher` must
only ever be used from one thread at a time.  The pipeline honours this by
checking :attr:`ResourceFetcher.supports_concurrency`; there is no internal
locking.

Playwright is imported lazily so the rest of the package (and the test suite)
can be imported without a browser install.
"""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from stockpile.config import settings
from stockpile.errors import (
    DiscoveryError,
    FetchError,
    FetchTimeoutError,
    InitError,
    NetworkError,
)
from stockpile.scraper.extractor import CONTENT_SELECTORS, choose_content
from stockpile.scraper.models import ScrapedContent
from stockpile.scraper.fetcher import ResourceFetcher

logger = logging.getLogger(__name__)

_SEARCH_FIELD = "textarea[name=q], input[name=q]"
_COLLECT_HREFS = "els => els.map(e => e.href)"


def _registered_domain(url: str) -> str:
    """Return the host of *url* without a leading ``www.``."""
    host = urlparse(url).hostname or ""
    return host[4:] if host.startswith("www.") else host


def _is_external(href: str, engine_domain: str) -> bool:
    parsed = urlparse(href)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    host = parsed.hostname
    return not (host == engine_domain or host.endswith("." + engine_domain))


class BrowserFetcher(ResourceFetcher):
    """Search and fetch through a single Playwright browser session.

    With ``endpoint`` set the fetcher attaches to a remote browser over CDP;
    otherwise it launches a local headless Chromium.
    """

    supports_concurrency = False

    def __init__(
        self,
        endpoint: Optional[str] = None,
        search_engine_url: Optional[str] = None,
        settle_seconds: Optional[float] = None,
        nav_timeout: Optional[float] = None,
        max_chars: Optional[int] = None,
    ) -> None:
        self._endpoint = endpoint if endpoint is not None else settings.browser_endpoint
        self._search_engine_url = search_engine_url or settings.search_engine_url
        self._settle_ms = int(
            1000 * (settle_seconds if settle_seconds is not None else settings.browser_settle_seconds)
        )
        self._nav_timeout_ms = int(
            1000 * (nav_timeout if nav_timeout is not None else settings.browser_nav_timeout)
        )
        self._max_chars = max_chars if max_chars is not None else settings.browser_max_chars
        self._engine_domain = _registered_domain(self._search_engine_url)

        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    @property
    def name(self) -> str:
        return "browser"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415
        from playwright.sync_api import sync_playwright  # noqa: PLC0415

        try:
            self._playwright = sync_playwright().start()
            chromium = self._playwright.chromium
            if self._endpoint:
                self._browser = chromium.connect_over_cdp(
                    self._endpoint, timeout=self._nav_timeout_ms
                )
                contexts = self._browser.contexts
                context = contexts[0] if contexts else self._browser.new_context()
            else:
                self._browser = chromium.launch(headless=True)
                context = self._browser.new_context()
            self._page = context.new_page()
            self._page.set_default_timeout(self._nav_timeout_ms)
        except PlaywrightError as exc:
            where = self._endpoint or "local chromium"
            raise InitError(f"browser session unavailable ({where}): {exc}") from exc
        logger.info("Browser session ready (%s)", self._endpoint or "local headless chromium")

    def shutdown(self) -> None:
        from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415

        close_error: Optional[Exception] = None
        try:
            if self._page is not None:
                self._page.close()
            if self._browser is not None:
                self._browser.close()
        except PlaywrightError as exc:
            close_error = exc
        self._page = None
        self._browser = None

        playwright, self._playwright = self._playwright, None
        if playwright is not None:
            try:
                playwright.stop()
            except Exception as exc:
                raise FetchError(f"playwright driver did not stop cleanly: {exc}") from exc
        if close_error is not None:
            raise FetchError(
                f"browser session did not close cleanly: {close_error}"
            ) from close_error
        logger.info("Browser session closed")

    def _require_page(self) -> Any:
        if self._page is None:
            raise FetchError("BrowserFetcher used before initialize()")
        return self._page

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover(self, query: str, max_results: int) -> list[str]:
        from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415
        from playwright.sync_api import TimeoutError as PlaywrightTimeoutError  # noqa: PLC0415

        page = self._require_page()
        if max_results <= 0:
            return []

        try:
            page.goto(self._search_engine_url, wait_until="domcontentloaded")
            search_box = page.locator(_SEARCH_FIELD).first
            search_box.fill(query)
            search_box.press("Enter")
            page.wait_for_timeout(self._settle_ms)
            hrefs = page.eval_on_selector_all("a[href]", _COLLECT_HREFS)
        except PlaywrightTimeoutError as exc:
            raise DiscoveryError(f"search page timed out for {query!r}") from exc
        except PlaywrightError as exc:
            raise DiscoveryError(f"search failed for {query!r}: {exc}") from exc

        links: list[str] = []
        for href in hrefs or []:
            if not isinstance(href, str) or href in links:
                continue
            if _is_external(href, self._engine_domain):
                links.append(href)
            if len(links) >= max_results:
                break
        logger.info("Collected %d link(s) for %r", len(links), query)
        return links

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def _selector_texts(self, page: Any):
        from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415

        for selector in CONTENT_SELECTORS:
            try:
                element = page.query_selector(selector)
                yield element.inner_text() if element is not None else None
            except PlaywrightError as exc:
                logger.debug("Selector %s unreadable: %s", selector, exc)
                yield None

    def _body_text(self, page: Any) -> Optional[str]:
        from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415

        try:
            return page.inner_text("body")
        except PlaywrightError as exc:
            logger.warning("Page body unreadable: %s", exc)
            return None

    def fetch_content(self, url: str) -> ScrapedContent:
        from playwright.sync_api import Error as PlaywrightError  # noqa: PLC0415
        from playwright.sync_api import TimeoutError as PlaywrightTimeoutError  # noqa: PLC0415

        page = self._require_page()
        logger.info("Scraping content from %s", url)
        try:
            page.goto(url, wait_until="domcontentloaded")
            page.wait_for_timeout(self._settle_ms)
            title = (page.title() or "").strip() or None
        except PlaywrightTimeoutError as exc:
            raise FetchTimeoutError(
                f"navigation timed out after {self._nav_timeout_ms} ms: {url}"
            ) from exc
        except PlaywrightError as exc:
            raise NetworkError(f"navigation failed for {url}: {exc}") from exc

        extraction = choose_content(
            self._selector_texts(page), self._body_text(page), self._max_chars
        )
        return ScrapedContent(
            source_url=url,
            title=title,
            body=extraction.text,
            sufficient=extraction.sufficient,
        )
