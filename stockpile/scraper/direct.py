"""Direct HTTP backend: MediaWiki opensearch discovery + static extraction."""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import httpx

from stockpile.config import settings
from stockpile.errors import (
    DiscoveryError,
    FetchError,
    FetchTimeoutError,
    InitError,
    NetworkError,
)
from stockpile.scraper.extractor import extract_html
from stockpile.scraper.fetcher import ResourceFetcher
from stockpile.scraper.models import ScrapedContent

logger = logging.getLogger(__name__)

# opensearch never returns more than this many titles per call here.
_OPENSEARCH_LIMIT = 5


def _page_url(wiki_url: str, title: str) -> str:
    return f"{wiki_url}/wiki/{quote(title.strip().replace(' ', '_'))}"


class DirectFetcher(ResourceFetcher):
    """Fetch resources with a shared ``httpx.Client`` connection pool.

    Stateless across calls beyond the pool, so one instance may serve several
    threads at once.
    """

    supports_concurrency = True

    def __init__(
        self,
        wiki_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_chars: Optional[int] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self._wiki_url = (wiki_url or settings.wiki_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.request_timeout
        self._max_chars = max_chars if max_chars is not None else settings.direct_max_chars
        self._user_agent = user_agent or settings.user_agent
        self._client: httpx.Client | None = None

    @property
    def name(self) -> str:
        return "direct"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        try:
            self._client = httpx.Client(
                headers={"User-Agent": self._user_agent},
                timeout=self._timeout,
                follow_redirects=True,
            )
        except (httpx.HTTPError, ValueError) as exc:
            raise InitError(f"could not build HTTP client: {exc}") from exc
        logger.info("HTTP client initialised (timeout=%ss, wiki=%s)", self._timeout, self._wiki_url)

    def shutdown(self) -> None:
        if self._client is None:
            return
        try:
            self._client.close()
        finally:
            self._client = None
        logger.info("HTTP client closed")

    def _require_client(self) -> httpx.Client:
        if self._client is None:
            raise FetchError("DirectFetcher used before initialize()")
        return self._client

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _opensearch_titles(self, client: httpx.Client, query: str, limit: int) -> list[str]:
        try:
            resp = client.get(
                f"{self._wiki_url}/w/api.php",
                params={
                    "action": "opensearch",
                    "search": query,
                    "limit": limit,
                    "namespace": 0,
                    "format": "json",
                },
            )
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise DiscoveryError(f"opensearch timed out for {query!r}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DiscoveryError(f"opensearch failed for {query!r}: {exc}") from exc

        # Response shape: [query, [titles...], [descriptions...], [urls...]]
        try:
            data = resp.json()
        except ValueError:
            logger.warning("opensearch returned non-JSON body for %r", query)
            return []
        if not isinstance(data, list) or len(data) < 2 or not isinstance(data[1], list):
            return []
        return [t for t in data[1] if isinstance(t, str) and t.strip()]

    def _url_exists(self, client: httpx.Client, url: str) -> bool:
        try:
            return client.head(url).is_success
        except (httpx.HTTPError, httpx.InvalidURL):
            return False

    def discover(self, query: str, max_results: int) -> list[str]:
        client = self._require_client()
        if max_results <= 0:
            return []

        links: list[str] = []
        titles = self._opensearch_titles(client, query, min(max_results, _OPENSEARCH_LIMIT))
        for title in titles:
            url = _page_url(self._wiki_url, title)
            if url not in links:
                logger.debug("Found wiki link: %s", url)
                links.append(url)

        direct_url = _page_url(self._wiki_url, query)
        if (
            len(links) < max_results
            and direct_url not in links
            and self._url_exists(client, direct_url)
        ):
            logger.debug("Found direct wiki link: %s", direct_url)
            links.append(direct_url)

        links = links[:max_results]
        logger.info("Collected %d link(s) for %r", len(links), query)
        return links

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    def fetch_content(self, url: str) -> ScrapedContent:
        client = self._require_client()
        logger.info("Scraping content from %s", url)
        try:
            resp = client.get(url)
            resp.raise_for_status()
        except httpx.TimeoutException as exc:
            raise FetchTimeoutError(f"request timed out after {self._timeout}s: {url}") from exc
        except httpx.HTTPStatusError as exc:
            raise NetworkError(f"HTTP {exc.response.status_code} for {url}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"request failed for {url}: {exc}") from exc
        except (httpx.InvalidURL, ValueError) as exc:
            raise NetworkError(f"invalid URL {url!r}: {exc}") from exc

        title, extraction = extract_html(resp.text, url=url, max_chars=self._max_chars)
        return ScrapedContent(
            source_url=url,
            title=title,
            body=extraction.text,
            sufficient=extraction.sufficient,
        )
