"""Main-content extraction with an ordered selector fallback chain.

The same chain serves both backends: :func:`extract_html` walks static markup
parsed by BeautifulSoup, while the browser backend feeds live-DOM text for each
selector into :func:`choose_content`.
"""

from __future__ import annotations

import logging
import re
from typing import Iterable, Optional

import trafilatura
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from stockpile.errors import ParseError
from stockpile.scraper.models import Extraction

logger = logging.getLogger(__name__)

# Most specific (encyclopedia) containers first, then generic article ones.
CONTENT_SELECTORS: tuple[str, ...] = (
    "#mw-content-text",
    ".mw-parser-output",
    "article",
    "main",
    ".content",
    "#content",
    ".post-content",
    ".entry-content",
)

MIN_CONTENT_CHARS = 100
STATIC_MAX_CHARS = 3000
LIVE_MAX_CHARS = 2000
EXTRACTION_FAILED = "Could not extract content"

_WHITESPACE = re.compile(r"\s+")
_NON_CONTENT_TAGS = ["script", "style", "noscript", "template"]


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

def normalise_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim both ends."""
    return _WHITESPACE.sub(" ", text).strip()


def truncate(text: str, max_chars: int) -> str:
    return text[:max_chars]


def choose_content(
    candidates: Iterable[Optional[str]],
    fallback: Optional[str],
    max_chars: int,
) -> Extraction:
    """Return the first candidate whose normalised text is long enough.

    *candidates* is consumed lazily, so expensive lookups after the winner are
    never performed.  ``None`` entries (selector did not match) are skipped.
    When nothing clears :data:`MIN_CONTENT_CHARS` the whole-document
    *fallback* is used; it only counts as sufficient if it clears the same
    threshold.  With no fallback text at all the :data:`EXTRACTION_FAILED`
    sentinel is returned.
    """
    for raw in candidates:
        if raw is None:
            continue
        text = normalise_whitespace(raw)
        if len(text) > MIN_CONTENT_CHARS:
            return Extraction(truncate(text, max_chars), sufficient=True)

    body = normalise_whitespace(fallback or "")
    if body:
        return Extraction(
            truncate(body, max_chars),
            sufficient=len(body) > MIN_CONTENT_CHARS,
        )
    return Extraction(EXTRACTION_FAILED, sufficient=False)


# ---------------------------------------------------------------------------
# Static markup
# ---------------------------------------------------------------------------

def parse_html(html: str) -> BeautifulSoup:
    """Parse *html*, stripping elements that never hold readable text.

    Raises:
        ParseError: If the parser rejects the markup outright.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
    except ParserRejectedMarkup as exc:
        raise ParseError(f"unreadable markup: {exc}") from exc
    for tag in soup(_NON_CONTENT_TAGS):
        tag.decompose()
    return soup


def extract_title(soup: BeautifulSoup) -> Optional[str]:
    """Return the stripped text of the first ``<title>``, or ``None``."""
    tag = soup.find("title")
    if tag is None:
        return None
    title = normalise_whitespace(tag.get_text())
    return title or None


def _selector_texts(soup: BeautifulSoup):
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        yield element.get_text(separator=" ") if element is not None else None


def _readability_text(html: str, url: Optional[str]) -> Optional[str]:
    return trafilatura.extract(
        html,
        url=url,
        include_links=False,
        include_images=False,
        include_tables=True,
    )


def extract_soup(
    soup: BeautifulSoup,
    html: Optional[str] = None,
    url: Optional[str] = None,
    max_chars: int = STATIC_MAX_CHARS,
) -> Extraction:
    """Apply the selector chain to a parsed document.

    When the raw *html* is given and neither the selectors nor the
    whole-document text clear :data:`MIN_CONTENT_CHARS`, a trafilatura
    readability pass gets the last word before the short result stands.
    """
    container = soup.body or soup
    extraction = choose_content(
        _selector_texts(soup), container.get_text(separator=" "), max_chars
    )
    if extraction.sufficient or not html:
        return extraction

    readable = normalise_whitespace(_readability_text(html, url) or "")
    if len(readable) > MIN_CONTENT_CHARS:
        return Extraction(truncate(readable, max_chars), sufficient=True)
    return extraction


def extract_html(
    html: str,
    url: Optional[str] = None,
    max_chars: int = STATIC_MAX_CHARS,
) -> tuple[Optional[str], Extraction]:
    """Return ``(title, extraction)`` for a raw markup string.

    Markup the parser rejects does not raise: it yields no title and the
    :data:`EXTRACTION_FAILED` sentinel.
    """
    try:
        soup = parse_html(html)
    except ParseError as exc:
        logger.warning("Falling back to sentinel for %s: %s", url or "<document>", exc)
        return None, Extraction(EXTRACTION_FAILED, sufficient=False)
    return extract_title(soup), extract_soup(soup, html=html, url=url, max_chars=max_chars)
