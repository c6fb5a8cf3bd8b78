"""Data models for the scraper backends."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Extraction:
    """Main-content text chosen by the extractor.

    ``sufficient`` is ``False`` when no candidate region cleared the minimum
    length and the text is a short whole-document fallback or the failure
    sentinel.
    """

    text: str
    sufficient: bool


@dataclass(frozen=True)
class ScrapedContent:
    """Title and bounded body text extracted from one fetched resource."""

    source_url: str
    title: Optional[str]
    body: str
    sufficient: bool = True
