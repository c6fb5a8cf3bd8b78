"""Scraper package — resource discovery, fetch & content extraction."""

from stockpile.scraper.extractor import choose_content, extract_html
from stockpile.scraper.fetcher import ResourceFetcher, build_fetcher
from stockpile.scraper.models import Extraction, ScrapedContent

__all__ = [
    "ResourceFetcher",
    "build_fetcher",
    "choose_content",
    "extract_html",
    "Extraction",
    "ScrapedContent",
]
