"""Stockpile — topic-driven resource discovery and content extraction."""

__version__ = "0.1.0"
