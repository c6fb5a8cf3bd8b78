"""Resource pipeline package.

Public re-exports so callers can write::

    from stockpile.pipeline import start_scraping
"""

from stockpile.pipeline.runner import (
    PipelineSummary,
    ResourcePipeline,
    UrlOutcome,
    start_scraping,
)

__all__ = ["PipelineSummary", "ResourcePipeline", "UrlOutcome", "start_scraping"]
