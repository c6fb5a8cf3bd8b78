"""Exception hierarchy shared by the fetch backends and the pipeline.

Only :class:`InitError` is fatal to a pipeline run.  Every other
:class:`FetchError` is absorbed per subtopic or per URL and turned into state
(a skipped subtopic or a ``failed`` resource record).
"""

from __future__ import annotations


class FetchError(Exception):
    """Base class for every error raised by a :class:`ResourceFetcher`."""


class InitError(FetchError):
    """The backend could not be set up (unreachable or misconfigured)."""


class DiscoveryError(FetchError):
    """The search backend failed while collecting candidate links."""


class NetworkError(FetchError):
    """Transport failure or error status for a single URL."""


class FetchTimeoutError(FetchError):
    """A bounded wait for a single URL expired."""


class ParseError(FetchError):
    """Markup or DOM could not be read."""


class SubtopicNotFoundError(LookupError):
    """The requested subtopic id does not exist."""
