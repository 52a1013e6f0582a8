"""Exception taxonomy for the ingestion pipeline.

None of these are fatal to a run. Each is converted into a result value or a
``SourceFailure`` entry at the boundary of the component that raised it.
"""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class FetchError(PipelineError):
    def __init__(self, message: str, *, url: str = "", status: Optional[int] = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class TransientNetworkError(FetchError):
    """5xx responses and connection-level failures. Retried."""


class FetchTimeout(FetchError):
    """The request exceeded its timeout ceiling."""


class PermanentFetchError(FetchError):
    """4xx responses or malformed URLs. Never retried."""


class ParseError(PipelineError):
    """A feed or page could not be decoded."""


class ScorerUnavailable(PipelineError):
    """The remote scorer failed at transport or schema level."""


class PersistenceError(PipelineError):
    """The persistence gateway could not store a record."""
