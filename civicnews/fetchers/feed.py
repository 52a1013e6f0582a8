from __future__ import annotations

from ..models import Source
from ..utils.logging import get_logger
from .circuit_breaker import CircuitBreaker
from .http import FetchFailure, FetchResult, HttpFetcher

logger = get_logger("civicnews.fetchers.feed")


class FeedFetcher:
    """Fetch one feed of one source, gated by the source's circuit breaker.

    Only this class updates a source's failure counters. While the breaker is
    open the feed is reported as ``circuit_open`` and no request is made.
    """

    def __init__(self, http: HttpFetcher, breaker: CircuitBreaker) -> None:
        self.http = http
        self.breaker = breaker

    def fetch(self, source: Source, url: str) -> FetchResult:
        if self.breaker.is_open(source.id):
            remaining = self.breaker.cooldown_remaining(source.id)
            logger.info("Skipping %s for %s: circuit open (%s remaining)", url, source.id, remaining)
            return FetchFailure(url=url, kind="circuit_open", detail=f"cooldown remaining {remaining}")

        result = self.http.fetch(url)
        if result.ok:
            self.breaker.record_success(source.id)
        else:
            self.breaker.record_failure(source.id)
        return result
