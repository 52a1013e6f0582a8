"""Network layer: HTTP retrieval, feed decoding and per-source failure gating."""

from .http import FetchFailure, FetchResult, FetchSuccess, HttpFetcher
from .rss import ParsedFeed, parse_feed
from .circuit_breaker import CircuitBreaker
from .feed import FeedFetcher

__all__ = [
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "HttpFetcher",
    "ParsedFeed",
    "parse_feed",
    "CircuitBreaker",
    "FeedFetcher",
]
