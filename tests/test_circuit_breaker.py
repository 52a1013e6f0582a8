"""Tests for the per-source circuit breaker and the breaker-gated feed fetcher."""

from datetime import timedelta

import pytest

from civicnews.fetchers import CircuitBreaker, FeedFetcher, HttpFetcher
from civicnews.sources import SourceRegistry

from fakes import FakeGet, FakeResponse, make_source, no_sleep


@pytest.fixture
def breaker(registry, clock) -> CircuitBreaker:
    return CircuitBreaker(registry, threshold=3, cooldown=timedelta(hours=1), clock=clock)


class TestCircuitBreaker:
    def test_closed_below_threshold(self, breaker):
        """Two failures keep the breaker closed."""
        assert breaker.record_failure("cbc") is False
        assert breaker.record_failure("cbc") is False
        assert breaker.is_open("cbc") is False

    def test_opens_at_threshold(self, breaker, registry, clock):
        """The third consecutive failure opens the breaker with a one hour cooldown."""
        breaker.record_failure("cbc")
        breaker.record_failure("cbc")
        assert breaker.record_failure("cbc") is True
        assert breaker.is_open("cbc") is True
        assert registry.require("cbc").cooldown_until == clock.now + timedelta(hours=1)
        assert breaker.cooldown_remaining("cbc") == timedelta(hours=1)

    def test_success_resets_counter(self, breaker, registry):
        breaker.record_failure("cbc")
        breaker.record_failure("cbc")
        breaker.record_success("cbc")
        src = registry.require("cbc")
        assert src.consecutive_failures == 0
        assert src.cooldown_until is None
        assert breaker.record_failure("cbc") is False

    def test_cooldown_expires(self, breaker, clock):
        """After the cooldown the source may be tried again; one more failure re-opens it."""
        for _ in range(3):
            breaker.record_failure("cbc")
        clock.advance(minutes=59)
        assert breaker.is_open("cbc") is True
        clock.advance(minutes=2)
        assert breaker.is_open("cbc") is False
        assert breaker.cooldown_remaining("cbc") is None
        assert breaker.record_failure("cbc") is True
        assert breaker.is_open("cbc") is True

    def test_invalid_threshold(self, registry):
        with pytest.raises(ValueError):
            CircuitBreaker(registry, threshold=0)


class TestFeedFetcher:
    def test_open_breaker_makes_no_request(self, clock):
        """Once open, the next feed is not requested and reports circuit_open."""
        feed = "https://down.example.ca/rss"
        src = make_source("down", feeds=[feed])
        registry = SourceRegistry([src])
        get = FakeGet({feed: FakeResponse(404)})
        http = HttpFetcher(get=get, sleep=no_sleep)
        breaker = CircuitBreaker(registry, threshold=3, clock=clock)
        fetcher = FeedFetcher(http, breaker)

        for _ in range(3):
            assert fetcher.fetch(src, feed).ok is False
        assert get.count(feed) == 3

        result = fetcher.fetch(src, feed)
        assert result.ok is False
        assert result.kind == "circuit_open"
        assert get.count(feed) == 3

    def test_success_updates_breaker(self, clock):
        feed = "https://ok.example.ca/rss"
        src = make_source("ok", feeds=[feed])
        registry = SourceRegistry([src])
        src.consecutive_failures = 2
        http = HttpFetcher(get=FakeGet({feed: FakeResponse(200, b"<rss/>")}), sleep=no_sleep)
        fetcher = FeedFetcher(http, CircuitBreaker(registry, clock=clock))

        assert fetcher.fetch(src, feed).ok is True
        assert src.consecutive_failures == 0
        assert src.last_success_at == clock.now
