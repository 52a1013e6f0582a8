"""End-to-end tests for the ingestion engine with a fake HTTP transport."""

from typing import Dict

import pytest

from civicnews.errors import PersistenceError, ScorerUnavailable
from civicnews.fetchers import HttpFetcher
from civicnews.orchestrator import IngestionEngine
from civicnews.processors.scoring import ContentScorer, FallbackScorer, HeuristicScorer
from civicnews.sources import SourceRegistry
from civicnews.storage import InMemoryGateway, JsonFileGateway
from civicnews.utils.pipeline_config import PipelineConfig

from fakes import FakeClock, FakeGet, FakeResponse, make_source, no_sleep, rss_document

CBC_FEED = "https://cbc.example.ca/rss"
NP_FEED = "https://np.example.ca/rss"

CBC_ITEMS = [
    {
        "title": "Carbon tax rebate welcomed by families",
        "link": "https://cbc.example.ca/news/carbon-rebate",
        "description": "The federal carbon tax rebate is a relief for households, the minister said.",
    },
    {
        "title": "Hockey night recap",
        "link": "https://cbc.example.ca/sports/hockey",
        "description": "Oilers take the game in overtime.",
    },
    {
        "title": "Carbon tax rebate welcomed by families",
        "link": "https://cbc.example.ca/news/carbon-rebate/?utm_source=rss",
        "description": "The federal carbon tax rebate is a relief for households, the minister said.",
    },
]
NP_ITEMS = [
    {
        "title": "Carbon tax chaos slammed by critics",
        "link": "https://np.example.ca/news/carbon-chaos",
        "description": "The carbon tax is a disaster for the economy, opposition critics said.",
    },
]


class Tick:
    """Monotonic clock that only moves when slept on."""

    def __init__(self) -> None:
        self.value = 0.0

    def __call__(self) -> float:
        return self.value

    def sleep(self, seconds: float) -> None:
        self.value += seconds


class UnavailableScorer(ContentScorer):
    name = "remote"

    def score(self, request):
        raise ScorerUnavailable("model offline")


class FlakyGateway(InMemoryGateway):
    def __init__(self, fail_urls) -> None:
        super().__init__()
        self.fail_urls = set(fail_urls)

    def upsert_article(self, article) -> None:
        if article.canonical_url in self.fail_urls:
            raise PersistenceError("write rejected")
        super().upsert_article(article)


def default_routes() -> Dict[str, object]:
    return {
        CBC_FEED: FakeResponse(200, rss_document(CBC_ITEMS)),
        NP_FEED: FakeResponse(200, rss_document(NP_ITEMS)),
    }


@pytest.fixture
def config() -> PipelineConfig:
    return PipelineConfig(
        concurrency=2,
        retry_delays=(0.0, 0.0),
        inter_feed_delay=0.0,
        deadline_seconds=None,
        scorer_backend="heuristic",
    )


@pytest.fixture
def build_engine(config):
    def _build(sources=None, routes=None, *, gateway=None, **kwargs):
        sources = sources or [
            make_source("cbc", bias="left", credibility=80, feeds=[CBC_FEED]),
            make_source("nationalpost", bias="right", credibility=70, feeds=[NP_FEED]),
        ]
        get = FakeGet(default_routes() if routes is None else routes)
        engine = IngestionEngine(
            SourceRegistry(sources),
            gateway if gateway is not None else InMemoryGateway(),
            config=config,
            http=HttpFetcher(get=get, sleep=no_sleep),
            sleep=kwargs.pop("sleep", no_sleep),
            clock=kwargs.pop("clock", FakeClock()),
            **kwargs,
        )
        return engine, get

    return _build


class TestFullRun:
    def test_collects_scores_and_compares(self, build_engine):
        engine, get = build_engine()
        summary = engine.run()

        assert summary.sources_attempted == 2
        assert summary.feeds_fetched == 2
        assert summary.entries_parsed == 4
        assert summary.entries_filtered_out == 1
        assert summary.duplicates_skipped == 1
        assert summary.articles_collected == 2
        assert summary.articles_persisted == 2
        assert summary.topics_compared == 1
        assert summary.failures == []

        gateway = engine.gateway
        assert set(gateway.sources) == {"cbc", "nationalpost"}
        stored = {a.source_id: a for a in gateway.list_articles()}
        assert stored["cbc"].sentiment == "positive"
        assert stored["nationalpost"].sentiment == "negative"
        assert stored["cbc"].content_origin == "summary"
        assert all(a.is_enriched and a.analyzed_at is not None for a in stored.values())

        result = gateway.get_comparison("Carbon Tax")
        assert result.consensus_level == 0.0
        assert result.bias_distribution == {"left": 50, "center": 0, "right": 50}
        assert sorted(result.sources) == ["cbc", "nationalpost"]

    def test_rerun_is_idempotent(self, build_engine):
        engine, _ = build_engine()
        engine.run()
        engine.run()
        assert len(engine.gateway.articles) == 2
        assert len(engine.gateway.comparisons) == 1

    def test_summary_renders(self, build_engine):
        engine, _ = build_engine()
        summary = engine.run()
        assert "Articles collected: 2" in summary.to_markdown()
        assert summary.to_dict()["topics_compared"] == 1
        assert summary.duration_seconds == 0.0

    def test_buffered_store_flushed_once_at_end(self, build_engine, tmp_path):
        gateway = JsonFileGateway(tmp_path / "store", buffered=True)
        engine, _ = build_engine(gateway=gateway)
        summary = engine.run()
        assert summary.failures == []
        reopened = JsonFileGateway(tmp_path / "store")
        assert len(reopened.list_articles()) == 2
        assert {s.id for s in reopened.list_sources()} == {"cbc", "nationalpost"}
        assert reopened.get_comparison("Carbon Tax") is not None

    def test_flush_failure_recorded(self, build_engine):
        class BrokenFlush(InMemoryGateway):
            def flush(self):
                raise PersistenceError("disk full")

        engine, _ = build_engine(gateway=BrokenFlush())
        summary = engine.run()
        assert summary.articles_collected == 2
        assert [(f.source_id, f.kind) for f in summary.failures] == [("*", "persistence_error")]


class TestFailureIsolation:
    def test_failed_source_does_not_stop_run(self, build_engine):
        down = make_source("down", feeds=["https://down.example.ca/rss"])
        routes = default_routes()
        routes["https://down.example.ca/rss"] = FakeResponse(500)
        engine, get = build_engine(
            [make_source("cbc", bias="left", feeds=[CBC_FEED]), make_source("nationalpost", bias="right", feeds=[NP_FEED]), down],
            routes,
        )
        summary = engine.run()
        assert summary.articles_collected == 2
        assert summary.feeds_failed == 1
        (failure,) = summary.failures
        assert (failure.source_id, failure.kind, failure.status) == ("down", "http_error", 500)
        assert get.count("https://down.example.ca/rss") == 3

    def test_breaker_skips_source_on_next_run(self, build_engine):
        feeds = [f"https://flaky.example.ca/rss/{i}" for i in range(3)]
        engine, get = build_engine([make_source("flaky", feeds=feeds)], {})
        first = engine.run()
        assert first.feeds_failed == 3
        assert engine.breaker.is_open("flaky")

        second = engine.run()
        assert second.sources_skipped == 1
        assert second.sources_attempted == 0
        assert [f.kind for f in second.failures] == ["circuit_open"]
        assert len(get.calls) == 3

    def test_breaker_state_is_stored_and_restored(self, build_engine):
        feeds = [f"https://flaky.example.ca/rss/{i}" for i in range(3)]
        gateway = InMemoryGateway()
        engine, _ = build_engine([make_source("flaky", feeds=feeds)], {}, gateway=gateway)
        engine.run()

        stored = gateway.sources["flaky"]
        assert stored["consecutive_failures"] == 3
        assert stored["cooldown_until"] == "2026-10-19T13:00:00+00:00"

        fresh = SourceRegistry([make_source("flaky", feeds=feeds)])
        assert fresh.restore_state(gateway.list_sources()) == 1
        assert fresh.require("flaky").consecutive_failures == 3

        next_engine, get = build_engine(list(fresh), {}, gateway=gateway)
        summary = next_engine.run()
        assert summary.sources_skipped == 1
        assert get.calls == []

    def test_parse_error_recorded_without_tripping_breaker(self, build_engine):
        engine, _ = build_engine(
            [make_source("junk", feeds=["https://junk.example.ca/rss"])],
            {"https://junk.example.ca/rss": FakeResponse(200, b"<<< definitely not a feed")},
        )
        summary = engine.run()
        assert [f.kind for f in summary.failures] == ["parse_error"]
        assert engine.registry.require("junk").consecutive_failures == 0

    def test_persistence_error_does_not_abort(self, build_engine):
        gateway = FlakyGateway({"https://np.example.ca/news/carbon-chaos"})
        engine, _ = build_engine(gateway=gateway)
        summary = engine.run()
        assert summary.articles_collected == 2
        assert summary.articles_persisted == 1
        assert [f.kind for f in summary.failures] == ["persistence_error"]
        assert summary.topics_compared == 1

    def test_remote_scorer_unavailable_falls_back(self, build_engine):
        scorer = FallbackScorer(UnavailableScorer(), HeuristicScorer())
        engine, _ = build_engine(scorer=scorer)
        summary = engine.run()
        assert summary.articles_collected == 2
        assert summary.scorer_fallbacks == 2
        for art in engine.gateway.list_articles():
            assert art.scored_by == "heuristic"
            assert art.sentiment is not None
            assert art.credibility_score is not None


class TestDeadline:
    def test_expired_deadline_starts_nothing(self, build_engine):
        engine, get = build_engine(monotonic=Tick())
        summary = engine.run(deadline_seconds=0)
        assert summary.deadline_reached is True
        assert summary.sources_skipped == 2
        assert summary.articles_collected == 0
        assert get.calls == []
        assert set(engine.gateway.sources) == {"cbc", "nationalpost"}

    def test_deadline_between_feeds(self, build_engine, config):
        """The current feed finishes; the next feed of the source is not started."""
        config.inter_feed_delay = 5.0
        tick = Tick()
        second_feed = "https://cbc.example.ca/rss/politics"
        engine, get = build_engine(
            [make_source("cbc", bias="left", feeds=[CBC_FEED, second_feed])],
            sleep=tick.sleep,
            monotonic=tick,
        )
        summary = engine.run(deadline_seconds=3)
        assert summary.deadline_reached is True
        assert summary.feeds_fetched == 1
        assert summary.articles_collected == 1
        assert get.count(second_feed) == 0
