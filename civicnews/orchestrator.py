from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from .errors import PersistenceError
from .fetchers import CircuitBreaker, FeedFetcher, HttpFetcher, parse_feed
from .fetchers.circuit_breaker import utc_now
from .models import Article, Source, SourceFailure
from .output.run_report import RunRecorder, RunSummary
from .pipeline.comparison_pipeline import run_comparison_pipeline
from .processors import (
    Analyzer,
    ArticleExtractor,
    ContentFilter,
    Deduplicator,
    Lexicon,
    canonical_url,
    clean_html_to_text,
    default_lexicon,
)
from .processors.scoring import ContentScorer, create_scorer
from .sources import SourceRegistry
from .storage import PersistenceGateway
from .utils.logging import get_logger
from .utils.pipeline_config import PipelineConfig

logger = get_logger("civicnews.orchestrator")


class _Deadline:
    def __init__(self, seconds: Optional[float], monotonic: Callable[[], float]) -> None:
        self._monotonic = monotonic
        self._at = monotonic() + seconds if seconds is not None else None

    def passed(self) -> bool:
        return self._at is not None and self._monotonic() >= self._at


class IngestionEngine:
    """Run the full pipeline over every source in the registry.

    Sources are processed by a bounded thread pool; the feeds of one source
    are fetched one after another with ``inter_feed_delay`` between them.
    ``run`` never raises: every failure ends up in ``RunSummary.failures``.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        gateway: PersistenceGateway,
        *,
        config: Optional[PipelineConfig] = None,
        scorer: Optional[ContentScorer] = None,
        lexicon: Optional[Lexicon] = None,
        http: Optional[HttpFetcher] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or PipelineConfig()
        cfg = self.config
        self.registry = registry
        self.gateway = gateway
        self.lexicon = lexicon or default_lexicon()
        self.http = http or HttpFetcher(
            timeout=cfg.fetch_timeout,
            user_agent=cfg.user_agent,
            retry_delays=cfg.retry_delays,
            sleep=sleep,
        )
        self.breaker = CircuitBreaker(
            registry,
            threshold=cfg.breaker_threshold,
            cooldown=timedelta(seconds=cfg.breaker_cooldown_seconds),
            clock=clock,
        )
        self.feeds = FeedFetcher(self.http, self.breaker)
        self.content_filter = ContentFilter(self.lexicon)
        self.extractor = ArticleExtractor(
            self.http,
            min_content_chars=cfg.min_content_chars,
            max_text_chars=cfg.max_text_chars,
            fetch_full_content=cfg.fetch_full_content,
        )
        self.scorer = scorer or create_scorer(backend=cfg.scorer_backend, lexicon=self.lexicon, weights=cfg.weights)
        self.analyzer = Analyzer(self.scorer, weights=cfg.weights, clock=clock)
        self._sleep = sleep
        self._clock = clock
        self._monotonic = monotonic

    # ---------------- Per-feed / per-source work -----------------
    def _process_feed(
        self,
        source: Source,
        url: str,
        dedup: Deduplicator,
        recorder: RunRecorder,
    ) -> List[Article]:
        result = self.feeds.fetch(source, url)
        if not result.ok:
            recorder.add(feeds_failed=1)
            recorder.fail(
                SourceFailure(source_id=source.id, kind=result.kind, detail=result.detail, feed_url=url, status=result.status)
            )
            return []
        recorder.add(feeds_fetched=1)

        parsed = parse_feed(result.content, max_entries=self.config.feed_max_entries)
        if not parsed.ok:
            logger.warning("Could not parse feed %s for %s: %s", url, source.id, parsed.error)
            recorder.fail(SourceFailure(source_id=source.id, kind="parse_error", detail=parsed.error or "", feed_url=url))
            return []
        recorder.add(entries_parsed=len(parsed.entries))

        articles: List[Article] = []
        for entry in parsed.entries:
            if not self.content_filter.is_civic(entry.title, clean_html_to_text(entry.summary_html)):
                recorder.add(entries_filtered_out=1)
                logger.debug("Filtered non-civic entry from %s: %s", source.id, entry.title)
                continue

            if entry.link:
                try:
                    key = canonical_url(entry.link)
                except ValueError:
                    key = ""
                if key and not dedup.claim(key):
                    recorder.add(duplicates_skipped=1)
                    logger.debug("Skipping duplicate %s", key)
                    continue

            article = self.extractor.extract(entry, source)
            if article is None:
                recorder.add(entries_rejected=1)
                continue

            try:
                self.analyzer.enrich(article, source)
            except Exception as exc:  # noqa: BLE001 - one bad article must not stop the feed
                logger.exception("Analysis failed for %s: %s", article.canonical_url, exc)
                recorder.fail(
                    SourceFailure(source_id=source.id, kind="analysis_error", detail=f"{article.canonical_url}: {exc}", feed_url=url)
                )
                continue
            recorder.add(articles_collected=1)

            try:
                self.gateway.upsert_article(article)
                recorder.add(articles_persisted=1)
            except PersistenceError as exc:
                logger.warning("Could not persist %s: %s", article.canonical_url, exc)
                recorder.fail(
                    SourceFailure(source_id=source.id, kind="persistence_error", detail=f"{article.canonical_url}: {exc}", feed_url=url)
                )
            articles.append(article)

        logger.info("Feed %s (%s): %d article(s) kept of %d parsed", url, source.id, len(articles), len(parsed.entries))
        return articles

    def _process_source(
        self,
        source: Source,
        dedup: Deduplicator,
        recorder: RunRecorder,
        deadline: _Deadline,
    ) -> List[Article]:
        if deadline.passed():
            logger.info("Deadline reached; not starting %s", source.id)
            recorder.add(sources_skipped=1)
            recorder.mark_deadline()
            return []
        if self.breaker.is_open(source.id):
            logger.info("Skipping %s: circuit open", source.id)
            recorder.add(sources_skipped=1)
            recorder.fail(SourceFailure(source_id=source.id, kind="circuit_open", detail="source in cooldown"))
            return []

        recorder.add(sources_attempted=1)
        articles: List[Article] = []
        for idx, url in enumerate(source.feed_urls):
            if idx > 0:
                if deadline.passed():
                    recorder.mark_deadline()
                    break
                if self.config.inter_feed_delay > 0:
                    self._sleep(self.config.inter_feed_delay)
                if deadline.passed():
                    recorder.mark_deadline()
                    break
            if self.breaker.is_open(source.id):
                logger.info("Circuit opened for %s; skipping its remaining feeds", source.id)
                recorder.fail(
                    SourceFailure(source_id=source.id, kind="circuit_open", detail="remaining feeds skipped", feed_url=url)
                )
                break
            articles.extend(self._process_feed(source, url, dedup, recorder))
        logger.info("Collected %d article(s) from %s", len(articles), source.display_name)
        return articles

    def _persist_source(self, source: Source, recorder: RunRecorder) -> None:
        try:
            with self.registry.locked(source.id):
                self.gateway.upsert_source(source)
        except PersistenceError as exc:
            logger.warning("Could not persist source %s: %s", source.id, exc)
            recorder.fail(SourceFailure(source_id=source.id, kind="persistence_error", detail=str(exc)))

    def _upsert_sources(self, recorder: RunRecorder) -> None:
        for source in self.registry:
            self._persist_source(source, recorder)

    # ---------------- Public API -----------------
    def collect(self, recorder: RunRecorder, *, deadline_seconds: Optional[float] = None) -> List[Article]:
        """Fetch, filter, extract, score and store articles from all sources."""
        sources = list(self.registry)
        if not sources:
            return []
        deadline = _Deadline(deadline_seconds, self._monotonic)
        dedup = Deduplicator()
        results: List[Article] = []
        max_workers = max(1, min(self.config.concurrency, len(sources)))
        logger.debug("Starting concurrent ingestion for %d sources (workers=%d)", len(sources), max_workers)
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="ingest") as executor:
            future_map = {executor.submit(self._process_source, s, dedup, recorder, deadline): s for s in sources}
            for fut in as_completed(future_map):
                s = future_map[fut]
                try:
                    results.extend(fut.result() or [])
                except Exception as exc:  # noqa: BLE001 - worker isolation boundary
                    logger.exception("Worker failed for %s: %s", s.id, exc)
                    recorder.fail(SourceFailure(source_id=s.id, kind="worker_error", detail=str(exc)))
                # store the breaker state this worker left behind
                self._persist_source(s, recorder)
        return results

    def run(self, *, deadline_seconds: Optional[float] = None) -> RunSummary:
        """Run one ingestion pass. Always returns a summary."""
        if deadline_seconds is None:
            deadline_seconds = self.config.deadline_seconds
        recorder = RunRecorder(RunSummary(started_at=self._clock()))
        fallbacks_before = getattr(self.scorer, "fallback_count", 0)
        try:
            self._upsert_sources(recorder)
            articles = self.collect(recorder, deadline_seconds=deadline_seconds)
            comparisons = run_comparison_pipeline(
                articles,
                self.gateway,
                window_hours=self.config.comparison_window_hours,
                clock=self._clock,
                recorder=recorder,
            )
            recorder.add(topics_compared=len(comparisons))
        except Exception as exc:  # noqa: BLE001 - a run always completes with a summary
            logger.exception("Ingestion run aborted early: %s", exc)
            recorder.fail(SourceFailure(source_id="*", kind="run_error", detail=str(exc)))
        try:
            self.gateway.flush()
        except PersistenceError as exc:
            logger.error("Could not flush the store: %s", exc)
            recorder.fail(SourceFailure(source_id="*", kind="persistence_error", detail=str(exc)))

        summary = recorder.summary
        summary.scorer_fallbacks = getattr(self.scorer, "fallback_count", 0) - fallbacks_before
        summary.finished_at = self._clock()
        logger.info(
            "Ingestion finished: sources=%d skipped=%d articles=%d persisted=%d duplicates=%d topics=%d failures=%d",
            summary.sources_attempted,
            summary.sources_skipped,
            summary.articles_collected,
            summary.articles_persisted,
            summary.duplicates_skipped,
            summary.topics_compared,
            len(summary.failures),
        )
        return summary
