from __future__ import annotations

import json
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Set

from ..errors import PersistenceError
from ..models import Article, ComparisonResult, Source
from ..utils.logging import get_logger

logger = get_logger("civicnews.storage")


def _aware(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class PersistenceGateway(ABC):
    """Boundary to the application's store.

    Every write is an idempotent upsert: sources keyed by id, articles by
    canonical URL, comparisons by (topic, window). Implementations raise
    ``PersistenceError`` on storage failure and must be safe to call from
    several worker threads.
    """

    @abstractmethod
    def upsert_source(self, source: Source) -> None: ...

    @abstractmethod
    def upsert_article(self, article: Article) -> None: ...

    @abstractmethod
    def upsert_comparison(self, comparison: ComparisonResult) -> None: ...

    @abstractmethod
    def list_sources(self) -> List[Source]: ...

    @abstractmethod
    def list_articles(
        self,
        *,
        source_id: Optional[str] = None,
        topic: Optional[str] = None,
        bias: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Article]: ...

    @abstractmethod
    def get_comparison(self, topic: str, window: Optional[str] = None) -> Optional[ComparisonResult]: ...

    def flush(self) -> None:
        """Write out buffered changes. Stores that write through have nothing to do."""


class InMemoryGateway(PersistenceGateway):
    """Dict-backed gateway for dry runs and tests."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.sources: Dict[str, dict] = {}
        self.articles: Dict[str, dict] = {}
        self.comparisons: Dict[str, dict] = {}

    def _changed(self, kind: str) -> None:
        """Hook called after each write while the lock is held."""

    def upsert_source(self, source: Source) -> None:
        with self._lock:
            self.sources[source.id] = source.to_record()
            self._changed("sources")

    def upsert_article(self, article: Article) -> None:
        with self._lock:
            self.articles[article.canonical_url] = article.to_record()
            self._changed("articles")

    def upsert_comparison(self, comparison: ComparisonResult) -> None:
        with self._lock:
            self.comparisons[comparison.key] = comparison.to_record()
            self._changed("comparisons")

    def list_sources(self) -> List[Source]:
        with self._lock:
            rows = list(self.sources.values())
        out: List[Source] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                out.append(Source.from_record(row))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed source record %r: %s", row.get("id"), exc)
        return out

    def list_articles(
        self,
        *,
        source_id: Optional[str] = None,
        topic: Optional[str] = None,
        bias: Optional[str] = None,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
    ) -> List[Article]:
        with self._lock:
            rows = list(self.articles.values())
        topic_key = topic.lower() if topic else None
        since, until = _aware(since), _aware(until)
        out: List[Article] = []
        for row in rows:
            art = Article.from_record(row)
            if source_id and art.source_id != source_id:
                continue
            if bias and art.bias_label != bias:
                continue
            if topic_key and topic_key not in (t.lower() for t in art.topics):
                continue
            published = _aware(art.published_at)
            if since and (published is None or published < since):
                continue
            if until and (published is None or published > until):
                continue
            out.append(art)
        epoch = datetime.min.replace(tzinfo=timezone.utc)
        out.sort(key=lambda a: _aware(a.published_at) or epoch, reverse=True)
        return out

    def get_comparison(self, topic: str, window: Optional[str] = None) -> Optional[ComparisonResult]:
        with self._lock:
            rows = [r for r in self.comparisons.values() if r["topic"].lower() == topic.lower()]
        if window is not None:
            rows = [r for r in rows if r["window"] == window]
        if not rows:
            return None
        latest = max(rows, key=lambda r: r.get("analyzed_at") or "")
        return ComparisonResult.from_record(latest)


class JsonFileGateway(InMemoryGateway):
    """File-backed gateway: one JSON document per record kind under ``store_dir``.

    Files are rewritten whole via a temp file and ``os.replace`` so readers
    never observe a half-written document. By default every upsert writes
    through, which costs O(records) per write. With ``buffered=True`` upserts
    only mark their kind dirty and ``flush`` writes each dirty file once;
    records written since the last flush are lost if the process dies.
    """

    FILES = {"sources": "sources.json", "articles": "articles.json", "comparisons": "comparisons.json"}

    def __init__(self, store_dir: Path | str = ".cache/civicnews", *, buffered: bool = False) -> None:
        super().__init__()
        self.store_dir = Path(store_dir)
        self.buffered = buffered
        self._dirty: Set[str] = set()
        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Cannot create store directory {self.store_dir}: {exc}") from exc
        self._load()

    def _path(self, kind: str) -> Path:
        return self.store_dir / self.FILES[kind]

    def _load(self) -> None:
        for kind in self.FILES:
            path = self._path(kind)
            if not path.exists():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                logger.warning("Ignoring unreadable store file %s: %s", path, exc)
                continue
            if isinstance(data, dict):
                getattr(self, kind).update(data)

    def _write(self, kind: str) -> None:
        path = self._path(kind)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(getattr(self, kind), ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path}: {exc}") from exc

    def _changed(self, kind: str) -> None:
        if self.buffered:
            self._dirty.add(kind)
        else:
            self._write(kind)

    def flush(self) -> None:
        with self._lock:
            for kind in sorted(self._dirty):
                self._write(kind)
                # a failed write stays dirty for the next flush
                self._dirty.discard(kind)
