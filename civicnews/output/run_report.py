from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..models import SourceFailure


@dataclass(slots=True)
class RunSummary:
    sources_attempted: int = 0
    sources_skipped: int = 0
    feeds_fetched: int = 0
    feeds_failed: int = 0
    entries_parsed: int = 0
    entries_filtered_out: int = 0
    entries_rejected: int = 0
    duplicates_skipped: int = 0
    articles_collected: int = 0
    articles_persisted: int = 0
    topics_compared: int = 0
    scorer_fallbacks: int = 0
    deadline_reached: bool = False
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    failures: List[SourceFailure] = field(default_factory=list)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict:
        return {
            "sources_attempted": self.sources_attempted,
            "sources_skipped": self.sources_skipped,
            "feeds_fetched": self.feeds_fetched,
            "feeds_failed": self.feeds_failed,
            "entries_parsed": self.entries_parsed,
            "entries_filtered_out": self.entries_filtered_out,
            "entries_rejected": self.entries_rejected,
            "duplicates_skipped": self.duplicates_skipped,
            "articles_collected": self.articles_collected,
            "articles_persisted": self.articles_persisted,
            "topics_compared": self.topics_compared,
            "scorer_fallbacks": self.scorer_fallbacks,
            "deadline_reached": self.deadline_reached,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "duration_seconds": self.duration_seconds,
            "failures": [f.to_dict() for f in self.failures],
        }

    def to_markdown(self) -> str:
        lines = [
            "### Ingestion Run Summary",
            "",
            f"- Sources attempted: {self.sources_attempted}",
            f"- Sources skipped (cooldown/deadline): {self.sources_skipped}",
            f"- Feeds fetched: {self.feeds_fetched} (failed: {self.feeds_failed})",
            f"- Entries parsed: {self.entries_parsed}",
            f"- Entries filtered out: {self.entries_filtered_out}",
            f"- Duplicates skipped: {self.duplicates_skipped}",
            f"- Articles collected: {self.articles_collected} (persisted: {self.articles_persisted})",
            f"- Topics compared: {self.topics_compared}",
            f"- Scorer fallbacks: {self.scorer_fallbacks}",
            f"- Deadline reached: {'yes' if self.deadline_reached else 'no'}",
        ]
        if self.failures:
            lines += ["", "#### Failures", ""]
            for f in self.failures:
                where = f" {f.feed_url}" if f.feed_url else ""
                status = f" [{f.status}]" if f.status else ""
                lines.append(f"- {f.source_id}{where}: {f.kind}{status} {f.detail}".rstrip())
        return "\n".join(lines) + "\n"


class RunRecorder:
    """Thread-safe accumulator that workers report into during a run."""

    def __init__(self, summary: Optional[RunSummary] = None) -> None:
        self.summary = summary or RunSummary()
        self._lock = threading.Lock()

    def add(self, **counts: int) -> None:
        with self._lock:
            for name, value in counts.items():
                setattr(self.summary, name, getattr(self.summary, name) + value)

    def fail(self, failure: SourceFailure) -> None:
        with self._lock:
            self.summary.failures.append(failure)

    def mark_deadline(self) -> None:
        with self._lock:
            self.summary.deadline_reached = True
