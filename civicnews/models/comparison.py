from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .article import Article


@dataclass(slots=True)
class TopicGroup:
    """Articles sharing one topic label within a single analysis run."""

    topic: str
    articles: List[Article] = field(default_factory=list)

    @property
    def source_ids(self) -> List[str]:
        seen: List[str] = []
        for art in self.articles:
            if art.source_id not in seen:
                seen.append(art.source_id)
        return seen


@dataclass(slots=True)
class CredibilityRange:
    min: float
    max: float
    average: float


@dataclass(slots=True)
class ComparisonResult:
    topic: str
    window: str
    article_count: int
    sources: List[str]
    bias_distribution: Dict[str, int]
    consensus_level: float
    credibility_range: CredibilityRange
    major_discrepancies: List[str] = field(default_factory=list)
    propaganda_patterns: List[str] = field(default_factory=list)
    analyzed_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return f"{self.topic.lower()}@{self.window}"

    def to_record(self) -> dict:
        return {
            "topic": self.topic,
            "window": self.window,
            "article_count": self.article_count,
            "sources": list(self.sources),
            "bias_distribution": dict(self.bias_distribution),
            "consensus_level": self.consensus_level,
            "credibility_range": {
                "min": self.credibility_range.min,
                "max": self.credibility_range.max,
                "average": self.credibility_range.average,
            },
            "major_discrepancies": list(self.major_discrepancies),
            "propaganda_patterns": list(self.propaganda_patterns),
            "analyzed_at": self.analyzed_at.isoformat() if self.analyzed_at else None,
        }

    @classmethod
    def from_record(cls, row: dict) -> "ComparisonResult":
        cr = row.get("credibility_range") or {}
        analyzed = row.get("analyzed_at")
        return cls(
            topic=row["topic"],
            window=row["window"],
            article_count=int(row.get("article_count") or 0),
            sources=list(row.get("sources") or []),
            bias_distribution=dict(row.get("bias_distribution") or {}),
            consensus_level=float(row.get("consensus_level") or 0.0),
            credibility_range=CredibilityRange(
                min=float(cr.get("min", 0.0)),
                max=float(cr.get("max", 0.0)),
                average=float(cr.get("average", 0.0)),
            ),
            major_discrepancies=list(row.get("major_discrepancies") or []),
            propaganda_patterns=list(row.get("propaganda_patterns") or []),
            analyzed_at=datetime.fromisoformat(analyzed) if analyzed else None,
        )
