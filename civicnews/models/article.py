from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal, Optional

Sentiment = Literal["positive", "negative", "neutral"]
SENTIMENT_VALUES = ("positive", "negative", "neutral")

# Where ``cleaned_text`` came from: the article page or the feed summary.
ContentOrigin = Literal["page", "summary"]


@dataclass(slots=True)
class RawEntry:
    """One feed item as parsed. Never persisted."""

    title: str
    link: str
    summary_html: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None


@dataclass(slots=True)
class Article:
    canonical_url: str
    article_id: str
    title: str
    url: str
    source_id: str
    cleaned_text: str
    published_at: Optional[datetime] = None
    author: Optional[str] = None
    content_origin: ContentOrigin = "summary"

    # Enrichment fields
    analyzed_at: Optional[datetime] = None
    sentiment: Optional[Sentiment] = None
    bias_label: Optional[str] = None
    credibility_score: Optional[int] = None
    factuality_score: Optional[int] = None
    topics: List[str] = field(default_factory=list)
    mentioned_entities: List[str] = field(default_factory=list)
    rhetorical_techniques: List[str] = field(default_factory=list)
    mentioned_bills: List[str] = field(default_factory=list)
    public_impact: Optional[int] = None
    scored_by: Optional[str] = None

    @property
    def is_enriched(self) -> bool:
        return (
            self.sentiment is not None
            and self.bias_label is not None
            and self.credibility_score is not None
        )

    def to_record(self) -> dict:
        return {
            "canonical_url": self.canonical_url,
            "article_id": self.article_id,
            "title": self.title,
            "url": self.url,
            "source_id": self.source_id,
            "cleaned_text": self.cleaned_text,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "author": self.author,
            "content_origin": self.content_origin,
            "analyzed_at": self.analyzed_at.isoformat() if self.analyzed_at else None,
            "sentiment": self.sentiment,
            "bias_label": self.bias_label,
            "credibility_score": self.credibility_score,
            "factuality_score": self.factuality_score,
            "topics": list(self.topics),
            "mentioned_entities": list(self.mentioned_entities),
            "rhetorical_techniques": list(self.rhetorical_techniques),
            "mentioned_bills": list(self.mentioned_bills),
            "public_impact": self.public_impact,
            "scored_by": self.scored_by,
        }

    @classmethod
    def from_record(cls, row: dict) -> "Article":
        def _dt(value: Optional[str]) -> Optional[datetime]:
            return datetime.fromisoformat(value) if value else None

        return cls(
            canonical_url=row["canonical_url"],
            article_id=row["article_id"],
            title=row.get("title") or "",
            url=row.get("url") or row["canonical_url"],
            source_id=row["source_id"],
            cleaned_text=row.get("cleaned_text") or "",
            published_at=_dt(row.get("published_at")),
            author=row.get("author"),
            content_origin=row.get("content_origin") or "summary",
            analyzed_at=_dt(row.get("analyzed_at")),
            sentiment=row.get("sentiment"),
            bias_label=row.get("bias_label"),
            credibility_score=row.get("credibility_score"),
            factuality_score=row.get("factuality_score"),
            topics=list(row.get("topics") or []),
            mentioned_entities=list(row.get("mentioned_entities") or []),
            rhetorical_techniques=list(row.get("rhetorical_techniques") or []),
            mentioned_bills=list(row.get("mentioned_bills") or []),
            public_impact=row.get("public_impact"),
            scored_by=row.get("scored_by"),
        )
