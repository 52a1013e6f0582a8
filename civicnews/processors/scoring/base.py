from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from typing import List, Optional

from ...models import Sentiment, Source

# Fields every scorer fills; ``None`` means "not provided / failed validation"
SCORE_FIELDS = (
    "sentiment",
    "bias",
    "credibility_score",
    "factuality_score",
    "topics",
    "mentioned_entities",
    "techniques",
)


@dataclass(slots=True)
class ScoreRequest:
    title: str
    content: str
    source_name: str
    source: Optional[Source] = None


@dataclass(slots=True)
class ScoreResult:
    sentiment: Optional[Sentiment] = None
    bias: Optional[str] = None
    credibility_score: Optional[int] = None
    factuality_score: Optional[int] = None
    topics: Optional[List[str]] = None
    mentioned_entities: Optional[List[str]] = None
    techniques: Optional[List[str]] = None
    scorer: str = "unknown"

    def missing_fields(self) -> List[str]:
        return [name for name in SCORE_FIELDS if getattr(self, name) is None]

    def filled_from(self, other: "ScoreResult") -> "ScoreResult":
        """Copy of this result with missing fields taken from ``other``."""
        missing = self.missing_fields()
        if not missing:
            return self
        updates = {name: getattr(other, name) for name in missing}
        return replace(self, scorer=f"{self.scorer}+{other.scorer}", **updates)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ContentScorer(ABC):
    """Produces sentiment, bias, credibility, topics, entities and techniques.

    Implementations are interchangeable; callers never need to know which one
    produced a result beyond ``ScoreResult.scorer``.
    """

    name: str = "scorer"

    @abstractmethod
    def score(self, request: ScoreRequest) -> ScoreResult:
        """Score one article. Remote implementations raise ``ScorerUnavailable``."""
