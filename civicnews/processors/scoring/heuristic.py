from __future__ import annotations

import re
from functools import lru_cache
from typing import List, Optional

from ...utils.pipeline_config import ScoringWeights
from ..lexicon import Lexicon, default_lexicon
from .base import ContentScorer, ScoreRequest, ScoreResult

_word_re = re.compile(r"[a-z][a-z'\-]*")

_MONTHS = "jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec"
_iso_date_re = re.compile(r"\b\d{4}-\d{2}-\d{2}\b")
_written_date_re = re.compile(rf"\b(?:{_MONTHS})[a-z]*\.?\s+\d{{1,2}}(?:,\s*\d{{4}})?\b", re.IGNORECASE)
_dollar_re = re.compile(r"\$\s?\d[\d,]*(?:\.\d+)?")
_quote_re = re.compile(r'"[^"]{8,}"')
_attribution_re = re.compile(
    r"\b(?:said|says|told|stated|according to|in a statement|sources say)\b", re.IGNORECASE
)
_hedging_re = re.compile(
    r"\b(?:allegedly|reportedly|rumou?red|unconfirmed|may have|might have|it is believed|sources suggest)\b",
    re.IGNORECASE,
)
_absolute_re = re.compile(
    r"\b(?:always|never|everyone|nobody|no one|undeniabl[ey]|without a doubt|totally|completely)\b",
    re.IGNORECASE,
)

EMOTIONAL_APPEAL_EXCLAMATIONS = 3


def _clamp(value: float, low: int = 0, high: int = 100) -> int:
    return int(max(low, min(high, round(value))))


def has_dated_evidence(text: str) -> bool:
    return bool(_iso_date_re.search(text) or _written_date_re.search(text))


def has_sourced_quote(text: str) -> bool:
    return bool(_quote_re.search(text) and _attribution_re.search(text))


def has_hedging(text: str) -> bool:
    return bool(_hedging_re.search(text))


def has_absolute_language(text: str) -> bool:
    return bool(_absolute_re.search(text))


def sentiment_label(text: str, lexicon: Lexicon) -> str:
    """Positive/negative keyword count difference mapped to a label."""
    words = _word_re.findall(text.lower())
    positives = set(lexicon.positive_words)
    negatives = set(lexicon.negative_words)
    score = sum(1 for w in words if w in positives) - sum(1 for w in words if w in negatives)
    if score > 0:
        return "positive"
    if score < 0:
        return "negative"
    return "neutral"


def credibility_score(prior: int, text: str, weights: ScoringWeights) -> int:
    score = prior
    if has_dated_evidence(text):
        score += weights.dated_evidence
    if has_sourced_quote(text):
        score += weights.sourced_quote
    if has_hedging(text):
        score += weights.hedging
    if has_absolute_language(text):
        score += weights.absolute_language
    return _clamp(score)


def factuality_score(prior: int, text: str, weights: ScoringWeights) -> int:
    score = prior
    lowered = text.lower()
    if "according to" in lowered or "sources say" in lowered:
        score += weights.attribution
    if "allegedly" in lowered or "reportedly" in lowered:
        score += weights.hedged_claim
    if _iso_date_re.search(text):
        score += weights.iso_date
    if _dollar_re.search(text):
        score += weights.dollar_figure
    return _clamp(score)


@lru_cache(maxsize=1024)
def _keyword_re(keyword: str) -> "re.Pattern[str]":
    # whole words only, plus a plain plural: "rent" matches "rents" but not "current"
    return re.compile(rf"\b{re.escape(keyword)}(?:s|es)?\b")


def topic_labels(text: str, lexicon: Lexicon) -> List[str]:
    lowered = text.lower()
    return [
        label
        for label, keywords in lexicon.topics.items()
        if any(_keyword_re(k).search(lowered) for k in keywords)
    ]


def watched_entities(text: str, lexicon: Lexicon) -> List[str]:
    lowered = text.lower()
    return [name for name in lexicon.entities if name.lower() in lowered]


def rhetorical_techniques(text: str, lexicon: Lexicon) -> List[str]:
    lowered = text.lower()
    found: List[str] = []
    for technique, markers in lexicon.techniques.items():
        if any(re.search(rf"\b{re.escape(m)}\b", lowered) for m in markers):
            found.append(technique)
    if text.count("!") > EMOTIONAL_APPEAL_EXCLAMATIONS:
        found.append("Emotional Appeal")
    return found


class HeuristicScorer(ContentScorer):
    """Deterministic local scorer. Never raises for well-formed input.

    Bias is inherited from the source's declared bias; credibility and
    factuality start at the source's prior credibility and are nudged by
    textual evidence signals (see ``ScoringWeights``).
    """

    name = "heuristic"

    def __init__(self, lexicon: Optional[Lexicon] = None, weights: Optional[ScoringWeights] = None) -> None:
        self.lexicon = lexicon or default_lexicon()
        self.weights = weights or ScoringWeights()

    def score(self, request: ScoreRequest) -> ScoreResult:
        text = f"{request.title}. {request.content}"
        source = request.source
        prior = source.prior_credibility if source else 50
        bias = source.declared_bias if source else "center"
        return ScoreResult(
            sentiment=sentiment_label(text, self.lexicon),
            bias=bias,
            credibility_score=credibility_score(prior, text, self.weights),
            factuality_score=factuality_score(prior, text, self.weights),
            topics=topic_labels(text, self.lexicon),
            mentioned_entities=watched_entities(text, self.lexicon),
            techniques=rhetorical_techniques(text, self.lexicon),
            scorer=self.name,
        )
