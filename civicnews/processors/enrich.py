from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..models import Article, Source
from ..utils.logging import get_logger
from ..utils.pipeline_config import ScoringWeights
from .scoring import ContentScorer, ScoreRequest

logger = get_logger("civicnews.processors.enrich")

# Federal bills: C-xx (Commons) and S-xx (Senate), with or without "Bill"
_bill_re = re.compile(r"\b(?:Bill\s+)?([CS])-(\d{1,3})\b")


def extract_bills(text: str) -> List[str]:
    found: List[str] = []
    for chamber, number in _bill_re.findall(text or ""):
        label = f"{chamber}-{int(number)}"
        if label not in found:
            found.append(label)
    return found


def public_impact(article: Article, weights: ScoringWeights) -> int:
    impact = weights.impact_base
    if article.mentioned_entities:
        impact += weights.impact_politicians
    impact += weights.impact_per_technique * len(article.rhetorical_techniques)
    if article.sentiment == "negative":
        impact += weights.impact_negative_tone
    if article.credibility_score is not None and article.credibility_score < weights.low_credibility_threshold:
        impact += weights.impact_low_credibility
    return max(0, min(100, impact))


class Analyzer:
    """Fill an article's analysis fields using the configured scorer."""

    def __init__(
        self,
        scorer: ContentScorer,
        *,
        weights: Optional[ScoringWeights] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.scorer = scorer
        self.weights = weights or ScoringWeights()
        self.clock = clock

    def enrich(self, article: Article, source: Source) -> Article:
        request = ScoreRequest(
            title=article.title,
            content=article.cleaned_text,
            source_name=source.display_name,
            source=source,
        )
        result = self.scorer.score(request)

        article.sentiment = result.sentiment or "neutral"
        article.bias_label = result.bias or source.declared_bias
        article.credibility_score = (
            result.credibility_score if result.credibility_score is not None else source.prior_credibility
        )
        article.factuality_score = (
            result.factuality_score if result.factuality_score is not None else article.credibility_score
        )
        article.topics = list(result.topics or [])
        article.mentioned_entities = list(result.mentioned_entities or [])
        article.rhetorical_techniques = list(result.techniques or [])
        article.mentioned_bills = extract_bills(f"{article.title} {article.cleaned_text}")
        article.public_impact = public_impact(article, self.weights)
        article.scored_by = result.scorer
        article.analyzed_at = self.clock()

        logger.debug(
            "Scored '%s' via %s: sentiment=%s bias=%s credibility=%s topics=%s",
            article.title[:60],
            result.scorer,
            article.sentiment,
            article.bias_label,
            article.credibility_score,
            article.topics,
        )
        return article
