"""Cross-source comparison of articles that share a topic.

Everything here is deterministic and side-effect free. Disagreements are
reported, never adjudicated: the comparator does not decide which source is
right.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..models import BIAS_VALUES, Article, ComparisonResult, CredibilityRange, TopicGroup
from .article_grouper import group_by_topic

SENTIMENT_VALUE: Dict[str, float] = {"positive": 1.0, "neutral": 0.0, "negative": -1.0}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def window_key(moment: datetime, hours: int = 24) -> str:
    """Label of the fixed-size time window containing ``moment``.

    Windows are aligned to the Unix epoch, so every 24 h window starts at
    00:00 UTC. Re-runs within one window share a key.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    size = timedelta(hours=max(1, hours))
    start = _EPOCH + ((moment - _EPOCH) // size) * size
    return f"{start.strftime('%Y-%m-%dT%H:%MZ')}/{max(1, hours)}h"


def bias_distribution(articles: Sequence[Article]) -> Dict[str, int]:
    """Integer percentages of left/center/right articles, summing to exactly 100.

    Percentages are floored and the rounding remainder goes to the largest
    bucket (first in left, center, right order on ties). Unknown labels
    count as center. An empty input yields all zeros.
    """
    counts = {label: 0 for label in BIAS_VALUES}
    for art in articles:
        label = art.bias_label if art.bias_label in counts else "center"
        counts[label] += 1
    total = sum(counts.values())
    if total == 0:
        return counts

    shares = {label: counts[label] * 100 // total for label in BIAS_VALUES}
    remainder = 100 - sum(shares.values())
    largest = max(BIAS_VALUES, key=lambda label: counts[label])
    shares[largest] += remainder
    return shares


def consensus_level(articles: Sequence[Article]) -> float:
    """``max(0, 100 - 100 * variance)`` of sentiment mapped to +1/0/-1.

    Population variance. Fewer than two articles, or identical sentiment,
    yields 100.
    """
    values = [SENTIMENT_VALUE.get(a.sentiment or "neutral", 0.0) for a in articles]
    if len(values) < 2:
        return 100.0
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return round(max(0.0, min(100.0, 100.0 - 100.0 * variance)), 2)


def credibility_range(articles: Sequence[Article]) -> CredibilityRange:
    scores = [a.credibility_score for a in articles if a.credibility_score is not None]
    if not scores:
        return CredibilityRange(min=0.0, max=0.0, average=0.0)
    return CredibilityRange(
        min=float(min(scores)),
        max=float(max(scores)),
        average=round(sum(scores) / len(scores), 2),
    )


def major_discrepancies(articles: Sequence[Article]) -> List[str]:
    """Entities framed with opposite sentiment by different sources.

    Each source's stance on an entity is the sign of the summed sentiment of
    its articles mentioning that entity; neutral stances are ignored.
    """
    stance: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    display: Dict[str, str] = {}
    for art in articles:
        value = SENTIMENT_VALUE.get(art.sentiment or "neutral", 0.0)
        for entity in art.mentioned_entities:
            key = entity.strip().lower()
            if not key:
                continue
            display.setdefault(key, entity.strip())
            stance[key][art.source_id] += value

    flagged: List[str] = []
    for key in sorted(stance):
        positive = sorted(src for src, v in stance[key].items() if v > 0)
        negative = sorted(src for src, v in stance[key].items() if v < 0)
        if positive and negative:
            flagged.append(
                f"{display[key]}: portrayed positively by {', '.join(positive)} "
                f"but negatively by {', '.join(negative)}"
            )
    return flagged


def propaganda_patterns(articles: Sequence[Article], *, min_articles: int = 2) -> List[str]:
    """Rhetorical techniques recurring in at least ``min_articles`` articles."""
    counts: Counter[str] = Counter()
    for art in articles:
        counts.update(set(art.rhetorical_techniques))
    total = len(articles)
    recurring = [(t, n) for t, n in counts.items() if n >= min_articles]
    recurring.sort(key=lambda tn: (-tn[1], tn[0]))
    return [f"{t}: {n} of {total} articles" for t, n in recurring]


def compare_group(
    group: TopicGroup,
    *,
    window: str,
    analyzed_at: Optional[datetime] = None,
) -> ComparisonResult:
    articles = group.articles
    return ComparisonResult(
        topic=group.topic,
        window=window,
        article_count=len(articles),
        sources=group.source_ids,
        bias_distribution=bias_distribution(articles),
        consensus_level=consensus_level(articles),
        credibility_range=credibility_range(articles),
        major_discrepancies=major_discrepancies(articles),
        propaganda_patterns=propaganda_patterns(articles),
        analyzed_at=analyzed_at or datetime.now(timezone.utc),
    )


def compare_topics(
    articles: Iterable[Article],
    *,
    window_hours: int = 24,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    min_sources: int = 2,
) -> List[ComparisonResult]:
    """One ``ComparisonResult`` per topic reported by at least two sources."""
    now = clock()
    window = window_key(now, window_hours)
    return [
        compare_group(group, window=window, analyzed_at=now)
        for group in group_by_topic(articles, min_sources=min_sources)
    ]
