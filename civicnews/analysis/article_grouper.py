from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List

from ..models import Article, TopicGroup


def _norm(s: str) -> str:
    return " ".join((s or "").lower().split())


def group_by_topic(articles: Iterable[Article], *, min_sources: int = 2) -> List[TopicGroup]:
    """Group articles by topic label for cross-source comparison.

    An article with k topics joins k groups. Topic labels are matched
    case-insensitively; the first spelling seen is kept as the group label.
    Groups covered by fewer than ``min_sources`` distinct sources are
    dropped since single-source coverage has nothing to compare. An article
    appears at most once per group.
    """
    buckets: Dict[str, TopicGroup] = {}
    members: Dict[str, set] = defaultdict(set)
    for art in articles:
        for topic in art.topics:
            key = _norm(topic)
            if not key:
                continue
            group = buckets.get(key)
            if group is None:
                group = buckets[key] = TopicGroup(topic=topic.strip())
            if art.canonical_url in members[key]:
                continue
            members[key].add(art.canonical_url)
            group.articles.append(art)

    groups = [g for g in buckets.values() if len(g.source_ids) >= min_sources]
    # Largest coverage first, then alphabetical for determinism
    groups.sort(key=lambda g: (-len(g.articles), _norm(g.topic)))
    return groups
