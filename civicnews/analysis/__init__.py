"""Topic grouping and cross-source comparison."""

from .article_grouper import group_by_topic
from .comparator import (
    bias_distribution,
    compare_group,
    compare_topics,
    consensus_level,
    credibility_range,
    major_discrepancies,
    propaganda_patterns,
    window_key,
)

__all__ = [
    "group_by_topic",
    "bias_distribution",
    "compare_group",
    "compare_topics",
    "consensus_level",
    "credibility_range",
    "major_discrepancies",
    "propaganda_patterns",
    "window_key",
]
