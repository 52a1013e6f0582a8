from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from ..analysis.comparator import compare_topics
from ..errors import PersistenceError
from ..models import Article, ComparisonResult, SourceFailure
from ..storage import PersistenceGateway
from ..utils.logging import get_logger

if TYPE_CHECKING:
    from ..output.run_report import RunRecorder


logger = get_logger("civicnews.pipeline.comparisons")


def run_comparison_pipeline(
    articles: Iterable[Article],
    gateway: PersistenceGateway,
    *,
    window_hours: int = 24,
    clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    recorder: Optional["RunRecorder"] = None,
) -> List[ComparisonResult]:
    """Compare multi-source topics in ``articles`` and store the results.

    Returns every comparison computed. A comparison that fails to persist is
    logged (and reported to ``recorder``) but still returned.
    """
    comparisons = compare_topics(articles, window_hours=window_hours, clock=clock)
    if not comparisons:
        logger.info("No topic covered by two or more sources; nothing to compare")
        return []

    for cmp in comparisons:
        try:
            gateway.upsert_comparison(cmp)
        except PersistenceError as exc:
            logger.warning("Could not persist comparison %s: %s", cmp.key, exc)
            if recorder is not None:
                recorder.fail(SourceFailure(source_id="*", kind="persistence_error", detail=f"comparison {cmp.key}: {exc}"))
            continue
        logger.info(
            "Compared '%s' across %d source(s): consensus=%.2f bias=%s",
            cmp.topic,
            len(cmp.sources),
            cmp.consensus_level,
            cmp.bias_distribution,
        )
    return comparisons
