from __future__ import annotations

import threading

from ...errors import ScorerUnavailable
from ...utils.logging import get_logger
from .base import ContentScorer, ScoreRequest, ScoreResult

logger = get_logger("civicnews.scoring.fallback")


class FallbackScorer(ContentScorer):
    """Try ``primary``; on any failure use ``fallback``.

    Fields the primary discarded during validation are filled from the
    fallback so every result is complete.
    """

    def __init__(self, primary: ContentScorer, fallback: ContentScorer) -> None:
        self.primary = primary
        self.fallback = fallback
        self.name = f"{primary.name}|{fallback.name}"
        self._lock = threading.Lock()
        self.fallback_count = 0

    def _count_fallback(self) -> None:
        with self._lock:
            self.fallback_count += 1

    def score(self, request: ScoreRequest) -> ScoreResult:
        try:
            result = self.primary.score(request)
        except ScorerUnavailable as exc:
            logger.warning("%s scorer unavailable for '%s': %s; using %s", self.primary.name, request.title[:60], exc, self.fallback.name)
            self._count_fallback()
            return self.fallback.score(request)
        except Exception as exc:  # noqa: BLE001 - a scorer bug must not abort the run
            logger.exception("%s scorer raised unexpectedly for '%s': %s", self.primary.name, request.title[:60], exc)
            self._count_fallback()
            return self.fallback.score(request)

        if result.missing_fields():
            return result.filled_from(self.fallback.score(request))
        return result
