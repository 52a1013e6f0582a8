from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..sources import SourceRegistry
from ..utils.logging import get_logger

logger = get_logger("civicnews.fetchers.breaker")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CircuitBreaker:
    """Per-source failure gate.

    After ``threshold`` consecutive failed feeds a source is put into cooldown
    for ``cooldown`` and every feed of that source is skipped until it
    expires. A single success resets the counter and clears the cooldown.
    When a cooldown expires the next feed is attempted; if it fails the
    counter is still at or above the threshold, so the source re-opens
    immediately.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        *,
        threshold: int = 3,
        cooldown: timedelta = timedelta(hours=1),
        clock: Clock = utc_now,
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be >= 1")
        self.registry = registry
        self.threshold = threshold
        self.cooldown = cooldown
        self.clock = clock

    def is_open(self, source_id: str) -> bool:
        """True while the source is cooling down and must not be contacted."""
        with self.registry.locked(source_id) as src:
            return src.cooldown_until is not None and self.clock() < src.cooldown_until

    def cooldown_remaining(self, source_id: str) -> Optional[timedelta]:
        with self.registry.locked(source_id) as src:
            if src.cooldown_until is None:
                return None
            remaining = src.cooldown_until - self.clock()
            return remaining if remaining > timedelta(0) else None

    def record_success(self, source_id: str) -> None:
        with self.registry.locked(source_id) as src:
            if src.consecutive_failures or src.cooldown_until:
                logger.info("Source %s recovered after %d failure(s)", source_id, src.consecutive_failures)
            src.consecutive_failures = 0
            src.cooldown_until = None
            src.last_success_at = self.clock()

    def record_failure(self, source_id: str) -> bool:
        """Count one failed feed. Returns True if this failure opened the breaker."""
        with self.registry.locked(source_id) as src:
            src.consecutive_failures += 1
            if src.consecutive_failures >= self.threshold:
                src.cooldown_until = self.clock() + self.cooldown
                logger.warning(
                    "Circuit open for %s after %d consecutive failures; cooling down until %s",
                    source_id,
                    src.consecutive_failures,
                    src.cooldown_until.isoformat(),
                )
                return True
            return False
