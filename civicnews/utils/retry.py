from __future__ import annotations

import time
from typing import Callable, Sequence, Tuple, Type, TypeVar

from .logging import get_logger

T = TypeVar("T")
logger = get_logger("civicnews.retry")


def with_retries(
    fn: Callable[[], T],
    *,
    delays: Sequence[float] = (0.5, 2.0),
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    label: str = "call",
) -> T:
    """Call ``fn`` and retry it once per entry in ``delays``.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates immediately. ``len(delays)`` is the retry count, so the default
    makes at most three attempts.
    """
    last_exc: BaseException | None = None
    attempts = len(delays) + 1
    for attempt in range(attempts):
        try:
            return fn()
        except retry_on as exc:
            last_exc = exc
            if attempt >= len(delays):
                break
            sleep_s = delays[attempt]
            logger.warning(
                "%s failed (attempt %s/%s): %s; retrying in %.1fs",
                label,
                attempt + 1,
                attempts,
                exc,
                sleep_s,
            )
            sleep(sleep_s)
    assert last_exc is not None
    raise last_exc
