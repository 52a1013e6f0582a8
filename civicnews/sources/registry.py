from __future__ import annotations

import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from ..models import Source
from ..utils.config_loader import load_sources_config
from ..utils.logging import get_logger

logger = get_logger("civicnews.sources.registry")


class SourceRegistry:
    """In-memory catalog of outlets plus the locks guarding their failure state.

    Workers share one registry. Anything that reads-then-writes
    ``consecutive_failures`` or ``cooldown_until`` must do so inside
    ``locked(source_id)``.
    """

    def __init__(self, sources: Iterable[Source]) -> None:
        self._sources: Dict[str, Source] = {}
        self._locks: Dict[str, threading.Lock] = {}
        for src in sources:
            if src.id in self._sources:
                raise ValueError(f"Duplicate source id '{src.id}'")
            self._sources[src.id] = src
            self._locks[src.id] = threading.Lock()

    @classmethod
    def from_config(cls, path: Path | str | None = None) -> "SourceRegistry":
        sources = load_sources_config(path)
        logger.info("Loaded %d source(s) into registry", len(sources))
        return cls(sources)

    def __iter__(self) -> Iterator[Source]:
        return iter(list(self._sources.values()))

    def __len__(self) -> int:
        return len(self._sources)

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._sources

    @property
    def ids(self) -> List[str]:
        return list(self._sources)

    def get(self, source_id: str) -> Optional[Source]:
        return self._sources.get(source_id)

    def require(self, source_id: str) -> Source:
        src = self._sources.get(source_id)
        if src is None:
            raise KeyError(f"Unknown source '{source_id}'")
        return src

    @contextmanager
    def locked(self, source_id: str) -> Iterator[Source]:
        src = self.require(source_id)
        with self._locks[source_id]:
            yield src

    def restore_state(self, stored: Iterable[Source]) -> int:
        """Carry breaker state from previously persisted sources onto this registry.

        Sources not in the catalog are ignored. Returns how many were restored.
        """
        restored = 0
        for prior in stored:
            if prior.id not in self._sources:
                continue
            with self.locked(prior.id) as src:
                src.apply_state((prior.consecutive_failures, prior.cooldown_until, prior.last_success_at))
            restored += 1
        if restored:
            logger.info("Restored breaker state for %d source(s)", restored)
        return restored
