from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Literal, Optional, Tuple

Bias = Literal["left", "center", "right"]
SourceType = Literal["mainstream", "alternative", "government", "independent"]

BIAS_VALUES = ("left", "center", "right")
SOURCE_TYPES = ("mainstream", "alternative", "government", "independent")


SourceState = Tuple[int, Optional[datetime], Optional[datetime]]


def _when(value) -> Optional[datetime]:
    if not value:
        return None
    when = datetime.fromisoformat(value)
    return when if when.tzinfo else when.replace(tzinfo=timezone.utc)


def source_state(row: dict) -> SourceState:
    """Breaker fields of a stored source record. Raises ValueError on malformed values."""
    try:
        failures = int(row.get("consecutive_failures") or 0)
    except TypeError as exc:
        raise ValueError(f"bad consecutive_failures: {exc}") from exc
    if failures < 0:
        raise ValueError("consecutive_failures must be >= 0")
    return failures, _when(row.get("cooldown_until")), _when(row.get("last_success_at"))


@dataclass(slots=True)
class Source:
    """A news outlet in the registry.

    ``consecutive_failures`` and ``cooldown_until`` are owned by the circuit
    breaker and must only be changed while holding the registry's lock for
    this source.
    """

    id: str
    display_name: str
    homepage_url: str
    feed_urls: List[str]
    declared_bias: Bias
    prior_credibility: int
    type: SourceType
    region: str = "National"
    language: str = "en"

    consecutive_failures: int = 0
    cooldown_until: Optional[datetime] = None
    last_success_at: Optional[datetime] = None

    def to_record(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "homepage_url": self.homepage_url,
            "feed_urls": list(self.feed_urls),
            "declared_bias": self.declared_bias,
            "prior_credibility": self.prior_credibility,
            "type": self.type,
            "region": self.region,
            "language": self.language,
            "consecutive_failures": self.consecutive_failures,
            "cooldown_until": self.cooldown_until.isoformat() if self.cooldown_until else None,
            "last_success_at": self.last_success_at.isoformat() if self.last_success_at else None,
        }

    @classmethod
    def from_record(cls, row: dict) -> "Source":
        source = cls(
            id=row["id"],
            display_name=row["display_name"],
            homepage_url=row["homepage_url"],
            feed_urls=list(row.get("feed_urls") or []),
            declared_bias=row["declared_bias"],
            prior_credibility=int(row["prior_credibility"]),
            type=row["type"],
            region=row.get("region", "National"),
            language=row.get("language", "en"),
        )
        source.apply_state(source_state(row))
        return source

    def apply_state(self, state: SourceState) -> None:
        """Copy breaker state (failures, cooldown, last success) onto this source."""
        self.consecutive_failures, self.cooldown_until, self.last_success_at = state


@dataclass(slots=True)
class SourceFailure:
    """One failed feed, source or record within a run."""

    source_id: str
    kind: str
    detail: str = ""
    feed_url: Optional[str] = None
    status: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "source_id": self.source_id,
            "kind": self.kind,
            "detail": self.detail,
            "feed_url": self.feed_url,
            "status": self.status,
        }


__all__ = ["Bias", "SourceType", "BIAS_VALUES", "SOURCE_TYPES", "Source", "SourceFailure", "SourceState", "source_state"]
