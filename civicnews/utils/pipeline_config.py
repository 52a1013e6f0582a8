from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

DEFAULT_USER_AGENT = "CivicNews-Ingest/1.0 (+civic transparency news analysis)"


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_delays(name: str, default: str) -> Tuple[float, ...]:
    raw = os.getenv(name, default)
    return tuple(float(p) for p in raw.split(",") if p.strip())


def _env_optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    return float(raw) if raw else None


@dataclass(slots=True)
class ScoringWeights:
    """Point adjustments used by the heuristic scorer.

    These are tuning knobs, not a validated methodology.
    """

    dated_evidence: int = 5
    sourced_quote: int = 5
    hedging: int = -5
    absolute_language: int = -5

    # factuality adjustments
    attribution: int = 5
    hedged_claim: int = -3
    iso_date: int = 2
    dollar_figure: int = 2

    # public impact
    impact_base: int = 50
    impact_politicians: int = 20
    impact_per_technique: int = 5
    impact_negative_tone: int = 15
    impact_low_credibility: int = 10
    low_credibility_threshold: int = 70


@dataclass(slots=True)
class PipelineConfig:
    concurrency: int = field(default_factory=lambda: _env_int("INGEST_CONCURRENCY", 6))
    fetch_timeout: float = field(default_factory=lambda: _env_float("FETCH_TIMEOUT_SECONDS", 10.0))
    retry_delays: Tuple[float, ...] = field(default_factory=lambda: _env_delays("FETCH_RETRY_DELAYS", "0.5,2.0"))
    user_agent: str = field(default_factory=lambda: os.getenv("CRAWLER_USER_AGENT", DEFAULT_USER_AGENT))

    breaker_threshold: int = field(default_factory=lambda: _env_int("BREAKER_THRESHOLD", 3))
    breaker_cooldown_seconds: float = field(default_factory=lambda: _env_float("BREAKER_COOLDOWN_SECONDS", 3600.0))

    feed_max_entries: int = field(default_factory=lambda: _env_int("FEED_MAX_ENTRIES", 10))
    min_content_chars: int = field(default_factory=lambda: _env_int("MIN_CONTENT_CHARS", 200))
    max_text_chars: int = field(default_factory=lambda: _env_int("MAX_TEXT_CHARS", 5000))
    fetch_full_content: bool = field(default_factory=lambda: os.getenv("FETCH_FULL_CONTENT", "1").lower() in {"1", "true", "yes"})

    inter_feed_delay: float = field(default_factory=lambda: _env_float("INTER_FEED_DELAY_SECONDS", 1.0))
    deadline_seconds: Optional[float] = field(default_factory=lambda: _env_optional_float("RUN_DEADLINE_SECONDS"))
    comparison_window_hours: int = field(default_factory=lambda: _env_int("COMPARISON_WINDOW_HOURS", 24))
    scorer_backend: str = field(default_factory=lambda: os.getenv("SCORER_BACKEND", "heuristic").lower())

    weights: ScoringWeights = field(default_factory=ScoringWeights)
