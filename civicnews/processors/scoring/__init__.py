"""Content scoring strategies (remote model, local heuristic, fallback)."""

from .base import ContentScorer, ScoreRequest, ScoreResult
from .factory import BACKENDS, create_scorer
from .fallback import FallbackScorer
from .heuristic import HeuristicScorer

__all__ = [
    "ContentScorer",
    "ScoreRequest",
    "ScoreResult",
    "BACKENDS",
    "create_scorer",
    "FallbackScorer",
    "HeuristicScorer",
]
