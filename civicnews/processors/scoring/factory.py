from __future__ import annotations

import os
from typing import Optional

from ...utils.logging import get_logger
from ...utils.pipeline_config import ScoringWeights
from ..lexicon import Lexicon
from .base import ContentScorer
from .fallback import FallbackScorer
from .heuristic import HeuristicScorer

logger = get_logger("civicnews.scoring.factory")

BACKENDS = ("heuristic", "ollama", "gemini")


def create_scorer(
    *,
    backend: Optional[str] = None,
    lexicon: Optional[Lexicon] = None,
    weights: Optional[ScoringWeights] = None,
) -> ContentScorer:
    """Create the scoring strategy for a run.

    ``backend`` (or the SCORER_BACKEND env var) selects "heuristic" (default),
    "ollama" or "gemini". Remote backends are always wrapped in a
    ``FallbackScorer`` over the heuristic scorer. If a remote backend cannot
    even be constructed (e.g. missing API key) the heuristic scorer is
    returned on its own.
    """
    selected = (backend or os.environ.get("SCORER_BACKEND", "heuristic")).lower()
    heuristic = HeuristicScorer(lexicon=lexicon, weights=weights)

    if selected == "heuristic":
        return heuristic

    try:
        if selected == "ollama":
            from .ollama import OllamaScorer  # lazy import

            remote = OllamaScorer()
        elif selected == "gemini":
            from .gemini import GeminiScorer  # lazy import

            remote = GeminiScorer()
        else:
            raise ValueError(f"Unsupported SCORER_BACKEND '{selected}'. Use one of {', '.join(BACKENDS)}.")
    except RuntimeError as exc:
        logger.warning("Remote scorer '%s' unavailable at startup (%s); using heuristic scorer only", selected, exc)
        return heuristic

    return FallbackScorer(remote, heuristic)
