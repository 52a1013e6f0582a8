from __future__ import annotations

import time
from abc import abstractmethod
from typing import Callable, Sequence

import requests

from ...errors import ScorerUnavailable
from ...utils.logging import get_logger
from ...utils.retry import with_retries
from .base import ContentScorer, ScoreRequest, ScoreResult
from .parsing import parse_score_response

logger = get_logger("civicnews.scoring.remote")

MAX_PROMPT_CONTENT_CHARS = 3000


def build_score_prompt(request: ScoreRequest) -> str:
    content = request.content[:MAX_PROMPT_CONTENT_CHARS]
    return (
        "You are a strict JSON-only political news analyst. "
        "Assess the ARTICLE for sentiment, editorial bias, credibility and rhetorical techniques.\n\n"
        "Output MUST be a single JSON object with keys:\n"
        '- sentiment: one of "positive", "negative", "neutral"\n'
        '- bias: one of "left", "center", "right"\n'
        "- credibilityScore: integer 0-100 (sourcing, evidence, hedging)\n"
        "- factualityScore: integer 0-100 (verifiable, specific claims)\n"
        "- topics: list of short policy topic labels (e.g. \"Carbon Tax\", \"Healthcare\")\n"
        "- mentionedEntities: list of named politicians or institutions\n"
        "- techniques: list of rhetorical techniques used (e.g. \"Loaded Language\", \"Bandwagon\", "
        "\"Appeal to Fear\", \"Black and White\", \"Ad Hominem\", \"Cherry Picking\")\n"
        "Do not include markdown, code fences, or extra text.\n\n"
        f"SOURCE: {request.source_name}\n"
        f"TITLE: {request.title}\n"
        f"ARTICLE:\n{content}\n"
    )


class RemoteModelScorer(ContentScorer):
    """Scores articles by prompting a hosted model for structured JSON.

    Any transport failure, HTTP error or unusable response surfaces as
    ``ScorerUnavailable`` so a fallback can take over.
    """

    name = "remote"

    def __init__(
        self,
        *,
        timeout: float = 60.0,
        retry_delays: Sequence[float] = (1.0,),
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.timeout = timeout
        self.retry_delays = tuple(retry_delays)
        self._sleep = sleep

    @abstractmethod
    def _generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the model's raw text reply."""

    def score(self, request: ScoreRequest) -> ScoreResult:
        prompt = build_score_prompt(request)
        try:
            raw = with_retries(
                lambda: self._generate(prompt),
                delays=self.retry_delays,
                retry_on=(requests.RequestException,),
                sleep=self._sleep,
                label=f"{self.name} scorer",
            )
        except requests.RequestException as exc:
            raise ScorerUnavailable(f"{self.name} transport error: {exc}") from exc
        except ValueError as exc:
            # resp.json() on a non-JSON body
            raise ScorerUnavailable(f"{self.name} returned a non-JSON body: {exc}") from exc
        return parse_score_response(raw, scorer=self.name)
