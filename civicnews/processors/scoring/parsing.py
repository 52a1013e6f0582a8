from __future__ import annotations

import json
import re
from typing import Any, List, Optional

from ...errors import ScorerUnavailable
from ...models import BIAS_VALUES, SENTIMENT_VALUES
from ...utils.logging import get_logger
from .base import SCORE_FIELDS, ScoreResult

logger = get_logger("civicnews.scoring.parsing")

# Tones some models return instead of the three sentiment labels
_TONE_ALIASES = {
    "hopeful": "positive",
    "optimistic": "positive",
    "angry": "negative",
    "fearful": "negative",
    "critical": "negative",
    "mixed": "neutral",
}

MAX_LIST_ITEMS = 12


def _first(obj: dict, *keys: str) -> Any:
    for key in keys:
        if key in obj:
            return obj[key]
    return None


def _sentiment(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    label = value.strip().lower()
    label = _TONE_ALIASES.get(label, label)
    return label if label in SENTIMENT_VALUES else None


def _bias(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    label = value.strip().lower()
    return label if label in BIAS_VALUES else None


def _score(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return None
    if not isinstance(value, (int, float)):
        return None
    if not (0 <= value <= 100):
        return None
    return int(round(value))


def _str_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    out: List[str] = []
    for item in value:
        if not isinstance(item, str):
            continue
        cleaned = " ".join(item.split())
        if cleaned and cleaned not in out:
            out.append(cleaned)
    return out[:MAX_LIST_ITEMS]


def parse_score_response(raw: str, *, scorer: str = "remote") -> ScoreResult:
    """Parse and validate a remote model's scoring JSON.

    Expected keys (camelCase or snake_case): sentiment, bias,
    credibilityScore, factualityScore, topics, mentionedEntities, techniques.
    Each field is validated on its own; a field that fails validation is
    left as ``None`` and logged, never propagated. Raises
    ``ScorerUnavailable`` if there is no JSON object or no usable field.
    """
    if not raw or not raw.strip():
        raise ScorerUnavailable("Empty scorer response")

    match = re.search(r"\{[\s\S]*\}", raw)
    if not match:
        raise ScorerUnavailable("No JSON object found in scorer response")
    try:
        obj = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ScorerUnavailable(f"Invalid JSON in scorer response: {exc}") from exc
    if not isinstance(obj, dict):
        raise ScorerUnavailable("Scorer response is not a JSON object")

    result = ScoreResult(
        sentiment=_sentiment(_first(obj, "sentiment", "emotionalTone")),
        bias=_bias(_first(obj, "bias", "biasAnalysis")),
        credibility_score=_score(_first(obj, "credibilityScore", "credibility_score")),
        factuality_score=_score(_first(obj, "factualityScore", "factuality_score")),
        topics=_str_list(_first(obj, "topics", "keyTopics")),
        mentioned_entities=_str_list(_first(obj, "mentionedEntities", "mentioned_entities", "politiciansInvolved")),
        techniques=_str_list(_first(obj, "techniques", "propagandaTechniques")),
        scorer=scorer,
    )
    missing = result.missing_fields()
    if len(missing) == len(SCORE_FIELDS):
        raise ScorerUnavailable("Scorer response contained no valid fields")
    if missing:
        logger.debug("Discarded invalid/missing scorer fields: %s", ", ".join(missing))
    return result
