"""Keyword tables shared by the content filter and the heuristic scorer.

A ``Lexicon`` is versioned and can be swapped at runtime by loading a YAML
file with the same keys as ``default_lexicon()`` (see ``load_lexicon``).
Civic terms and watched entities are matched as case-insensitive substrings;
sentiment words, topic keywords and technique markers only as whole words.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

import yaml

from ..utils.config_loader import ConfigError

CIVIC_TERMS: Tuple[str, ...] = (
    # institutions
    "parliament", "house of commons", "senate", "senator", "legislature", "legislative",
    "cabinet", "committee", "council", "mayor", "premier", "prime minister", "minister",
    "member of parliament", "ottawa", "federal", "provincial", "municipal", "government",
    "opposition", "supreme court",
    # process
    "election", "vote", "voter", "ballot", "referendum", "bill", "legislation", "law",
    "policy", "budget", "tax", "tariff", "regulation", "mandate", "campaign", "poll",
    # parties
    "liberal", "conservative", "ndp", "new democrat", "bloc québécois", "bloc quebecois",
    "green party", "political", "politics", "democracy",
    # policy domains
    "healthcare", "pharmacare", "immigration", "refugee", "climate", "carbon", "defence",
    "defense", "housing", "economy", "inflation", "pandemic", "vaccine", "protest",
    # officials
    "trudeau", "poilievre", "singh", "blanchet", "freeland", "carney", "ford", "legault",
)

TOPIC_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "Carbon Tax": ("carbon tax", "carbon pricing", "carbon levy", "consumer carbon price"),
    "Healthcare": ("health", "hospital", "medical", "healthcare", "medicare", "pharmacare"),
    "Economy": ("economy", "economic", "inflation", "gdp", "interest rate", "jobs report"),
    "Budget": ("budget", "deficit", "fiscal update", "spending plan"),
    "Taxation": ("tax cut", "tax hike", "income tax", "gst", "capital gains"),
    "Environment": ("climate", "environment", "environmental", "emission", "pipeline", "wildfire"),
    "Immigration": ("immigration", "immigrant", "refugee", "border", "citizenship", "asylum"),
    "Housing": ("housing", "rent", "renter", "tenant", "mortgage", "homeless", "homelessness"),
    "Education": ("education", "school", "university", "student", "tuition"),
    "Defence": ("military", "defence", "defense", "armed forces", "nato", "navy"),
    "Trade": ("trade", "tariff", "export", "import", "cusma", "usmca"),
    "Justice": ("justice", "court", "crime", "police", "rcmp", "judge"),
    "Elections": ("election", "ballot", "polling station", "campaign", "riding"),
    "Parliament": ("parliament", "house of commons", "senate", "question period", "speaker"),
}

ENTITY_WATCHLIST: Tuple[str, ...] = (
    "Justin Trudeau",
    "Mark Carney",
    "Pierre Poilievre",
    "Jagmeet Singh",
    "Yves-François Blanchet",
    "Elizabeth May",
    "Chrystia Freeland",
    "Anita Anand",
    "Sean Fraser",
    "Marco Mendicino",
    "Jonathan Wilkinson",
    "François-Philippe Champagne",
    "Doug Ford",
    "François Legault",
    "Danielle Smith",
    "David Eby",
)

POSITIVE_WORDS: Tuple[str, ...] = (
    "good", "great", "excellent", "positive", "success", "successful", "improve", "improved",
    "growth", "win", "wins", "praised", "welcome", "welcomed", "benefit", "boost", "relief",
    "agreement", "progress", "support",
)

NEGATIVE_WORDS: Tuple[str, ...] = (
    "bad", "terrible", "negative", "fail", "failed", "failure", "crisis", "problem", "scandal",
    "corruption", "criticized", "criticised", "slammed", "decline", "loss", "losses", "threat",
    "disaster", "chaos", "outrage", "backlash",
)

TECHNIQUE_MARKERS: Dict[str, Tuple[str, ...]] = {
    "Bandwagon": ("experts agree", "everyone knows", "everybody knows", "most canadians agree"),
    "Black and White": ("always", "never", "either you", "there is no alternative"),
    "Appeal to Fear": ("catastrophic", "existential threat", "before it's too late", "will destroy"),
    "Loaded Language": ("radical", "extremist", "disastrous", "reckless", "job-killing", "woke"),
    "Ad Hominem": ("liar", "incompetent", "clown", "traitor"),
}


@dataclass(slots=True)
class Lexicon:
    version: str
    civic_terms: List[str] = field(default_factory=list)
    topics: Dict[str, List[str]] = field(default_factory=dict)
    entities: List[str] = field(default_factory=list)
    positive_words: List[str] = field(default_factory=list)
    negative_words: List[str] = field(default_factory=list)
    techniques: Dict[str, List[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Matching is case-insensitive; store lowercase once
        self.civic_terms = [t.lower() for t in self.civic_terms if t]
        self.topics = {label: [k.lower() for k in kws if k] for label, kws in self.topics.items()}
        self.positive_words = [w.lower() for w in self.positive_words if w]
        self.negative_words = [w.lower() for w in self.negative_words if w]
        self.techniques = {name: [m.lower() for m in ms if m] for name, ms in self.techniques.items()}


def default_lexicon() -> Lexicon:
    return Lexicon(
        version="2024.1",
        civic_terms=list(CIVIC_TERMS),
        topics={k: list(v) for k, v in TOPIC_KEYWORDS.items()},
        entities=list(ENTITY_WATCHLIST),
        positive_words=list(POSITIVE_WORDS),
        negative_words=list(NEGATIVE_WORDS),
        techniques={k: list(v) for k, v in TECHNIQUE_MARKERS.items()},
    )


def _str_list(data: dict, key: str, fallback: List[str]) -> List[str]:
    value = data.get(key)
    if value is None:
        return list(fallback)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"Lexicon key '{key}' must be a list of strings")
    return list(value)


def _str_mapping(data: dict, key: str, fallback: Dict[str, List[str]]) -> Dict[str, List[str]]:
    value = data.get(key)
    if value is None:
        return {k: list(v) for k, v in fallback.items()}
    if not isinstance(value, dict):
        raise ConfigError(f"Lexicon key '{key}' must be a mapping of label -> list of strings")
    out: Dict[str, List[str]] = {}
    for label, kws in value.items():
        if not isinstance(kws, list) or not all(isinstance(k, str) for k in kws):
            raise ConfigError(f"Lexicon '{key}.{label}' must be a list of strings")
        out[str(label)] = list(kws)
    return out


def load_lexicon(path: Path | str) -> Lexicon:
    """Load a lexicon YAML file.

    Required key: ``version``. Optional keys (defaults used when absent):
    ``civic_terms``, ``topics``, ``entities``, ``positive_words``,
    ``negative_words``, ``techniques``.
    """
    lexicon_path = Path(path)
    if not lexicon_path.exists():
        raise ConfigError(f"Lexicon file not found: {lexicon_path}")
    try:
        with lexicon_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {lexicon_path}: {exc}") from exc
    if not isinstance(data, dict) or not data.get("version"):
        raise ConfigError("Lexicon file must be a mapping with a 'version' key")

    base = default_lexicon()
    return Lexicon(
        version=str(data["version"]),
        civic_terms=_str_list(data, "civic_terms", base.civic_terms),
        topics=_str_mapping(data, "topics", base.topics),
        entities=_str_list(data, "entities", base.entities),
        positive_words=_str_list(data, "positive_words", base.positive_words),
        negative_words=_str_list(data, "negative_words", base.negative_words),
        techniques=_str_mapping(data, "techniques", base.techniques),
    )
