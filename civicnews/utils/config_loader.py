from __future__ import annotations

from pathlib import Path
from typing import Iterable, List
from urllib.parse import urlparse

import yaml

from ..models import BIAS_VALUES, SOURCE_TYPES, Source


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


REQUIRED_FIELDS = {"id", "name", "website", "feeds", "bias", "credibility", "type"}

DEFAULT_SOURCES_PATH = Path(__file__).resolve().parent.parent / "data" / "sources.yaml"


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def _validate_source_dict(entry: dict) -> None:
    """Validate a single source mapping from YAML.

    Required fields: id, name, website (http/https), feeds (non-empty list of
    http/https URLs), bias (left|center|right), credibility (0-100),
    type (mainstream|alternative|government|independent).
    Optional fields: region (str), language (str).
    """
    missing = REQUIRED_FIELDS - set(entry)
    if missing:
        raise ConfigError(f"Missing required fields: {sorted(missing)} in {entry}")

    if entry["bias"] not in BIAS_VALUES:
        raise ConfigError(f"Invalid bias '{entry['bias']}' for {entry['id']}. Must be one of {list(BIAS_VALUES)}.")

    if entry["type"] not in SOURCE_TYPES:
        raise ConfigError(f"Invalid type '{entry['type']}' for {entry['id']}. Must be one of {list(SOURCE_TYPES)}.")

    website = str(entry["website"]).strip()
    if not _is_http_url(website):
        raise ConfigError(f"Invalid website '{website}'. Must be absolute http(s) URL.")

    feeds = entry["feeds"]
    if not isinstance(feeds, list) or not feeds:
        raise ConfigError(f"'feeds' must be a non-empty list for {entry['id']}")
    bad = [str(f) for f in feeds if not _is_http_url(str(f).strip())]
    if bad:
        raise ConfigError(f"Invalid feed URL(s) for {entry['id']}: {', '.join(bad)}")

    cred = entry["credibility"]
    if isinstance(cred, bool) or not isinstance(cred, (int, float)) or not (0 <= cred <= 100):
        raise ConfigError(f"'credibility' must be a number in [0, 100] for {entry['id']}, got {cred!r}")


def _coerce_source(entry: dict) -> Source:
    return Source(
        id=str(entry["id"]).strip(),
        display_name=str(entry["name"]).strip(),
        homepage_url=str(entry["website"]).strip(),
        feed_urls=[str(f).strip() for f in entry["feeds"]],
        declared_bias=str(entry["bias"]).strip(),
        prior_credibility=int(round(float(entry["credibility"]))),
        type=str(entry["type"]).strip(),
        region=str(entry.get("region") or "National").strip(),
        language=str(entry.get("language") or "en").strip(),
    )


def load_sources_config(path: Path | str | None = None) -> List[Source]:
    """Load ``sources.yaml`` into typed ``Source`` instances.

    YAML structure:
      - Top-level mapping
      - Key ``sources``: list of source mappings (see ``_validate_source_dict``)

    Source ids must be unique. Unknown top-level keys are ignored.
    """
    config_path = Path(path) if path else DEFAULT_SOURCES_PATH
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Top level of {config_path} must be a mapping")

    sources_raw: Iterable[dict] = (data.get("sources") or [])
    if not isinstance(sources_raw, list):
        raise ConfigError("'sources' must be a list in the YAML configuration")

    sources: List[Source] = []
    seen_ids: set[str] = set()
    for item in sources_raw:
        if not isinstance(item, dict):
            raise ConfigError(f"Each source must be a mapping, got: {type(item)}")
        _validate_source_dict(item)
        src = _coerce_source(item)
        if src.id in seen_ids:
            raise ConfigError(f"Duplicate source id '{src.id}'")
        seen_ids.add(src.id)
        sources.append(src)
    return sources
