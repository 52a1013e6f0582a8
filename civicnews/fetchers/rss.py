from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import feedparser

from ..models import RawEntry
from ..utils.logging import get_logger

logger = get_logger("civicnews.fetchers.rss")

DEFAULT_MAX_ENTRIES = 10


@dataclass(slots=True)
class ParsedFeed:
    entries: List[RawEntry] = field(default_factory=list)
    error: Optional[str] = None
    total_entries: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def _parse_datetime(entry: dict) -> Optional[datetime]:
    # feedparser normalizes dates to UTC struct_time in '*_parsed' keys
    for key in ("published_parsed", "updated_parsed", "created_parsed"):
        tm = entry.get(key)
        if tm:
            try:
                return datetime(*tm[:6], tzinfo=timezone.utc)
            except (TypeError, ValueError):
                return None
    return None


def _entry_link(entry: dict) -> str:
    link = entry.get("link") or ""
    if link:
        return link.strip()
    # Atom entries may only carry rel="alternate" links, RSS items only a guid
    for candidate in entry.get("links") or []:
        if candidate.get("rel", "alternate") == "alternate" and candidate.get("href"):
            return candidate["href"].strip()
    guid = entry.get("id") or ""
    return guid.strip() if guid.startswith(("http://", "https://")) else ""


def _entry_summary(entry: dict) -> Optional[str]:
    summary = entry.get("summary")
    if summary:
        return summary
    contents = entry.get("content")
    if contents and isinstance(contents, list):
        return contents[0].get("value")
    return None


def parse_feed(content: bytes | str, *, max_entries: int = DEFAULT_MAX_ENTRIES) -> ParsedFeed:
    """Decode an RSS 2.0 or Atom payload into ``RawEntry`` items.

    Entries are returned newest first (undated entries keep feed order after
    the dated ones) and truncated to ``max_entries``. Entries with neither a
    title nor a link are dropped. A payload feedparser cannot recognise as a
    feed yields no entries and a populated ``error``; this function does not
    raise.
    """
    if not content:
        return ParsedFeed(error="empty payload")

    try:
        parsed = feedparser.parse(content)
    except Exception as exc:  # noqa: BLE001 - feedparser is lenient but not total
        logger.warning("feedparser raised on payload: %s", exc)
        return ParsedFeed(error=f"parser error: {exc}")

    raw_entries = list(getattr(parsed, "entries", []) or [])
    if not raw_entries:
        if getattr(parsed, "bozo", False):
            return ParsedFeed(error=f"malformed feed: {getattr(parsed, 'bozo_exception', 'unknown error')}")
        if not getattr(parsed, "version", ""):
            return ParsedFeed(error="unrecognized feed format")
        return ParsedFeed()

    if getattr(parsed, "bozo", False):
        # feedparser still recovers entries from many broken feeds
        logger.debug("Feed flagged bozo but yielded %d entries: %s", len(raw_entries), getattr(parsed, "bozo_exception", None))

    entries: List[RawEntry] = []
    for entry in raw_entries:
        title = (entry.get("title") or "").strip()
        link = _entry_link(entry)
        if not title and not link:
            continue
        entries.append(
            RawEntry(
                title=title,
                link=link,
                summary_html=_entry_summary(entry),
                author=(entry.get("author") or None),
                published_at=_parse_datetime(entry),
            )
        )

    epoch = datetime.min.replace(tzinfo=timezone.utc)
    ordered = sorted(
        enumerate(entries),
        key=lambda pair: (pair[1].published_at is not None, pair[1].published_at or epoch, -pair[0]),
        reverse=True,
    )
    newest_first = [e for _, e in ordered]
    return ParsedFeed(entries=newest_first[: max(0, max_entries)], total_entries=len(entries))
