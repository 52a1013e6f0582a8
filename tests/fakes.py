"""Test doubles: fake HTTP transport, controllable clock, sample sources and feeds."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Union

from civicnews.models import Source


class FakeResponse:
    def __init__(self, status_code: int = 200, content: Union[bytes, str] = b"") -> None:
        self.status_code = status_code
        self.content = content.encode("utf-8") if isinstance(content, str) else content


class FakeGet:
    """Stand-in for ``requests.get`` driven by a URL -> outcome table.

    An outcome is a ``FakeResponse``, an exception instance (raised), or a
    list of either, consumed one per call (the last one repeats).
    Unknown URLs answer 404.
    """

    def __init__(self, routes: Dict[str, object] | None = None) -> None:
        self.routes: Dict[str, object] = dict(routes or {})
        self.calls: List[str] = []

    def __call__(self, url: str, headers=None, timeout=None):
        self.calls.append(url)
        outcome = self.routes.get(url, FakeResponse(404))
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if len(outcome) > 1 else outcome[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def count(self, url: str) -> int:
        return sum(1 for c in self.calls if c == url)


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def no_sleep(_seconds: float) -> None:
    return None


def make_source(
    source_id: str = "cbc",
    *,
    bias: str = "center",
    credibility: int = 80,
    feeds: List[str] | None = None,
    name: str | None = None,
) -> Source:
    return Source(
        id=source_id,
        display_name=name or source_id.upper(),
        homepage_url=f"https://{source_id}.example.ca",
        feed_urls=feeds if feeds is not None else [f"https://{source_id}.example.ca/rss"],
        declared_bias=bias,
        prior_credibility=credibility,
        type="mainstream",
    )


def rss_document(items: List[Dict[str, str]], title: str = "Test Feed") -> str:
    parts = []
    for item in items:
        fields = "".join(f"<{k}>{v}</{k}>" for k, v in item.items())
        parts.append(f"<item>{fields}</item>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{title}</title><link>https://example.ca</link><description>t</description>"
        + "".join(parts)
        + "</channel></rss>"
    )
