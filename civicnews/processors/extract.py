from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from ..errors import ParseError
from ..fetchers.http import HttpFetcher
from ..models import Article, RawEntry, Source
from ..utils.logging import get_logger
from .dedup import article_id, canonical_url
from .normalize import cap_length, clean_html_to_text, normalize_plain_text, strip_noise

logger = get_logger("civicnews.processors.extract")

# Tried in order; the first selector yielding enough text wins
CONTENT_SELECTORS = (
    "article",
    ".article-body",
    ".article-content",
    "#article-content",
    ".story-content",
    ".entry-content",
    ".post-content",
    ".post-body",
    "main",
    ".content",
)


def extract_main_text(page: bytes | str, *, min_chars: int = 200) -> str:
    """Pull the article body out of an HTML page.

    Noise regions are removed first. Falls back to the whole ``<body>`` when
    no content selector yields ``min_chars`` characters. Raises ``ParseError``
    if the page has no text at all.
    """
    try:
        soup = BeautifulSoup(page, "html.parser")
    except Exception as exc:  # noqa: BLE001 - bs4 raises assorted errors on binary junk
        raise ParseError(f"unparseable page: {exc}") from exc
    strip_noise(soup)

    for selector in CONTENT_SELECTORS:
        nodes = soup.select(selector)
        if not nodes:
            continue
        text = normalize_plain_text(" ".join(n.get_text(" ") for n in nodes))
        if len(text) >= min_chars:
            return text

    body = soup.body or soup
    text = normalize_plain_text(body.get_text(" "))
    if not text:
        raise ParseError("page contains no text")
    return text


class ArticleExtractor:
    """Turn a feed entry into an ``Article`` draft.

    One GET of the article page is attempted with the fetcher's timeout and
    retry policy. If it fails, or yields fewer than ``min_content_chars``
    characters, the cleaned feed summary is used instead. Fetch problems never
    drop the article; only entries without a usable http(s) link are
    rejected.
    """

    def __init__(
        self,
        http: Optional[HttpFetcher],
        *,
        min_content_chars: int = 200,
        max_text_chars: int = 5000,
        fetch_full_content: bool = True,
    ) -> None:
        self.http = http
        self.min_content_chars = min_content_chars
        self.max_text_chars = max_text_chars
        self.fetch_full_content = fetch_full_content and http is not None

    def _page_text(self, url: str) -> Optional[str]:
        result = self.http.fetch(url)
        if not result.ok:
            logger.debug("Full-content fetch failed for %s (%s); using summary", url, result.kind)
            return None
        try:
            text = extract_main_text(result.content, min_chars=self.min_content_chars)
        except ParseError as exc:
            logger.debug("Could not extract text from %s: %s", url, exc)
            return None
        if len(text) < self.min_content_chars:
            logger.debug("Page text too short for %s (%d chars); using summary", url, len(text))
            return None
        return text

    def extract(self, entry: RawEntry, source: Source) -> Optional[Article]:
        link = (entry.link or "").strip()
        if not link:
            logger.debug("Rejecting entry without link from %s: %s", source.id, entry.title)
            return None
        try:
            canonical = canonical_url(link)
        except ValueError as exc:
            logger.debug("Rejecting entry with malformed link %r: %s", link, exc)
            return None
        parts = urlsplit(canonical)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            logger.debug("Rejecting entry with non-http link %r", link)
            return None

        summary = cap_length(normalize_plain_text(clean_html_to_text(entry.summary_html)), self.max_text_chars)
        text, origin = summary, "summary"
        if self.fetch_full_content:
            page = self._page_text(link)
            if page:
                text, origin = cap_length(page, self.max_text_chars), "page"

        title = normalize_plain_text(clean_html_to_text(entry.title))
        if not title:
            title = cap_length(text, 120) or canonical

        return Article(
            canonical_url=canonical,
            article_id=article_id(canonical),
            title=title,
            url=link,
            source_id=source.id,
            cleaned_text=text,
            published_at=entry.published_at,
            author=normalize_plain_text(entry.author) or None,
            content_origin=origin,
        )
