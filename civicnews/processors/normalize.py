"""Text cleanup shared by feed summaries and fetched article pages."""

from __future__ import annotations

import html
import re
import unicodedata

from bs4 import BeautifulSoup

_SPACES = re.compile(r"\s+")
_CONTROL = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

# Typographic marks folded to ASCII; invisible characters removed.
_TYPOGRAPHY = str.maketrans(
    {
        "\u2018": "'",
        "\u2019": "'",
        "\u201A": "'",
        "\u201C": '"',
        "\u201D": '"',
        "\u201E": '"',
        "\u2013": "-",
        "\u2014": "-",
        "\u2212": "-",
        "\u00A0": " ",
        "\u202F": " ",
        "\u00AD": None,
        "\u200B": None,
        "\u200D": None,
        "\u2060": None,
        "\uFEFF": None,
    }
)

# Regions that never carry article prose
NOISE_TAGS = ("script", "style", "noscript", "nav", "header", "footer", "aside", "form", "iframe", "svg")
NOISE_SELECTORS = (
    ".ad",
    ".ads",
    ".advertisement",
    ".ad-container",
    ".sponsored",
    ".newsletter-signup",
    ".related-stories",
    ".share-tools",
    "[aria-label='advertisement']",
)


def strip_noise(soup: BeautifulSoup) -> BeautifulSoup:
    """Remove script/style/nav/ad regions from ``soup`` in place."""
    for tag in soup(list(NOISE_TAGS)):
        tag.decompose()
    for selector in NOISE_SELECTORS:
        for node in soup.select(selector):
            node.decompose()
    return soup


def clean_html_to_text(raw_html: str | bytes | None) -> str:
    """Visible text of an HTML fragment or page, entities decoded, whitespace collapsed."""
    if not raw_html:
        return ""
    soup = strip_noise(BeautifulSoup(raw_html, "html.parser"))
    return _SPACES.sub(" ", html.unescape(soup.get_text(" "))).strip()


def normalize_plain_text(text: str | None) -> str:
    """Fold typography to ASCII, apply NFKC, drop control characters and collapse whitespace."""
    if not text:
        return ""
    text = unicodedata.normalize("NFKC", text.translate(_TYPOGRAPHY))
    return _SPACES.sub(" ", _CONTROL.sub(" ", text)).strip()


def cap_length(text: str, max_chars: int) -> str:
    """Truncate to at most ``max_chars``, preferring a word boundary."""
    if max_chars <= 0 or len(text) <= max_chars:
        return text
    cut = text[:max_chars]
    space = cut.rfind(" ")
    if space > max_chars * 0.8:
        cut = cut[:space]
    return cut.rstrip()


def clean_text(raw: str | None, *, max_chars: int = 5000) -> str:
    """HTML or plain text in, normalized and length-capped plain text out."""
    return cap_length(normalize_plain_text(clean_html_to_text(raw)), max_chars)
