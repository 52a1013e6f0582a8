from __future__ import annotations

from typing import Optional

from .lexicon import Lexicon, default_lexicon


class ContentFilter:
    """Cheap gate that keeps civic/political entries before enrichment.

    A case-insensitive substring test of title + summary against the
    lexicon's civic terms. Under-inclusion is acceptable.
    """

    def __init__(self, lexicon: Optional[Lexicon] = None) -> None:
        self.lexicon = lexicon or default_lexicon()

    @property
    def version(self) -> str:
        return self.lexicon.version

    def matched_terms(self, title: str | None, summary: str | None) -> list[str]:
        text = f"{title or ''} {summary or ''}".lower()
        return [term for term in self.lexicon.civic_terms if term in text]

    def is_civic(self, title: str | None, summary: str | None) -> bool:
        text = f"{title or ''} {summary or ''}".lower()
        return any(term in text for term in self.lexicon.civic_terms)

    __call__ = is_civic


def is_civic_content(title: str | None, summary: str | None, *, lexicon: Optional[Lexicon] = None) -> bool:
    return ContentFilter(lexicon).is_civic(title, summary)
