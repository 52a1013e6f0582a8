"""Processing stages: filtering, normalization, extraction, deduplication, enrichment."""

from .normalize import clean_html_to_text, normalize_plain_text, clean_text, cap_length
from .lexicon import Lexicon, default_lexicon, load_lexicon
from .content_filter import ContentFilter, is_civic_content
from .dedup import Deduplicator, article_id, canonical_url
from .extract import ArticleExtractor, extract_main_text
from .enrich import Analyzer, extract_bills

__all__ = [
    "clean_html_to_text",
    "normalize_plain_text",
    "clean_text",
    "cap_length",
    "Lexicon",
    "default_lexicon",
    "load_lexicon",
    "ContentFilter",
    "is_civic_content",
    "Deduplicator",
    "article_id",
    "canonical_url",
    "ArticleExtractor",
    "extract_main_text",
    "Analyzer",
    "extract_bills",
]
