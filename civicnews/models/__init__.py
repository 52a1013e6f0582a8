"""Typed models used across the application."""

from .source import Bias, Source, SourceFailure, SourceType, BIAS_VALUES, SOURCE_TYPES
from .article import Article, RawEntry, Sentiment, SENTIMENT_VALUES
from .comparison import ComparisonResult, CredibilityRange, TopicGroup

__all__ = [
    "Bias",
    "Source",
    "SourceFailure",
    "SourceType",
    "BIAS_VALUES",
    "SOURCE_TYPES",
    "Article",
    "RawEntry",
    "Sentiment",
    "SENTIMENT_VALUES",
    "ComparisonResult",
    "CredibilityRange",
    "TopicGroup",
]
