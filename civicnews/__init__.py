"""Civic news ingestion and cross-outlet coverage comparison.

This package contains the application entrypoint and all supporting modules
for fetching outlet feeds, extracting and scoring political coverage, and
comparing how different outlets report the same topic.
"""

__all__ = []
