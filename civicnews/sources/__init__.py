"""Outlet catalog and its shared failure state."""

from .registry import SourceRegistry

__all__ = ["SourceRegistry"]
