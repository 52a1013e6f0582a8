"""Shared fixtures for the ingestion pipeline tests."""

from __future__ import annotations

import pytest

from civicnews.models import Source
from civicnews.sources import SourceRegistry

from fakes import FakeClock, make_source


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def source() -> Source:
    return make_source()


@pytest.fixture
def registry(source: Source) -> SourceRegistry:
    return SourceRegistry([source])
