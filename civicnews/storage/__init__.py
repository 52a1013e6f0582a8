"""Persistence gateway implementations."""

from .gateway import InMemoryGateway, JsonFileGateway, PersistenceGateway

__all__ = ["InMemoryGateway", "JsonFileGateway", "PersistenceGateway"]
