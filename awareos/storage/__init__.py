"""Storage module."""

from .storage import KEYED_TABLES, IStorage, Storage

__all__ = ["KEYED_TABLES", "IStorage", "Storage"]
