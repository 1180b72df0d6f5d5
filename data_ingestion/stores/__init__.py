"""
Data store implementations.
"""

from .base import BaseDataStore
from .memory import InMemoryDataStore, InMemoryStoreConfig


__all__ = ["BaseDataStore", "InMemoryDataStore", "InMemoryStoreConfig"]
