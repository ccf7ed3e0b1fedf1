"""
Caching layers for parsed workbook data.

Exports the in-process MemoryCache, the file-backed FileStore and the
TieredCache that combines them.
"""

from .memory import MemoryCache
from .store import FileStore
from .tiered import NullCache, TieredCache

__all__ = ["FileStore", "MemoryCache", "NullCache", "TieredCache"]
