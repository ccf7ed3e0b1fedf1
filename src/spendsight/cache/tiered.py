#!/usr/bin/env python3
"""
Two-Tier Cache

Combines the in-process MemoryCache with the shared FileStore. Reads check
memory first, then the store (promoting hits into memory); writes go to
both. A failing store never fails the request: the error is logged and the
caller recomputes.
"""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

from ..core.config import CacheConfig
from .memory import MemoryCache
from .store import FileStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

_STORE_ERRORS = (OSError, ValueError, TypeError)


class TieredCache:
    """Memory cache in front of an optional file store."""

    def __init__(self, memory: MemoryCache, store: FileStore | None = None):
        self.memory = memory
        self.store = store

    @classmethod
    def from_config(cls, config: CacheConfig) -> "TieredCache | NullCache":
        """Build the cache described by the configuration."""
        if not config.enabled:
            return NullCache()
        return cls(
            MemoryCache(ttl_seconds=config.memory_ttl_seconds),
            FileStore(config.store_dir, ttl_seconds=config.store_ttl_seconds),
        )

    def open(self) -> None:
        self.memory.open()
        if self.store is not None:
            try:
                self.store.open()
            except OSError as e:
                logger.warning("Cache store unavailable, continuing with memory only: %s", e)
                self.store = None

    def close(self) -> None:
        self.memory.close()
        if self.store is not None:
            self.store.close()

    def __enter__(self) -> "TieredCache":
        self.open()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(self, key: str) -> Any | None:
        value = self.memory.get(key)
        if value is not None:
            logger.debug("Memory cache hit: %s", key)
            return value
        if self.store is None:
            return None

        try:
            value = self.store.get(key)
        except _STORE_ERRORS as e:
            logger.warning("Cache store read failed for %s: %s", key, e)
            return None

        if value is not None:
            logger.debug("Store cache hit: %s", key)
            self.memory.set(key, value)
        return value

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        self.memory.set(key, value, ttl)
        if self.store is None:
            return
        try:
            self.store.set(key, value, ttl)
        except _STORE_ERRORS as e:
            logger.warning("Cache store write failed for %s: %s", key, e)

    def delete(self, key: str) -> None:
        self.memory.delete(key)
        if self.store is None:
            return
        try:
            self.store.delete(key)
        except OSError as e:
            logger.warning("Cache store delete failed for %s: %s", key, e)

    def clear(self) -> None:
        self.memory.clear()
        if self.store is None:
            return
        try:
            removed = self.store.clear()
            logger.info("Cleared %d cached entries from %s", removed, self.store.directory)
        except OSError as e:
            logger.warning("Cache store clear failed: %s", e)

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        """Cached value for key, computing and storing it on a miss."""
        value = self.get(key)
        if value is None:
            logger.debug("Cache miss: %s", key)
            value = loader()
            self.set(key, value)
        return value


class NullCache:
    """Cache that stores nothing; used when caching is disabled."""

    def open(self) -> None:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "NullCache":
        return self

    def __exit__(self, *exc_info: object) -> None:
        pass

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        pass

    def delete(self, key: str) -> None:
        pass

    def clear(self) -> None:
        pass

    def get_or_load(self, key: str, loader: Callable[[], T]) -> T:
        return loader()
