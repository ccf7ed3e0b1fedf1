#!/usr/bin/env python3
"""
File-Backed Cache Store

Shared second cache tier that survives process restarts. Each key is one
JSON file named by the SHA-256 of the key, holding the key, an absolute
expiry timestamp and the value. Values go through the project's JSON
helpers, so datetimes come back as ISO strings.
"""

import hashlib
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..core.json_utils import read_json, write_json

logger = logging.getLogger(__name__)


class FileStore:
    """JSON-file key/value store with per-entry expiry."""

    def __init__(self, directory: Path, ttl_seconds: int = 3600, clock: Callable[[], float] = time.time):
        self.directory = Path(directory)
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _path_for(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{digest}.json"

    def open(self) -> None:
        """Create the store directory."""
        self.directory.mkdir(parents=True, exist_ok=True)

    def close(self) -> None:
        pass

    def get(self, key: str) -> Any | None:
        """
        Stored value, or None when missing, expired or unreadable.

        Expired and corrupt entries are removed.
        """
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            entry = read_json(path)
        except ValueError as e:
            logger.warning("Discarding unreadable cache entry %s: %s", path.name, e)
            path.unlink(missing_ok=True)
            return None

        if not isinstance(entry, dict) or entry.get("key") != key:
            return None
        if self._clock() >= entry.get("expires_at", 0):
            path.unlink(missing_ok=True)
            return None
        return entry.get("value")

    def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        if value is None:
            return
        expires_at = self._clock() + (self.ttl_seconds if ttl is None else ttl)
        write_json(self._path_for(key), {"key": key, "expires_at": expires_at, "value": value})

    def delete(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    def clear(self) -> int:
        """Remove every entry. Returns the number of files removed."""
        if not self.directory.exists():
            return 0
        removed = 0
        for path in self.directory.glob("*.json"):
            path.unlink(missing_ok=True)
            removed += 1
        return removed
