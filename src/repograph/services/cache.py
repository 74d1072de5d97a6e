"""Result caches for repository analysis.

Four bounded, time-expiring caches are grouped in ``AnalysisCaches``:

- ``repos``: full analysis results keyed by ``owner/repo``
- ``files``: file contents keyed by ``owner/repo/path``
- ``summaries``: per-file summaries keyed by ``content_hash(text)`` and language
- ``trees``: tree listings keyed by ``owner/repo``

A set of caches is created by the caller and handed to the analyzer and
sources, so two analyzers never share state unless given the same instance.
"""

import hashlib
import threading
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from cachetools import TTLCache

from ..config import CacheConfig, get_config
from ..logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ResultCache(Generic[T]):
    """Thread-safe get/set wrapper around ``cachetools.TTLCache``.

    Entries expire ``ttl_seconds`` after they were written and the least
    recently used entry is evicted once ``max_entries`` is reached.
    """

    def __init__(self, name: str, max_entries: int, ttl_seconds: float):
        self.name = name
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._cache: TTLCache[str, T] = TTLCache(maxsize=max_entries, ttl=ttl_seconds)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            value = self._cache.get(key)
        logger.debug("Cache %s", "hit" if value is not None else "miss", extra={"cache": self.name, "key": key})
        return value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._cache[key] = value
        logger.debug("Cache set", extra={"cache": self.name, "key": key})

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._cache.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def stats(self) -> dict[str, int]:
        """Current entry count and capacity."""
        return {"size": len(self), "max": self.max_entries}


@dataclass
class AnalysisCaches:
    """The caches shared by one analyzer and its sources."""
    repos: ResultCache[dict[str, Any]]
    files: ResultCache[str]
    summaries: ResultCache[dict[str, Any]]
    trees: ResultCache[list]

    @classmethod
    def from_config(cls, config: Optional[CacheConfig] = None) -> "AnalysisCaches":
        """Create a fresh set of caches sized from configuration."""
        config = config or get_config().cache
        return cls(
            repos=ResultCache("repos", config.repo_max_entries, config.repo_ttl_seconds),
            files=ResultCache("files", config.file_max_entries, config.file_ttl_seconds),
            summaries=ResultCache("summaries", config.summary_max_entries, config.summary_ttl_seconds),
            trees=ResultCache("trees", config.tree_max_entries, config.tree_ttl_seconds),
        )

    def stats(self) -> dict[str, dict[str, int]]:
        return {
            "repos": self.repos.stats(),
            "files": self.files.stats(),
            "summaries": self.summaries.stats(),
            "trees": self.trees.stats(),
        }

    def clear(self) -> None:
        for cache in (self.repos, self.files, self.summaries, self.trees):
            cache.clear()


def content_hash(content: str) -> str:
    """Stable cache key for a piece of file content."""
    return "h_" + hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]
