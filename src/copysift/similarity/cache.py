"""
Shingle cache shared by query matching and duplicate clustering.

Entries are namespaced by key type: ``TextKey`` caches the shingles of a
literal string (query text, or a cell's text during search) while
``CellKey`` caches a cell position for duplicate clustering. The two can
never collide, even when a cell holds the same text as a query.
"""

import threading
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Union

from loguru import logger

from .text_processing import DEFAULT_SHINGLE_SIZE, shingles


@dataclass(frozen=True)
class TextKey:
    """Cache key for the literal text itself."""
    text: str


@dataclass(frozen=True)
class CellKey:
    """Cache key for the value at (row, column) of the current dataset."""
    row: int
    column: int


CacheKey = Union[TextKey, CellKey]


class ShingleCache:
    """
    Lazily populated map from cache key to shingle set.

    Unbounded for the lifetime of a dataset; call ``clear()`` when the
    dataset is replaced. Safe to share between threads: concurrent misses
    on the same key compute the same frozenset and the first insert wins,
    so every caller receives the same object.
    """

    def __init__(self, shingle_size: int = DEFAULT_SHINGLE_SIZE):
        if shingle_size < 1:
            raise ValueError(f"Shingle size must be positive, got {shingle_size}")
        self.shingle_size = shingle_size
        self._entries: Dict[CacheKey, FrozenSet[str]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: CacheKey, text: Optional[str] = None) -> FrozenSet[str]:
        """
        Return the shingle set for ``key``, computing it on first request.

        Args:
            key: TextKey or CellKey
            text: Source text; required for CellKey, defaults to ``key.text`` for TextKey
        """
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self.hits += 1
                return cached

        if text is None:
            if not isinstance(key, TextKey):
                raise ValueError(f"Source text is required to compute {key!r}")
            text = key.text

        computed = frozenset(shingles(text, self.shingle_size))
        with self._lock:
            self.misses += 1
            return self._entries.setdefault(key, computed)

    def for_text(self, text: str) -> FrozenSet[str]:
        return self.get_or_compute(TextKey(text))

    def for_cell(self, row: int, column: int, text: str) -> FrozenSet[str]:
        return self.get_or_compute(CellKey(row, column), text)

    def clear(self) -> None:
        with self._lock:
            size = len(self._entries)
            self._entries.clear()
            self.hits = 0
            self.misses = 0
        logger.debug(f"Shingle cache cleared ({size} entries)")

    def __contains__(self, key: CacheKey) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
