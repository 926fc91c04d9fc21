"""
Change Set Cache
================

Explicit, caller-owned cache of resolved content per document.

INVALIDATION CONTRACT:
======================
- Document edited     -> invalidate(document_id)
- Mode switched       -> invalidate_all()
- Threshold changed   -> invalidate_all()

Entries are additionally keyed by (mode, threshold, modified time); a
lookup under a different key is a miss even if invalidation was skipped.
Only completed resolutions are stored, never cancelled ones.
"""

from __future__ import annotations
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional, Tuple

from ..contracts.base import DocumentId
from ..contracts.changes import ChangeSet


@dataclass(frozen=True)
class CacheKey:
    mode: str
    threshold_ms: Optional[int]
    modified_at_ms: int


@dataclass(frozen=True)
class CacheStats:
    hits: int
    misses: int
    size: int


class ChangeSetCache:

    def __init__(self):
        self._entries: Dict[str, Tuple[CacheKey, ChangeSet]] = {}
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def get(self, document_id: DocumentId, key: CacheKey) -> Optional[ChangeSet]:
        with self._lock:
            stored = self._entries.get(document_id.value)
            if stored is None or stored[0] != key:
                self._misses += 1
                return None
            self._hits += 1
            return stored[1]

    def put(self, document_id: DocumentId, key: CacheKey, change_set: ChangeSet) -> None:
        with self._lock:
            self._entries[document_id.value] = (key, change_set)

    def invalidate(self, document_id: DocumentId) -> bool:
        """Drop one document; True if something was cached for it."""
        with self._lock:
            return self._entries.pop(document_id.value, None) is not None

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, document_id: DocumentId) -> bool:
        with self._lock:
            return document_id.value in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))
