"""
Change Set Cache Tests

INVARIANTS TESTED:
1. A hit requires the exact (mode, threshold, modified time) key
2. Invalidation drops entries per document or wholesale
"""

from edithistory.contracts.base import DocumentId
from edithistory.contracts.changes import ChangeSet
from edithistory.selection.cache import CacheKey, ChangeSetCache

DOC = DocumentId("notes/a.md")
KEY = CacheKey(mode="changes", threshold_ms=1000, modified_at_ms=5000)
CHANGE_SET = ChangeSet(reconstructed_at_threshold="a", final_state="ab", inserted_text="b")


class TestChangeSetCache:

    def test_miss_then_hit(self):
        cache = ChangeSetCache()

        assert cache.get(DOC, KEY) is None
        cache.put(DOC, KEY, CHANGE_SET)
        assert cache.get(DOC, KEY) == CHANGE_SET

        stats = cache.stats
        assert (stats.hits, stats.misses, stats.size) == (1, 1, 1)

    def test_key_mismatch_is_miss(self):
        cache = ChangeSetCache()
        cache.put(DOC, KEY, CHANGE_SET)

        assert cache.get(DOC, CacheKey("full", 1000, 5000)) is None
        assert cache.get(DOC, CacheKey("changes", 2000, 5000)) is None
        assert cache.get(DOC, CacheKey("changes", 1000, 6000)) is None

    def test_put_replaces_previous_entry(self):
        cache = ChangeSetCache()
        newer = CacheKey("changes", 1000, 9000)
        cache.put(DOC, KEY, CHANGE_SET)
        cache.put(DOC, newer, ChangeSet.empty("ab"))

        assert len(cache) == 1
        assert cache.get(DOC, KEY) is None
        assert cache.get(DOC, newer) == ChangeSet.empty("ab")

    def test_invalidate_document(self):
        cache = ChangeSetCache()
        other = DocumentId("notes/b.md")
        cache.put(DOC, KEY, CHANGE_SET)
        cache.put(other, KEY, CHANGE_SET)

        assert cache.invalidate(DOC) is True
        assert cache.invalidate(DOC) is False
        assert DOC not in cache
        assert other in cache

    def test_invalidate_all(self):
        cache = ChangeSetCache()
        cache.put(DOC, KEY, CHANGE_SET)
        cache.put(DocumentId("notes/b.md"), KEY, CHANGE_SET)

        cache.invalidate_all()

        assert len(cache) == 0
