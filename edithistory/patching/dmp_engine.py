"""
diff-match-patch Engine
=======================

PatchEngine implementation over the diff-match-patch library.

Deltas are the library's patch text format ("@@ -1,5 +1,11 @@ ...").
"""

from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from diff_match_patch import diff_match_patch

from ..contracts.protocols import DiffOp, DiffSegment


class DiffMatchPatchEngine:
    """
    Thin adapter around diff_match_patch.

    A fresh library object is created per engine; engines hold no state
    between calls, so one instance may be shared by concurrent resolutions.
    """

    def __init__(self, diff_timeout: Optional[float] = None):
        self._dmp = diff_match_patch()
        if diff_timeout is not None:
            # 0 disables the timeout and always produces a minimal diff
            self._dmp.Diff_Timeout = diff_timeout

    def diff(self, a: str, b: str) -> List[DiffSegment]:
        return [(DiffOp(op), text) for op, text in self._dmp.diff_main(a, b)]

    def diff_cleaned(self, a: str, b: str) -> List[DiffSegment]:
        diffs = self._dmp.diff_main(a, b)
        self._dmp.diff_cleanupSemantic(diffs)
        return [(DiffOp(op), text) for op, text in diffs]

    def apply_patch(self, delta: str, text: str) -> Tuple[str, Sequence[bool]]:
        # patch_fromText raises ValueError for malformed delta text
        patches = self._dmp.patch_fromText(delta)
        patched, results = self._dmp.patch_apply(patches, text)
        return patched, tuple(bool(ok) for ok in results)

    def make_patch(self, source: str, target: str) -> str:
        return self._dmp.patch_toText(self._dmp.patch_make(source, target))

