"""
Insertion Extraction
====================

Reduces a diff to the text that was added.

Deleted and unchanged spans are dropped. Moved text shows up as an
unrelated delete + insert pair, so only its inserted half is kept.
"""

from __future__ import annotations

from ..contracts.protocols import DiffOp, PatchEngine


class InsertionExtractor:

    def __init__(self, engine: PatchEngine):
        self._engine = engine

    def extract_insertions(self, old_state: str, new_state: str) -> str:
        """Concatenate inserted spans of old_state -> new_state, in order."""
        return "".join(
            text
            for op, text in self._engine.diff_cleaned(old_state, new_state)
            if op == DiffOp.INSERT
        )
