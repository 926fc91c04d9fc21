"""
Divergence Detection
====================

Live content that differs from the newest checkpoint carries edits the
archive has not recorded yet ("uncommitted" edits).
"""

from __future__ import annotations

from ..contracts.protocols import DiffOp, PatchEngine


class DivergenceDetector:
    """Compares the newest checkpoint with live content."""

    def __init__(self, engine: PatchEngine):
        self._engine = engine

    def has_uncommitted_changes(self, latest_snapshot_text: str, live_text: str) -> bool:
        """True iff the diff contains any non-equal segment."""
        return any(
            op != DiffOp.EQUAL
            for op, _ in self._engine.diff(latest_snapshot_text, live_text)
        )

    def final_state(self, latest_snapshot_text: str, live_text: str) -> str:
        if self.has_uncommitted_changes(latest_snapshot_text, live_text):
            return live_text
        return latest_snapshot_text
