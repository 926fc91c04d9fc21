"""
Patch Chain Walker
==================

Rebuilds document text as of a threshold instant by walking the archive's
reverse-delta chain backwards from the newest checkpoint.

ALGORITHM:
==========
1. Seed the accumulator with the newest entry's text
2. Visit entries newest -> oldest by index, skipping the newest
3. Entries newer than the threshold are incorporated and the walk goes on
4. The first entry at or before the threshold is incorporated, then the
   walk stops

"Incorporate" means: apply the reverse delta to the accumulator, or adopt
the payload outright when the entry is itself a full snapshot. A full
snapshot newer than the threshold is therefore adopted as a detour state
before older deltas are applied on top of it.

EDGE CASES:
- Newest entry at or before the threshold -> newest text, unchanged
- No entry at or before the threshold -> "" (document presumed absent)
- Failed hunks -> best-effort text is kept, a PatchApplyWarning is recorded
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..contracts.archive import ArchiveEntry, VersionArchive
from ..contracts.changes import PatchApplyWarning
from ..contracts.protocols import PatchEngine
from .cancellation import CancellationToken, check


class WalkLimitExceeded(Exception):
    """Raised when reaching the threshold needs more entries than allowed."""

    def __init__(self, required: int, limit: int):
        super().__init__(
            f"Reconstruction needs {required} entries, limit is {limit}"
        )
        self.required = required
        self.limit = limit


@dataclass(frozen=True)
class WalkResult:
    """Reconstructed state plus what happened on the way."""
    text: str
    warnings: Tuple[PatchApplyWarning, ...] = ()
    entries_applied: int = 0
    stop_index: Optional[int] = None


class PatchChainWalker:
    """
    Backward walker over an index-addressed entry sequence.

    GUARANTEES:
    ===========
    1. Always terminates with some text (never raises on bad deltas)
    2. Never reads entries older than the stop entry
    3. Cancellation is honored between entries and never yields a
       truncated state
    """

    def __init__(self, engine: PatchEngine, max_entries: Optional[int] = None):
        self._engine = engine
        self._max_entries = max_entries

    def reconstruct(
        self,
        entries: Sequence[ArchiveEntry],
        threshold_ms: int,
        latest_snapshot_text: str,
        cancel: Optional[CancellationToken] = None
    ) -> str:
        """Document text as of threshold_ms."""
        return self.walk(entries, threshold_ms, latest_snapshot_text, cancel).text

    def walk(
        self,
        entries: Sequence[ArchiveEntry],
        threshold_ms: int,
        latest_snapshot_text: str,
        cancel: Optional[CancellationToken] = None
    ) -> WalkResult:
        if len(entries) == 0:
            raise ValueError("Cannot reconstruct from an empty archive")

        newest = len(entries) - 1
        if entries[newest].timestamp_ms <= threshold_ms:
            return WalkResult(text=latest_snapshot_text, stop_index=newest)

        stop_index = _as_version_archive(entries).last_index_at_or_before(threshold_ms)
        if stop_index is None:
            return WalkResult(text="")

        required = newest - stop_index
        if self._max_entries is not None and required > self._max_entries:
            raise WalkLimitExceeded(required=required, limit=self._max_entries)

        accumulator = latest_snapshot_text
        warnings: List[PatchApplyWarning] = []
        applied = 0

        cursor = newest - 1
        while cursor >= stop_index:
            check(cancel)
            entry = entries[cursor]

            accumulator, warning = self._incorporate(entry, accumulator)
            applied += 1
            if warning is not None:
                warnings.append(warning)

            if entry.timestamp_ms <= threshold_ms:
                break
            cursor -= 1

        return WalkResult(
            text=accumulator,
            warnings=tuple(warnings),
            entries_applied=applied,
            stop_index=stop_index
        )

    def _incorporate(
        self,
        entry: ArchiveEntry,
        accumulator: str
    ) -> Tuple[str, Optional[PatchApplyWarning]]:
        """Move the accumulator back to the state as of this entry."""
        if entry.is_full_snapshot:
            return entry.payload, None

        try:
            patched, flags = self._engine.apply_patch(entry.payload, accumulator)
        except ValueError:
            return accumulator, PatchApplyWarning(
                entry_name=entry.name,
                timestamp_ms=entry.timestamp_ms,
                failed_hunks=0,
                total_hunks=0,
                reason="undecodable"
            )

        failed = sum(1 for ok in flags if not ok)
        if failed:
            return patched, PatchApplyWarning(
                entry_name=entry.name,
                timestamp_ms=entry.timestamp_ms,
                failed_hunks=failed,
                total_hunks=len(flags)
            )
        return patched, None


def _as_version_archive(entries: Sequence[ArchiveEntry]) -> VersionArchive:
    if isinstance(entries, VersionArchive):
        return entries
    # Entries are taken in the order given; sorting is the caller's concern
    return VersionArchive(entries=tuple(entries))
