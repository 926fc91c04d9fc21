"""
Change Contracts
================

Values produced and consumed by change resolution.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .base import DocumentId, ErrorCode


@dataclass(frozen=True)
class PatchApplyWarning:
    """
    Non-fatal record of a reverse delta that did not apply cleanly.

    The walk keeps the best-effort text and continues.
    """
    entry_name: str
    timestamp_ms: int
    failed_hunks: int
    total_hunks: int
    reason: str = "hunk_failed"

    @property
    def code(self) -> ErrorCode:
        if self.reason == "undecodable":
            return ErrorCode.PATCH_UNDECODABLE
        return ErrorCode.PATCH_APPLY_PARTIAL

    @property
    def message(self) -> str:
        if self.reason == "undecodable":
            return f"Delta {self.entry_name or self.timestamp_ms} could not be decoded"
        return (
            f"{self.failed_hunks} of {self.total_hunks} hunks failed to apply "
            f"for entry {self.entry_name or self.timestamp_ms}"
        )


@dataclass(frozen=True)
class ChangeSet:
    """
    Result of one resolution.

    Only inserted_text (already normalized) leaves the subsystem; the two
    states are kept for inspection and tests.
    """
    reconstructed_at_threshold: str
    final_state: str
    inserted_text: str
    warnings: Tuple[PatchApplyWarning, ...] = ()

    @staticmethod
    def empty(final_state: str = "") -> ChangeSet:
        """Legitimate "nothing changed" outcome."""
        return ChangeSet(
            reconstructed_at_threshold=final_state,
            final_state=final_state,
            inserted_text=""
        )


@dataclass(frozen=True)
class DocumentSnapshot:
    """
    Everything the host document store knows about one document.

    archive_bytes is None when the document has no edit history.
    """
    document_id: DocumentId
    live_text: str
    modified_at_ms: int
    created_at_ms: int
    archive_bytes: Optional[bytes] = field(default=None, repr=False)

    @property
    def has_archive(self) -> bool:
        return self.archive_bytes is not None
