"""
Observability & Diagnostics Layer

RESPONSIBILITY: Record diagnostics raised while resolving change sets
ALLOWED INPUTS: Diagnostic records from the archive, temporal and
                selection layers
OUTPUTS: Read-only, filterable diagnostic history

WHAT THIS LAYER MUST NOT DO:
============================
- Modify resolution behavior
- Filter or interpret diagnostics on the way in (only record them)
- Make decisions based on recorded data

A resolution that returns "" and records nothing means "nothing changed";
a resolution that records diagnostics means "best effort".
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import Lock
from typing import Dict, List, Optional, Tuple

from ..contracts.base import DocumentId, Error
from ..contracts.changes import PatchApplyWarning


class DiagnosticKind(Enum):
    """Kinds of diagnostics the engine records."""
    PATCH_APPLY = "patch_apply"
    LATEST_NOT_FULL = "latest_not_full"
    CORRUPT_ARCHIVE_FALLBACK = "corrupt_archive_fallback"
    CANCELLED = "cancelled"
    WALK_LIMIT = "walk_limit"
    DOCUMENT_ERROR = "document_error"


@dataclass(frozen=True)
class Diagnostic:
    """Immutable diagnostic record."""
    kind: DiagnosticKind
    message: str
    document_id: Optional[DocumentId] = None
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def from_patch_warning(
        warning: PatchApplyWarning,
        document_id: Optional[DocumentId] = None
    ) -> Diagnostic:
        return Diagnostic(
            kind=DiagnosticKind.PATCH_APPLY,
            message=warning.message,
            document_id=document_id,
            context=(
                ("code", warning.code.name),
                ("entry_name", warning.entry_name),
                ("timestamp_ms", str(warning.timestamp_ms)),
                ("failed_hunks", str(warning.failed_hunks)),
                ("total_hunks", str(warning.total_hunks)),
                ("reason", warning.reason),
            )
        )

    @staticmethod
    def from_error(
        kind: DiagnosticKind,
        error: Error,
        document_id: Optional[DocumentId] = None
    ) -> Diagnostic:
        return Diagnostic(
            kind=kind,
            message=error.message,
            document_id=document_id,
            context=(("code", error.code.name),) + error.context
        )


class DiagnosticCollector:
    """
    Append-only diagnostic collector.

    Safe to share between worker threads; recorded entries are never
    modified or removed except through an explicit clear().
    """

    def __init__(self, name: str = "edithistory"):
        self._name = name
        self._entries: List[Diagnostic] = []
        self._lock = Lock()

    def collect(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self._entries.append(diagnostic)

    def collect_patch_warnings(
        self,
        warnings: Tuple[PatchApplyWarning, ...],
        document_id: Optional[DocumentId] = None
    ) -> None:
        for warning in warnings:
            self.collect(Diagnostic.from_patch_warning(warning, document_id))

    def get_entries(
        self,
        kind: Optional[DiagnosticKind] = None,
        document_id: Optional[DocumentId] = None
    ) -> List[Diagnostic]:
        """Get entries, optionally filtered."""
        with self._lock:
            entries = list(self._entries)

        if kind:
            entries = [e for e in entries if e.kind == kind]

        if document_id:
            entries = [e for e in entries if e.document_id == document_id]

        return entries

    def counts(self) -> Dict[DiagnosticKind, int]:
        result: Dict[DiagnosticKind, int] = {}
        for entry in self.get_entries():
            result[entry.kind] = result.get(entry.kind, 0) + 1
        return result

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def entry_count(self) -> int:
        with self._lock:
            return len(self._entries)


class NullCollector(DiagnosticCollector):
    """Collector that discards everything (for callers that opt out)."""

    def collect(self, diagnostic: Diagnostic) -> None:
        return None
