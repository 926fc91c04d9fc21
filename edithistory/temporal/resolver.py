"""
Change Set Resolver
===================

Single entry point answering "what text was added since the threshold?".

FLOW:
=====
1. No archive (or an empty one): the whole document is new if it was
   created at or after the threshold, otherwise nothing is
2. Otherwise:
   a. Compare the newest checkpoint with live content (divergence)
   b. No archived edits after the threshold and no divergence -> ""
   c. No archived edits after the threshold, diverged, but the live
      modification predates the threshold -> ""
   d. Reconstruct the state at the threshold, diff it against the final
      state (live text when diverged, newest checkpoint otherwise) and
      keep the insertions
3. Normalize the extracted text

resolve() is single-shot and holds no state between calls; caching is the
caller's responsibility (see selection.cache).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from ..archive.reader import ArchiveCorruptError, ArchiveReader
from ..contracts.archive import ArchiveEntry, VersionArchive
from ..contracts.base import DocumentId, ErrorCode, Threshold
from ..contracts.changes import ChangeSet, DocumentSnapshot
from ..contracts.protocols import PatchEngine, TextNormalizer
from ..normalization.markdown import MarkdownNormalizer
from ..observability import Diagnostic, DiagnosticCollector, DiagnosticKind, NullCollector
from ..patching.dmp_engine import DiffMatchPatchEngine
from .cancellation import CancellationToken, check
from .divergence import DivergenceDetector
from .insertion import InsertionExtractor
from .walker import PatchChainWalker


CORRUPT_ARCHIVE_RAISE = "raise"
CORRUPT_ARCHIVE_NO_HISTORY = "no_history"

ArchiveInput = Union[VersionArchive, Sequence[ArchiveEntry], None]
ThresholdInput = Union[int, Threshold]


@dataclass(frozen=True)
class ResolverConfig:
    """Configuration for change set resolution."""
    # Cap on entries walked per document; None walks the whole chain
    max_entries: Optional[int] = None
    corrupt_archive_policy: str = CORRUPT_ARCHIVE_RAISE
    warn_on_non_full_latest: bool = True

    def __post_init__(self):
        if self.corrupt_archive_policy not in (CORRUPT_ARCHIVE_RAISE, CORRUPT_ARCHIVE_NO_HISTORY):
            raise ValueError(
                f"Unknown corrupt_archive_policy: {self.corrupt_archive_policy!r}"
            )
        if self.max_entries is not None and self.max_entries < 1:
            raise ValueError("max_entries must be at least 1")


class ChangeSetResolver:
    """
    Orchestrates reader, walker, divergence detector and extractor.

    Instances are stateless apart from their injected collaborators and
    can be shared across worker threads.
    """

    def __init__(
        self,
        engine: Optional[PatchEngine] = None,
        normalizer: Optional[TextNormalizer] = None,
        config: Optional[ResolverConfig] = None,
        collector: Optional[DiagnosticCollector] = None,
        reader: Optional[ArchiveReader] = None
    ):
        self._engine = engine or DiffMatchPatchEngine()
        self._normalizer = normalizer or MarkdownNormalizer()
        self._config = config or ResolverConfig()
        self._collector = collector or NullCollector()
        self._reader = reader or ArchiveReader()

        self._walker = PatchChainWalker(self._engine, max_entries=self._config.max_entries)
        self._divergence = DivergenceDetector(self._engine)
        self._extractor = InsertionExtractor(self._engine)

    @property
    def config(self) -> ResolverConfig:
        return self._config

    @property
    def collector(self) -> DiagnosticCollector:
        return self._collector

    def resolve(
        self,
        archive: ArchiveInput,
        live_text: str,
        live_modified_at_ms: int,
        document_created_at_ms: int,
        threshold_ms: ThresholdInput,
        cancel: Optional[CancellationToken] = None,
        document_id: Optional[DocumentId] = None
    ) -> str:
        """Normalized text inserted since threshold_ms."""
        return self.resolve_change_set(
            archive,
            live_text,
            live_modified_at_ms,
            document_created_at_ms,
            threshold_ms,
            cancel=cancel,
            document_id=document_id
        ).inserted_text

    def resolve_change_set(
        self,
        archive: ArchiveInput,
        live_text: str,
        live_modified_at_ms: int,
        document_created_at_ms: int,
        threshold_ms: ThresholdInput,
        cancel: Optional[CancellationToken] = None,
        document_id: Optional[DocumentId] = None
    ) -> ChangeSet:
        threshold = _bounded(threshold_ms)
        check(cancel)

        entries = _as_archive(archive)
        if entries.is_empty:
            if document_created_at_ms >= threshold:
                return ChangeSet(
                    reconstructed_at_threshold="",
                    final_state=live_text,
                    inserted_text=self._normalize(live_text)
                )
            return ChangeSet.empty(live_text)

        latest = entries.latest
        if not latest.is_full_snapshot and self._config.warn_on_non_full_latest:
            self._collector.collect(Diagnostic(
                kind=DiagnosticKind.LATEST_NOT_FULL,
                message=f"Newest entry {latest.name or latest.timestamp_ms} is not a full snapshot",
                document_id=document_id,
                context=(
                    ("code", ErrorCode.LATEST_NOT_FULL_SNAPSHOT.name),
                    ("timestamp_ms", str(latest.timestamp_ms)),
                )
            ))

        diverged = self._divergence.has_uncommitted_changes(latest.payload, live_text)
        edits_after_threshold = entries.has_entries_after(threshold)

        if not edits_after_threshold and not diverged:
            return ChangeSet.empty(latest.payload)

        if not edits_after_threshold and live_modified_at_ms <= threshold:
            # Uncommitted edit exists but was made before the threshold
            return ChangeSet(
                reconstructed_at_threshold=live_text,
                final_state=live_text,
                inserted_text=""
            )

        walk = self._walker.walk(entries, threshold, latest.payload, cancel)
        self._collector.collect_patch_warnings(walk.warnings, document_id)

        final_state = live_text if diverged else latest.payload
        check(cancel)
        inserted = self._extractor.extract_insertions(walk.text, final_state)

        return ChangeSet(
            reconstructed_at_threshold=walk.text,
            final_state=final_state,
            inserted_text=self._normalize(inserted),
            warnings=walk.warnings
        )

    def resolve_document(
        self,
        snapshot: DocumentSnapshot,
        threshold_ms: ThresholdInput,
        cancel: Optional[CancellationToken] = None
    ) -> ChangeSet:
        """
        Resolve a document as supplied by the host store.

        Raw archive bytes are parsed here. ArchiveCorruptError propagates
        unless the config asks for the no-history fallback.
        """
        archive: Optional[VersionArchive] = None
        if snapshot.archive_bytes is not None:
            try:
                archive = self._reader.read_archive(snapshot.archive_bytes)
            except ArchiveCorruptError as e:
                if self._config.corrupt_archive_policy != CORRUPT_ARCHIVE_NO_HISTORY:
                    raise
                self._collector.collect(Diagnostic.from_error(
                    DiagnosticKind.CORRUPT_ARCHIVE_FALLBACK,
                    e.error,
                    snapshot.document_id
                ))

        return self.resolve_change_set(
            archive,
            snapshot.live_text,
            snapshot.modified_at_ms,
            snapshot.created_at_ms,
            threshold_ms,
            cancel=cancel,
            document_id=snapshot.document_id
        )

    def normalize_document(self, text: str) -> str:
        """Normalized full text, for callers not tracking changes."""
        return self._normalize(text)

    def _normalize(self, text: str) -> str:
        if not text:
            return ""
        return self._normalizer.normalize(text, self._normalizer.has_header_block(text))


def _bounded(threshold: ThresholdInput) -> int:
    if isinstance(threshold, Threshold):
        if threshold.is_unbounded:
            raise ValueError(
                "Unbounded threshold: change tracking is inactive, callers "
                "should use the full document instead of resolving changes"
            )
        if threshold.is_missing:
            raise ValueError(
                "Missing threshold: no cutoff is known, so no content counts "
                "as new; callers should report empty content"
            )
        return threshold.require_ms()
    return int(threshold)


def _as_archive(archive: ArchiveInput) -> VersionArchive:
    if archive is None:
        return VersionArchive()
    if isinstance(archive, VersionArchive):
        return archive
    return VersionArchive.of(archive)
