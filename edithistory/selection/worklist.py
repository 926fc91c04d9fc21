"""
Worklist Processor
==================

Resolves new content for many documents from a host document store.

GUARANTEES:
===========
1. Documents are independent; a failure on one never aborts the batch
2. Cancellation is checked between documents and between archive entries
3. A cancelled document is reported in needs_recompute and contributes no
   content; it is never cached
. In changes mode a missing threshold (no cutoff known) yields no content
   for every document; documents are still loaded so read errors surface
"""

from __future__ import annotations
import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..archive.reader import ArchiveCorruptError
from ..contracts.base import DocumentId, Error, ErrorCode, Threshold
from ..contracts.changes import ChangeSet
from ..contracts.protocols import DocumentStore
from ..observability import Diagnostic, DiagnosticCollector, DiagnosticKind
from ..temporal.cancellation import CancellationToken, ResolutionCancelled
from ..temporal.resolver import ChangeSetResolver
from ..temporal.walker import WalkLimitExceeded
from .cache import CacheKey, ChangeSetCache
from .settings import MODE_CHANGES, MODE_FULL


@dataclass(frozen=True)
class DocumentOutcome:
    """Outcome for one document: content XOR error XOR cancelled."""
    document_id: DocumentId
    content: Optional[str] = None
    change_set: Optional[ChangeSet] = None
    error: Optional[Error] = None
    from_cache: bool = False
    cancelled: bool = False

    @property
    def is_success(self) -> bool:
        return self.error is None and not self.cancelled


@dataclass(frozen=True)
class WorklistReport:
    outcomes: Tuple[DocumentOutcome, ...]
    needs_recompute: Tuple[DocumentId, ...] = ()
    cancelled: bool = False

    @property
    def contents(self) -> Dict[str, str]:
        """Non-empty content per document id, in worklist order."""
        return {
            o.document_id.value: o.content
            for o in self.outcomes
            if o.is_success and o.content
        }

    @property
    def errors(self) -> Tuple[DocumentOutcome, ...]:
        return tuple(o for o in self.outcomes if o.error is not None)


class WorklistProcessor:
    """
    Drives ChangeSetResolver over a list of documents.

    Holds no per-run state: every run() builds its own report, and the
    cache is an explicit collaborator owned by the caller.
    """

    def __init__(
        self,
        store: DocumentStore,
        resolver: Optional[ChangeSetResolver] = None,
        cache: Optional[ChangeSetCache] = None,
        collector: Optional[DiagnosticCollector] = None
    ):
        self._store = store
        self._resolver = resolver or ChangeSetResolver(collector=collector)
        self._cache = cache
        self._collector = collector if collector is not None else self._resolver.collector

    def run(
        self,
        document_ids: Iterable[DocumentId],
        threshold: Threshold,
        mode: str = MODE_CHANGES,
        cancel: Optional[CancellationToken] = None
    ) -> WorklistReport:
        outcomes: List[DocumentOutcome] = []
        for document_id in document_ids:
            if cancel is not None and cancel.is_cancelled:
                outcomes.append(self._cancelled(document_id, cancel))
                continue
            outcomes.append(self._process(document_id, threshold, mode, cancel))
        return self._report(outcomes, cancel)

    async def run_async(
        self,
        document_ids: Iterable[DocumentId],
        threshold: Threshold,
        mode: str = MODE_CHANGES,
        cancel: Optional[CancellationToken] = None,
        max_concurrency: int = 4
    ) -> WorklistReport:
        """Resolve documents on worker threads, at most max_concurrency at once."""
        semaphore = asyncio.Semaphore(max_concurrency)

        async def worker(document_id: DocumentId) -> DocumentOutcome:
            async with semaphore:
                if cancel is not None and cancel.is_cancelled:
                    return self._cancelled(document_id, cancel)
                return await asyncio.to_thread(
                    self._process, document_id, threshold, mode, cancel
                )

        outcomes = await asyncio.gather(*(worker(d) for d in document_ids))
        return self._report(list(outcomes), cancel)

    def _process(
        self,
        document_id: DocumentId,
        threshold: Threshold,
        mode: str,
        cancel: Optional[CancellationToken]
    ) -> DocumentOutcome:
        try:
            snapshot = self._store.load(document_id)
        except KeyError:
            return self._failed(document_id, Error.create(
                ErrorCode.DOCUMENT_NOT_FOUND,
                f"Document {document_id} not found",
                document_id=document_id
            ))
        except (OSError, UnicodeDecodeError) as e:
            return self._failed(document_id, Error.create(
                ErrorCode.DOCUMENT_UNREADABLE,
                f"Document {document_id} could not be read: {e}",
                document_id=document_id,
                exception=type(e).__name__
            ))

        if mode != MODE_FULL and threshold.is_missing:
            # No cutoff known: nothing counts as new
            return DocumentOutcome(
                document_id=document_id,
                content="",
                change_set=ChangeSet.empty(snapshot.live_text)
            )

        key = CacheKey(mode=mode, threshold_ms=threshold.value_ms, modified_at_ms=snapshot.modified_at_ms)
        if self._cache is not None:
            cached = self._cache.get(document_id, key)
            if cached is not None:
                return DocumentOutcome(
                    document_id=document_id,
                    content=cached.inserted_text,
                    change_set=cached,
                    from_cache=True
                )

        if mode == MODE_FULL or threshold.is_unbounded:
            change_set = ChangeSet(
                reconstructed_at_threshold="",
                final_state=snapshot.live_text,
                inserted_text=self._resolver.normalize_document(snapshot.live_text)
            )
        else:
            try:
                change_set = self._resolver.resolve_document(snapshot, threshold, cancel)
            except ResolutionCancelled:
                return self._cancelled(document_id, cancel)
            except ArchiveCorruptError as e:
                return self._failed(document_id, e.error)
            except WalkLimitExceeded as e:
                error = Error.create(
                    ErrorCode.WALK_LIMIT_EXCEEDED,
                    str(e),
                    required=e.required,
                    limit=e.limit
                )
                self._collector.collect(Diagnostic.from_error(
                    DiagnosticKind.WALK_LIMIT, error, document_id
                ))
                return DocumentOutcome(document_id=document_id, error=error)

        if self._cache is not None:
            self._cache.put(document_id, key, change_set)

        return DocumentOutcome(
            document_id=document_id,
            content=change_set.inserted_text,
            change_set=change_set
        )

    def _cancelled(
        self,
        document_id: DocumentId,
        cancel: Optional[CancellationToken]
    ) -> DocumentOutcome:
        if self._cache is not None:
            self._cache.invalidate(document_id)
        error = Error.create(
            ErrorCode.RESOLUTION_CANCELLED,
            f"Resolution of {document_id} cancelled; needs recomputation",
            reason=(cancel.reason if cancel is not None else None) or "cancelled"
        )
        self._collector.collect(Diagnostic.from_error(
            DiagnosticKind.CANCELLED, error, document_id
        ))
        return DocumentOutcome(document_id=document_id, cancelled=True)

    def _failed(self, document_id: DocumentId, error: Error) -> DocumentOutcome:
        self._collector.collect(Diagnostic.from_error(
            DiagnosticKind.DOCUMENT_ERROR, error, document_id
        ))
        return DocumentOutcome(document_id=document_id, error=error)

    @staticmethod
    def _report(
        outcomes: List[DocumentOutcome],
        cancel: Optional[CancellationToken]
    ) -> WorklistReport:
        return WorklistReport(
            outcomes=tuple(outcomes),
            needs_recompute=tuple(o.document_id for o in outcomes if o.cancelled),
            cancelled=cancel is not None and cancel.is_cancelled
        )
