"""In-memory DocumentStore, keyed by document id."""

from __future__ import annotations
from typing import Dict, Iterator, Optional

from ..contracts.base import DocumentId
from ..contracts.changes import DocumentSnapshot


class InMemoryDocumentStore:

    def __init__(self):
        self._documents: Dict[str, DocumentSnapshot] = {}

    def add(
        self,
        document_id: str,
        live_text: str,
        modified_at_ms: int,
        created_at_ms: int,
        archive_bytes: Optional[bytes] = None
    ) -> DocumentSnapshot:
        snapshot = DocumentSnapshot(
            document_id=DocumentId(document_id),
            live_text=live_text,
            modified_at_ms=modified_at_ms,
            created_at_ms=created_at_ms,
            archive_bytes=archive_bytes
        )
        self._documents[document_id] = snapshot
        return snapshot

    def load(self, document_id: DocumentId) -> DocumentSnapshot:
        return self._documents[document_id.value]

    def document_ids(self) -> Iterator[DocumentId]:
        for key in self._documents:
            yield DocumentId(key)
