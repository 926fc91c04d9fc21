"""
Collaborator Protocols
======================

Interfaces for the capabilities this package consumes but does not own.
Implementations are injected, so tests can substitute in-memory fakes.
"""

from __future__ import annotations
from enum import IntEnum
from typing import Iterable, List, Protocol, Sequence, Tuple

from .base import DocumentId
from .changes import DocumentSnapshot


class DiffOp(IntEnum):
    """Diff segment classification (values match diff-match-patch)."""
    DELETE = -1
    EQUAL = 0
    INSERT = 1


DiffSegment = Tuple[DiffOp, str]


class PatchEngine(Protocol):
    """Myers-diff-with-patch capability."""

    def diff(self, a: str, b: str) -> List[DiffSegment]:
        """Raw structural diff of a into b."""
        ...

    def diff_cleaned(self, a: str, b: str) -> List[DiffSegment]:
        """Diff with trivial-edit (semantic) cleanup applied."""
        ...

    def apply_patch(self, delta: str, text: str) -> Tuple[str, Sequence[bool]]:
        """
        Apply an encoded delta to text.

        Returns the patched text and one success flag per hunk. Raises
        ValueError when the delta itself cannot be decoded.
        """
        ...

    def make_patch(self, source: str, target: str) -> str:
        """Encode a delta that turns source into target."""
        ...


class ArchiveContainer(Protocol):
    """A container of named UTF-8 entries (e.g. a zip bundle)."""

    def names(self) -> Iterable[str]:
        """Names of file entries (directories excluded)."""
        ...

    def read_text(self, name: str) -> str:
        ...


class TextNormalizer(Protocol):
    """Strips non-substantive markup from extracted text."""

    def normalize(self, text: str, has_header_block: bool) -> str:
        ...

    def has_header_block(self, text: str) -> bool:
        ...


class DocumentStore(Protocol):
    """Host application's document store."""

    def load(self, document_id: DocumentId) -> DocumentSnapshot:
        """Raise KeyError when the document does not exist."""
        ...

    def document_ids(self) -> Iterable[DocumentId]:
        ...
