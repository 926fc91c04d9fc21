"""
Contracts Module

Explicit interfaces and immutable values shared by every layer of the
edit-history engine. Layers communicate only through these types.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses)
2. All contracts include explicit error states
3. Collaborators (patch engine, archive container, normalizer, document
   store) are Protocols and are injected, never imported directly
4. All timestamps are UTC epoch milliseconds
"""

from .base import (
    DocumentId, Error, ErrorCode, Threshold, from_epoch_ms, to_epoch_ms
)
from .archive import (
    ArchiveEntry, EntryNameError, VersionArchive, decode_entry_name, encode_entry_name
)
from .changes import ChangeSet, DocumentSnapshot, PatchApplyWarning
from .protocols import (
    ArchiveContainer, DiffOp, DiffSegment, DocumentStore, PatchEngine, TextNormalizer
)

__all__ = [
    'ArchiveContainer',
    'ArchiveEntry',
    'ChangeSet',
    'DiffOp',
    'DiffSegment',
    'DocumentId',
    'DocumentSnapshot',
    'DocumentStore',
    'EntryNameError',
    'Error',
    'ErrorCode',
    'PatchApplyWarning',
    'PatchEngine',
    'TextNormalizer',
    'Threshold',
    'VersionArchive',
    'decode_entry_name',
    'encode_entry_name',
    'from_epoch_ms',
    'to_epoch_ms',
]
