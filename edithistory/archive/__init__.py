"""
Archive Layer

RESPONSIBILITY: Read edit-history containers into ordered entries
ALLOWED INPUTS: Raw archive bytes from the host document store
OUTPUTS: ArchiveEntry lists / VersionArchive (immutable)

WHAT THIS LAYER MUST NOT DO:
============================
- Write, repair or re-order archives on disk
- Interpret delta payloads (that belongs to the temporal layer)
"""

from .reader import (
    ArchiveCorruptError, ArchiveReader, InMemoryArchiveContainer, ZipArchiveContainer, parse
)

__all__ = [
    'ArchiveCorruptError',
    'ArchiveReader',
    'InMemoryArchiveContainer',
    'ZipArchiveContainer',
    'parse',
]
