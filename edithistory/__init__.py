"""
Edit-History Change Extraction Engine

Answers "what text was added to this document since time T?" from the
document's live content and its reverse-delta edit-history archive, so
that only new material is handed to a downstream generation step.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Immutable values (ArchiveEntry, ChangeSet, Threshold, Error) and
     collaborator Protocols (PatchEngine, ArchiveContainer, TextNormalizer,
     DocumentStore)

2. ARCHIVE LAYER (archive/)
   - Responsibility: Parse edit-history containers into ordered entries
   - MUST NOT: Write or repair archives

3. TEMPORAL LAYER (temporal/)
   - Responsibility: Backward reconstruction, divergence detection,
     insertion extraction, resolve() orchestration
   - MUST NOT: Hold state between calls

4. NORMALIZATION LAYER (normalization/)
   - Responsibility: Strip markup from extracted text

5. SELECTION LAYER (selection/)
   - Responsibility: Thresholds from date filters, explicit cache,
     cancellable worklists over a document store

6. OBSERVABILITY LAYER (observability/)
   - Responsibility: Append-only diagnostic records

CONSTRAINTS ENFORCED:
=====================
- Read-only: archives are never written
- Deterministic: identical inputs produce identical change sets
- Explicit errors: corrupt archives raise, patch failures are recorded,
  "" with no diagnostic means nothing changed
"""

from .archive import ArchiveCorruptError, ArchiveReader
from .contracts import ArchiveEntry, ChangeSet, DocumentId, Threshold, VersionArchive
from .temporal import ChangeSetResolver, ResolverConfig

__all__ = [
    'ArchiveCorruptError',
    'ArchiveEntry',
    'ArchiveReader',
    'ChangeSet',
    'ChangeSetResolver',
    'DocumentId',
    'ResolverConfig',
    'Threshold',
    'VersionArchive',
]
