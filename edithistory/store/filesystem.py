"""
File System Document Store
==========================

Documents are files under a root directory. A document's edit history is
the sidecar archive next to it, named after the full file name plus
".edtz" (notes/todo.md -> notes/todo.md.edtz).
"""

from __future__ import annotations
import asyncio
import os
from pathlib import Path
from typing import Iterator

from ..contracts.base import DocumentId
from ..contracts.changes import DocumentSnapshot

ARCHIVE_SUFFIX = ".edtz"


class FileSystemDocumentStore:

    def __init__(self, root: Path, document_suffix: str = ".md"):
        self._root = Path(root).resolve()
        self._document_suffix = document_suffix

    @property
    def root(self) -> Path:
        return self._root

    def document_ids(self) -> Iterator[DocumentId]:
        for path in sorted(self._root.rglob(f"*{self._document_suffix}")):
            if path.is_file():
                yield DocumentId(path.relative_to(self._root).as_posix())

    def path_for(self, document_id: DocumentId) -> Path:
        path = (self._root / document_id.value).resolve()
        # Ids must not escape the root
        if self._root != path and self._root not in path.parents:
            raise KeyError(document_id.value)
        return path

    def archive_path_for(self, document_id: DocumentId) -> Path:
        path = self.path_for(document_id)
        return path.with_name(path.name + ARCHIVE_SUFFIX)

    def load(self, document_id: DocumentId) -> DocumentSnapshot:
        path = self.path_for(document_id)
        if not path.is_file():
            raise KeyError(document_id.value)

        stat = path.stat()
        archive_path = self.archive_path_for(document_id)
        archive_bytes = archive_path.read_bytes() if archive_path.is_file() else None

        return DocumentSnapshot(
            document_id=document_id,
            live_text=path.read_text(encoding='utf-8'),
            modified_at_ms=int(stat.st_mtime * 1000),
            created_at_ms=int(_created_at(stat) * 1000),
            archive_bytes=archive_bytes
        )

    async def load_async(self, document_id: DocumentId) -> DocumentSnapshot:
        return await asyncio.to_thread(self.load, document_id)


def _created_at(stat: os.stat_result) -> float:
    # st_birthtime exists on macOS/BSD; elsewhere st_ctime is the best proxy
    return getattr(stat, 'st_birthtime', stat.st_ctime)
