"""
Archive Reader
==============

Parses an edit-history container into ordered archive entries.

INVARIANTS:
- Output is sorted ascending by timestamp
- A valid container with no file entries yields an empty list
- Anything that cannot be opened or decoded raises ArchiveCorruptError;
  nothing is silently skipped

The reader never writes to or mutates the container.
"""

from __future__ import annotations
import asyncio
import io
import zipfile
import zlib
from typing import Callable, Dict, Iterable, List, Mapping

from ..contracts.base import Error, ErrorCode
from ..contracts.archive import ArchiveEntry, EntryNameError, VersionArchive, decode_entry_name
from ..contracts.protocols import ArchiveContainer


class ArchiveCorruptError(Exception):
    """
    Raised when archive bytes cannot be parsed as an edit-history container.

    Carries an Error record so callers can store or report it as data.
    """

    def __init__(self, error: Error):
        super().__init__(error.message)
        self.error = error

    @staticmethod
    def create(code: ErrorCode, message: str, **context: object) -> 'ArchiveCorruptError':
        return ArchiveCorruptError(Error.create(code, message, **context))


# Errors zipfile/zlib raise for truncated, encrypted or unsupported members
_CONTAINER_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    zlib.error,
    EOFError,
    NotImplementedError,
    RuntimeError,
    OSError,
    ValueError,
)


class ZipArchiveContainer:
    """ArchiveContainer over an in-memory zip bundle."""

    def __init__(self, archive: zipfile.ZipFile):
        self._zip = archive

    @classmethod
    def open(cls, raw: bytes) -> 'ZipArchiveContainer':
        try:
            return cls(zipfile.ZipFile(io.BytesIO(raw)))
        except _CONTAINER_ERRORS as e:
            raise ArchiveCorruptError.create(
                ErrorCode.ARCHIVE_CORRUPT,
                f"Archive is not a readable zip container: {e}",
                size=len(raw)
            ) from e

    def names(self) -> Iterable[str]:
        return [info.filename for info in self._zip.infolist() if not info.is_dir()]

    def read_text(self, name: str) -> str:
        try:
            data = self._zip.read(name)
        except _CONTAINER_ERRORS as e:
            raise ArchiveCorruptError.create(
                ErrorCode.ARCHIVE_CORRUPT,
                f"Entry {name!r} could not be read: {e}",
                entry_name=name
            ) from e
        try:
            return data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ArchiveCorruptError.create(
                ErrorCode.ARCHIVE_PAYLOAD_UNDECODABLE,
                f"Entry {name!r} is not valid UTF-8",
                entry_name=name
            ) from e


class InMemoryArchiveContainer:
    """ArchiveContainer over a name -> text mapping."""

    def __init__(self, entries: Mapping[str, str]):
        self._entries: Dict[str, str] = dict(entries)

    def names(self) -> Iterable[str]:
        return [name for name in self._entries if not name.endswith('/')]

    def read_text(self, name: str) -> str:
        return self._entries[name]


class ArchiveReader:
    """
    Turns raw archive bytes into ordered entries.

    The container format is injected through container_factory so callers
    can read bundles other than zip.
    """

    def __init__(
        self,
        container_factory: Callable[[bytes], ArchiveContainer] = ZipArchiveContainer.open
    ):
        self._container_factory = container_factory

    def parse(self, raw_container: bytes) -> List[ArchiveEntry]:
        """Parse raw bytes into entries sorted ascending by timestamp."""
        container = self._container_factory(raw_container)
        return self.parse_container(container)

    def parse_container(self, container: ArchiveContainer) -> List[ArchiveEntry]:
        entries = []
        for name in container.names():
            # Entries may sit in folders inside the bundle
            base_name = name.rsplit('/', 1)[-1]
            try:
                timestamp_ms, is_full = decode_entry_name(base_name)
            except EntryNameError as e:
                raise ArchiveCorruptError.create(
                    ErrorCode.ARCHIVE_ENTRY_NAME_INVALID,
                    str(e),
                    entry_name=name
                ) from e

            entries.append(ArchiveEntry(
                timestamp_ms=timestamp_ms,
                is_full_snapshot=is_full,
                payload=container.read_text(name),
                name=name
            ))

        # Stable sort keeps container order for equal timestamps
        entries.sort(key=lambda e: e.timestamp_ms)
        return entries

    def read_archive(self, raw_container: bytes) -> VersionArchive:
        return VersionArchive(entries=tuple(self.parse(raw_container)))

    async def read_archive_async(self, raw_container: bytes) -> VersionArchive:
        """Parse off the event loop; decompression is blocking work."""
        return await asyncio.to_thread(self.read_archive, raw_container)


def parse(raw_container: bytes) -> List[ArchiveEntry]:
    """Parse a zip edit-history container with the default reader."""
    return ArchiveReader().parse(raw_container)
