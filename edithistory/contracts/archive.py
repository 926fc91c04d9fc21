"""
Archive Contracts
=================

Immutable representation of a document's edit-history archive.

INVARIANTS:
- Entries are ordered ascending by timestamp
- The newest entry is expected to be a full snapshot
- Non-full payloads are REVERSE deltas: applied to the state of the next
  newer entry they yield the state as of their own timestamp
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple

FULL_SNAPSHOT_MARKER = "$"
NAME_RADIX = 36
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class EntryNameError(ValueError):
    """Raised when an archive entry name does not encode a timestamp."""
    pass


def decode_entry_name(name: str) -> Tuple[int, bool]:
    """
    Decode an entry name into (timestamp_ms, is_full_snapshot).

    Names are the base-36 epoch in seconds, suffixed with "$" when the
    entry holds the full document text.
    """
    is_full = name.endswith(FULL_SNAPSHOT_MARKER)
    digits = name[:-1] if is_full else name
    if not digits or digits.startswith(("-", "+")):
        raise EntryNameError(f"Entry name {name!r} does not encode a timestamp")
    try:
        seconds = int(digits, NAME_RADIX)
    except ValueError:
        raise EntryNameError(f"Entry name {name!r} is not base-36") from None
    return seconds * 1000, is_full


def encode_entry_name(timestamp_ms: int, is_full_snapshot: bool) -> str:
    """Inverse of decode_entry_name (sub-second precision is dropped)."""
    seconds = timestamp_ms // 1000
    if seconds < 0:
        raise EntryNameError("Entry timestamps must not predate the epoch")
    digits = ""
    while True:
        seconds, rem = divmod(seconds, NAME_RADIX)
        digits = _BASE36_DIGITS[rem] + digits
        if seconds == 0:
            break
    return digits + (FULL_SNAPSHOT_MARKER if is_full_snapshot else "")


@dataclass(frozen=True)
class ArchiveEntry:
    """
    One checkpoint or reverse delta in the archive.

    payload is the full document text when is_full_snapshot is set,
    otherwise an engine-encoded reverse delta.
    """
    timestamp_ms: int
    is_full_snapshot: bool
    payload: str
    name: str = ""


@dataclass(frozen=True)
class VersionArchive:
    """
    Ordered, index-addressed collection of entries for one document.

    Walkers address entries by index (newest = len - 1) rather than
    following links between entries.
    """
    entries: Tuple[ArchiveEntry, ...] = ()

    @staticmethod
    def of(entries: Iterable[ArchiveEntry]) -> VersionArchive:
        """Build an archive, sorting entries ascending by timestamp."""
        return VersionArchive(
            entries=tuple(sorted(entries, key=lambda e: e.timestamp_ms))
        )

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ArchiveEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> ArchiveEntry:
        return self.entries[index]

    @property
    def is_empty(self) -> bool:
        return not self.entries

    @property
    def latest(self) -> Optional[ArchiveEntry]:
        if not self.entries:
            return None
        return self.entries[-1]

    @property
    def earliest(self) -> Optional[ArchiveEntry]:
        if not self.entries:
            return None
        return self.entries[0]

    def has_entries_after(self, threshold_ms: int) -> bool:
        return any(e.timestamp_ms > threshold_ms for e in self.entries)

    def last_index_at_or_before(self, threshold_ms: int) -> Optional[int]:
        """Index of the newest entry with timestamp <= threshold, if any."""
        for index in range(len(self.entries) - 1, -1, -1):
            if self.entries[index].timestamp_ms <= threshold_ms:
                return index
        return None
