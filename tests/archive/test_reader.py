"""
Archive Reader Tests
====================

INVARIANTS TESTED:
1. Entry names decode to (timestamp_ms, is_full) and encode back
2. Parsed entries are sorted ascending regardless of container order
3. Empty-but-valid containers parse to []
4. Undecodable containers, names and payloads raise ArchiveCorruptError
"""

import asyncio

import pytest

from edithistory.archive.reader import (
    ArchiveCorruptError, ArchiveReader, InMemoryArchiveContainer, parse
)
from edithistory.contracts.archive import (
    EntryNameError, VersionArchive, decode_entry_name, encode_entry_name
)
from edithistory.contracts.base import ErrorCode

from support.archives import zip_mapping


class TestEntryNames:

    def test_decode_plain_delta(self):
        assert decode_entry_name("a") == (10_000, False)

    def test_decode_full_snapshot_marker(self):
        assert decode_entry_name("zz$") == (1295_000, True)

    def test_decode_is_case_insensitive(self):
        assert decode_entry_name("ZZ") == decode_entry_name("zz")

    def test_encode_inverts_decode(self):
        assert encode_entry_name(1295_000, True) == "zz$"
        assert encode_entry_name(36_000, False) == "10"
        assert encode_entry_name(0, False) == "0"

    def test_encode_drops_subsecond_precision(self):
        assert encode_entry_name(1_999, False) == "1"

    @pytest.mark.parametrize("name", ["", "$", "not-base36!", "-1", "1.5$"])
    def test_invalid_names_rejected(self, name):
        with pytest.raises(EntryNameError):
            decode_entry_name(name)

    def test_negative_timestamps_cannot_be_encoded(self):
        with pytest.raises(EntryNameError):
            encode_entry_name(-5_000, False)


class TestArchiveReader:

    def test_entries_sorted_oldest_first(self):
        raw = zip_mapping({
            "2s$": "newest",
            "2q": "delta-middle",
            "1a": "delta-oldest",
        })
        entries = parse(raw)

        assert [e.name for e in entries] == ["1a", "2q", "2s$"]
        assert [e.timestamp_ms for e in entries] == sorted(e.timestamp_ms for e in entries)
        assert entries[-1].is_full_snapshot
        assert entries[-1].payload == "newest"
        assert not entries[0].is_full_snapshot

    def test_directories_skipped_and_nested_names_decoded(self):
        raw = zip_mapping({
            "history/": b"",
            "history/a$": "ten seconds",
        })
        entries = parse(raw)

        assert len(entries) == 1
        assert entries[0].timestamp_ms == 10_000
        assert entries[0].name == "history/a$"

    def test_empty_container_is_not_an_error(self):
        assert parse(zip_mapping({})) == []

    def test_non_zip_bytes_raise_corrupt(self):
        with pytest.raises(ArchiveCorruptError) as exc:
            parse(b"definitely not a zip file")
        assert exc.value.error.code == ErrorCode.ARCHIVE_CORRUPT

    def test_zero_bytes_raise_corrupt(self):
        with pytest.raises(ArchiveCorruptError):
            parse(b"")

    def test_bad_entry_name_raises_corrupt(self):
        raw = zip_mapping({"a$": "fine", "notes.txt": "stray"})
        with pytest.raises(ArchiveCorruptError) as exc:
            parse(raw)
        assert exc.value.error.code == ErrorCode.ARCHIVE_ENTRY_NAME_INVALID
        assert exc.value.error.context_value("entry_name") == "notes.txt"

    def test_non_utf8_payload_raises_corrupt(self):
        raw = zip_mapping({"a$": b"\xff\xfe\xfa"})
        with pytest.raises(ArchiveCorruptError) as exc:
            parse(raw)
        assert exc.value.error.code == ErrorCode.ARCHIVE_PAYLOAD_UNDECODABLE

    def test_unicode_payload_round_trips(self):
        entries = parse(zip_mapping({"a$": "Grüße – 日本語"}))
        assert entries[0].payload == "Grüße – 日本語"

    def test_read_archive_returns_version_archive(self):
        archive = ArchiveReader().read_archive(zip_mapping({"b$": "x", "a": "y"}))

        assert isinstance(archive, VersionArchive)
        assert archive.latest.name == "b$"
        assert archive.earliest.name == "a"

    def test_read_archive_async(self):
        raw = zip_mapping({"b$": "x", "a": "y"})
        archive = asyncio.run(ArchiveReader().read_archive_async(raw))
        assert len(archive) == 2

    def test_custom_container_factory(self):
        reader = ArchiveReader(
            container_factory=lambda raw: InMemoryArchiveContainer({"c$": raw.decode()})
        )
        entries = reader.parse(b"from memory")

        assert entries[0].payload == "from memory"
        assert entries[0].timestamp_ms == 12_000


class TestVersionArchive:

    def test_of_sorts_entries(self):
        entries = parse(zip_mapping({"b$": "new", "a": "old"}))
        archive = VersionArchive.of(reversed(entries))
        assert [e.name for e in archive] == ["a", "b$"]

    def test_threshold_queries(self):
        archive = VersionArchive.of(parse(zip_mapping({"a": "1", "b": "2", "c$": "3"})))

        assert archive.has_entries_after(11_000)
        assert not archive.has_entries_after(12_000)
        assert archive.last_index_at_or_before(11_500) == 1
        assert archive.last_index_at_or_before(9_999) is None

    def test_empty_archive(self):
        archive = VersionArchive()
        assert archive.is_empty
        assert archive.latest is None
        assert archive.earliest is None
