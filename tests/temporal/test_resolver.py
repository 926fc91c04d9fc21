"""
Change Set Resolver Tests
=========================

Scenario and property tests for resolve().

INVARIANTS TESTED:
1. No-archive policy follows the document creation time
2. "" without diagnostics means nothing changed
3. Uncommitted edits count only when made after the threshold
4. Archived edits and uncommitted edits both contribute insertions
5. Corrupt archives propagate unless the no-history fallback is chosen
"""

import pytest

from edithistory.archive.reader import ArchiveCorruptError
from edithistory.contracts.archive import ArchiveEntry, VersionArchive
from edithistory.contracts.base import DocumentId, Threshold
from edithistory.contracts.changes import DocumentSnapshot
from edithistory.normalization.markdown import PassthroughNormalizer
from edithistory.observability import DiagnosticCollector, DiagnosticKind
from edithistory.patching.dmp_engine import DiffMatchPatchEngine
from edithistory.temporal.cancellation import CancellationToken, ResolutionCancelled
from edithistory.temporal.resolver import (
    CORRUPT_ARCHIVE_NO_HISTORY, ChangeSetResolver, ResolverConfig
)

from support.archives import SECOND, build_archive_bytes, zip_mapping


def full(timestamp_ms, text):
    return ArchiveEntry(timestamp_ms=timestamp_ms, is_full_snapshot=True, payload=text)


SCENARIO_ARCHIVE = [full(100, "Hello"), full(300, "Hello World Extra")]


@pytest.fixture
def collector():
    return DiagnosticCollector()


@pytest.fixture
def resolver(collector):
    return ChangeSetResolver(normalizer=PassthroughNormalizer(), collector=collector)


class TestScenarios:

    def test_scenario_a_committed_edits_since_threshold(self, resolver):
        change_set = resolver.resolve_change_set(
            SCENARIO_ARCHIVE,
            live_text="Hello World Extra",
            live_modified_at_ms=300,
            document_created_at_ms=100,
            threshold_ms=150
        )

        assert change_set.reconstructed_at_threshold == "Hello"
        assert change_set.final_state == "Hello World Extra"
        assert change_set.inserted_text == " World Extra"

    def test_scenario_a_with_default_normalizer(self):
        result = ChangeSetResolver().resolve(SCENARIO_ARCHIVE, "Hello World Extra", 300, 100, 150)
        assert result == "World Extra"

    def test_scenario_b_uncommitted_edits_included(self, resolver):
        change_set = resolver.resolve_change_set(
            SCENARIO_ARCHIVE,
            live_text="Hello World Extra!!",
            live_modified_at_ms=400,
            document_created_at_ms=100,
            threshold_ms=250
        )

        assert change_set.final_state == "Hello World Extra!!"
        assert "World Extra" in change_set.inserted_text
        assert change_set.inserted_text.endswith("!!")

    def test_scenario_c_empty_archive_old_document(self, resolver):
        assert resolver.resolve([], "Old note", 50, 50, 150) == ""


class TestNoArchivePolicy:

    def test_new_document_is_entirely_new(self):
        live = "---\ntags: study\n---\n# Title\nSome **bold** text"
        result = ChangeSetResolver().resolve(None, live, 200, 200, 150)
        assert result == "Some bold text"

    def test_document_created_exactly_at_threshold_counts_as_new(self, resolver):
        assert resolver.resolve(None, "fresh", 150, 150, 150) == "fresh"

    def test_old_document_without_history_is_unchanged(self, resolver, collector):
        assert resolver.resolve(None, "ancient", 900, 100, 150) == ""
        assert collector.entry_count == 0


class TestArchivedHistory:

    def test_nothing_changed(self, resolver, collector):
        result = resolver.resolve(SCENARIO_ARCHIVE, "Hello World Extra", 300, 100, 500)

        assert result == ""
        assert collector.entry_count == 0

    def test_uncommitted_edit_before_threshold_ignored(self, resolver):
        assert resolver.resolve(SCENARIO_ARCHIVE, "Hello World Extra!!", 450, 100, 500) == ""

    def test_uncommitted_edit_after_threshold_only(self, resolver):
        result = resolver.resolve(SCENARIO_ARCHIVE, "Hello World Extra!!", 600, 100, 500)
        assert result == "!!"

    def test_threshold_before_first_checkpoint_everything_new(self, resolver):
        change_set = resolver.resolve_change_set(SCENARIO_ARCHIVE, "Hello World Extra", 300, 100, 50)

        assert change_set.reconstructed_at_threshold == ""
        assert change_set.inserted_text == "Hello World Extra"

    def test_deleted_content_never_reported(self, resolver):
        engine = DiffMatchPatchEngine()
        newer = "Keep this. zzzz"
        older = "Keep this. QQQQ"
        archive = [
            ArchiveEntry(timestamp_ms=1_000, is_full_snapshot=False, payload=engine.make_patch(newer, older)),
            full(2_000, newer),
        ]

        result = resolver.resolve(archive, newer, 2_000, 1_000, 1_500)

        assert result == "zzzz"

    def test_unsorted_entry_sequence_is_ordered(self, resolver):
        result = resolver.resolve(list(reversed(SCENARIO_ARCHIVE)), "Hello World Extra", 300, 100, 150)
        assert result == " World Extra"

    def test_version_archive_accepted(self, resolver):
        result = resolver.resolve(VersionArchive.of(SCENARIO_ARCHIVE), "Hello World Extra", 300, 100, 150)
        assert result == " World Extra"

    def test_threshold_object_accepted(self, resolver):
        result = resolver.resolve(SCENARIO_ARCHIVE, "Hello World Extra", 300, 100, Threshold.at(150))
        assert result == " World Extra"

    def test_unbounded_threshold_rejected(self, resolver):
        with pytest.raises(ValueError):
            resolver.resolve(SCENARIO_ARCHIVE, "Hello World Extra", 300, 100, Threshold.UNBOUNDED)

    def test_missing_threshold_rejected(self, resolver):
        with pytest.raises(ValueError, match="Missing threshold"):
            resolver.resolve(SCENARIO_ARCHIVE, "Hello World Extra", 300, 100, Threshold.MISSING)


class TestDiagnostics:

    def test_latest_not_full_is_best_effort(self, resolver, collector):
        archive = [
            full(100, "Hello"),
            ArchiveEntry(timestamp_ms=300, is_full_snapshot=False, payload="Hello again", name="8"),
        ]

        result = resolver.resolve(archive, "Hello again", 300, 100, 150)

        assert result == " again"
        (diagnostic,) = collector.get_entries(kind=DiagnosticKind.LATEST_NOT_FULL)
        assert "8" in diagnostic.message
        assert ("code", "LATEST_NOT_FULL_SNAPSHOT") in diagnostic.context

    def test_latest_not_full_warning_can_be_disabled(self, collector):
        resolver = ChangeSetResolver(
            normalizer=PassthroughNormalizer(),
            collector=collector,
            config=ResolverConfig(warn_on_non_full_latest=False)
        )
        archive = [ArchiveEntry(timestamp_ms=300, is_full_snapshot=False, payload="x")]

        resolver.resolve(archive, "x", 300, 100, 150)

        assert collector.entry_count == 0

    def test_patch_failures_recorded_against_document(self, resolver, collector):
        archive = [
            ArchiveEntry(timestamp_ms=100, is_full_snapshot=False, payload="broken", name="2s"),
            full(300, "Current text"),
        ]
        document_id = DocumentId("notes/a.md")

        change_set = resolver.resolve_change_set(
            archive, "Current text", 300, 100, 150, document_id=document_id
        )

        assert change_set.warnings
        (diagnostic,) = collector.get_entries(kind=DiagnosticKind.PATCH_APPLY, document_id=document_id)
        assert dict(diagnostic.context)["entry_name"] == "2s"
        assert dict(diagnostic.context)["code"] == "PATCH_UNDECODABLE"

    def test_cancellation_raises_instead_of_partial_result(self, resolver):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(ResolutionCancelled):
            resolver.resolve(SCENARIO_ARCHIVE, "Hello World Extra", 300, 100, 150, cancel=token)


class TestResolveDocument:

    def snapshot(self, archive_bytes, live="beta gamma", modified=30 * SECOND, created=10 * SECOND):
        return DocumentSnapshot(
            document_id=DocumentId("doc.md"),
            live_text=live,
            modified_at_ms=modified,
            created_at_ms=created,
            archive_bytes=archive_bytes
        )

    def test_parses_archive_bytes(self, resolver):
        raw = build_archive_bytes(
            [(10 * SECOND, "beta"), (30 * SECOND, "beta gamma")],
            DiffMatchPatchEngine()
        )
        change_set = resolver.resolve_document(self.snapshot(raw), 20 * SECOND)
        assert change_set.inserted_text == " gamma"

    def test_missing_archive_uses_creation_time(self, resolver):
        change_set = resolver.resolve_document(self.snapshot(None), 5 * SECOND)
        assert change_set.inserted_text == "beta gamma"

    def test_corrupt_archive_propagates_by_default(self, resolver):
        with pytest.raises(ArchiveCorruptError):
            resolver.resolve_document(self.snapshot(b"not a zip"), 20 * SECOND)

    def test_corrupt_archive_no_history_fallback(self, collector):
        resolver = ChangeSetResolver(
            normalizer=PassthroughNormalizer(),
            collector=collector,
            config=ResolverConfig(corrupt_archive_policy=CORRUPT_ARCHIVE_NO_HISTORY)
        )

        old = resolver.resolve_document(self.snapshot(b"not a zip"), 20 * SECOND)
        new = resolver.resolve_document(self.snapshot(zip_mapping({"x.txt": "bad"})), 5 * SECOND)

        assert old.inserted_text == ""
        assert new.inserted_text == "beta gamma"
        assert len(collector.get_entries(kind=DiagnosticKind.CORRUPT_ARCHIVE_FALLBACK)) == 2


class TestResolverConfig:

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            ResolverConfig(corrupt_archive_policy="ignore")

    def test_max_entries_must_be_positive(self):
        with pytest.raises(ValueError):
            ResolverConfig(max_entries=0)
