"""
Forensic Reporter CLI
=====================

Inspect edit-history archives directly, without a host application.

COMMANDS:
- entries:      List decoded archive entries (oldest first)
- reconstruct:  Print the document state at a point in time
- changes:      Print the content added to a document since a point in time

WHEN values are epoch milliseconds, ISO-8601 datetimes, or "<days>d"
relative to now (e.g. "7d", "0.5d").

USAGE:
    python -m edithistory.forensic [COMMAND] [ARGS]
"""
import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .archive.reader import ArchiveCorruptError, ArchiveReader
from .contracts.base import DocumentId, Threshold, from_epoch_ms, to_epoch_ms
from .normalization.markdown import MarkdownNormalizer, PassthroughNormalizer
from .observability import DiagnosticCollector
from .patching.dmp_engine import DiffMatchPatchEngine
from .selection.threshold import ThresholdPolicy
from .store.filesystem import ARCHIVE_SUFFIX, FileSystemDocumentStore
from .temporal.resolver import ChangeSetResolver
from .temporal.walker import PatchChainWalker

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_CORRUPT = 2


def parse_when(value: str, policy: Optional[ThresholdPolicy] = None) -> Threshold:
    """Parse a WHEN argument into a bounded threshold."""
    text = value.strip()
    if text.lstrip('-').isdigit():
        return Threshold.at(int(text))
    if text.endswith('d'):
        threshold = (policy or ThresholdPolicy()).resolve(text[:-1])
        if not threshold.is_bounded:
            raise ValueError(f"Invalid relative time: {value!r}")
        return threshold
    try:
        return Threshold.at(to_epoch_ms(datetime.fromisoformat(text.replace('Z', '+00:00'))))
    except ValueError:
        raise ValueError(f"Invalid time: {value!r}") from None


def cmd_entries(args) -> int:
    entries = ArchiveReader().parse(Path(args.archive).read_bytes())
    rows = [
        {
            'name': e.name,
            'timestamp_ms': e.timestamp_ms,
            'timestamp': from_epoch_ms(e.timestamp_ms).isoformat(),
            'kind': 'full' if e.is_full_snapshot else 'delta',
            'payload_length': len(e.payload),
        }
        for e in entries
    ]

    if args.json:
        print(json.dumps(rows, indent=2))
        return EXIT_OK

    print(f"{len(rows)} entries in {args.archive}")
    for row in rows:
        print(f"  {row['timestamp']}  {row['kind']:<5}  {row['payload_length']:>8} chars  {row['name']}")
    return EXIT_OK


def cmd_reconstruct(args) -> int:
    archive = ArchiveReader().read_archive(Path(args.archive).read_bytes())
    if archive.is_empty:
        print("Archive has no entries", file=sys.stderr)
        return EXIT_OK

    threshold = parse_when(args.at)
    result = PatchChainWalker(DiffMatchPatchEngine()).walk(
        archive, threshold.require_ms(), archive.latest.payload
    )
    for warning in result.warnings:
        print(f"[!] {warning.message}", file=sys.stderr)
    sys.stdout.write(result.text)
    return EXIT_OK


def cmd_changes(args) -> int:
    document = Path(args.document).resolve()
    store = FileSystemDocumentStore(document.parent, document_suffix=document.suffix)
    document_id = DocumentId(document.name)
    try:
        snapshot = store.load(document_id)
    except KeyError:
        print(f"[!] No such document: {args.document}", file=sys.stderr)
        return EXIT_USAGE

    collector = DiagnosticCollector()
    resolver = ChangeSetResolver(
        normalizer=PassthroughNormalizer() if args.raw else MarkdownNormalizer(),
        collector=collector
    )
    change_set = resolver.resolve_document(snapshot, parse_when(args.since))

    for diagnostic in collector.get_entries():
        print(f"[!] {diagnostic.kind.value}: {diagnostic.message}", file=sys.stderr)
    print(change_set.inserted_text)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Edit-history forensic tool")
    subparsers = parser.add_subparsers(dest="command", required=True)

    entries = subparsers.add_parser("entries", help="List archive entries")
    entries.add_argument("archive", help=f"Path to a {ARCHIVE_SUFFIX} archive")
    entries.add_argument("--json", action="store_true", help="Emit JSON")
    entries.set_defaults(handler=cmd_entries)

    reconstruct = subparsers.add_parser("reconstruct", help="State at a point in time")
    reconstruct.add_argument("archive", help=f"Path to a {ARCHIVE_SUFFIX} archive")
    reconstruct.add_argument("--at", required=True, help="WHEN to reconstruct")
    reconstruct.set_defaults(handler=cmd_reconstruct)

    changes = subparsers.add_parser("changes", help="Content added since a point in time")
    changes.add_argument("document", help=f"Document path (archive read from <path>{ARCHIVE_SUFFIX})")
    changes.add_argument("--since", required=True, help="WHEN the change window starts")
    changes.add_argument("--raw", action="store_true", help="Skip markdown normalization")
    changes.set_defaults(handler=cmd_changes)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except ArchiveCorruptError as e:
        print(f"[!] Corrupt archive: {e}", file=sys.stderr)
        return EXIT_CORRUPT
    except (OSError, ValueError) as e:
        print(f"[!] {e}", file=sys.stderr)
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
