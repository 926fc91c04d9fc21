"""
Temporal Reconstruction Layer
=============================

Rebuilds past document states from reverse-delta archives and extracts
what was inserted since a threshold.

INVARIANTS:
- Archives are read, never written
- Same archive + live text + threshold -> same change set (deterministic)
- Patch failures degrade to best-effort text, never to an exception
- Cancellation never produces a partial change set

Modules:
- walker: Backward patch-chain reconstruction
- divergence: Uncommitted-edit detection
- insertion: Insertion-only diff extraction
- resolver: Orchestration and the resolve() entry point
- cancellation: Cooperative cancellation tokens
- clock: Injectable time source
"""

from .cancellation import CancellationToken, ResolutionCancelled
from .clock import LogicalClock
from .divergence import DivergenceDetector
from .insertion import InsertionExtractor
from .resolver import (
    CORRUPT_ARCHIVE_NO_HISTORY, CORRUPT_ARCHIVE_RAISE, ChangeSetResolver, ResolverConfig
)
from .walker import PatchChainWalker, WalkLimitExceeded, WalkResult

__all__ = [
    'CORRUPT_ARCHIVE_NO_HISTORY',
    'CORRUPT_ARCHIVE_RAISE',
    'CancellationToken',
    'ChangeSetResolver',
    'DivergenceDetector',
    'InsertionExtractor',
    'LogicalClock',
    'PatchChainWalker',
    'ResolutionCancelled',
    'ResolverConfig',
    'WalkLimitExceeded',
    'WalkResult',
]
