"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- Layers may import types but MUST NOT modify this module
- All types are frozen dataclasses for immutability guarantee
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Tuple
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for deterministic error handling.
    Every failure the engine can surface is enumerated here.
    """
    # Archive errors
    ARCHIVE_CORRUPT = auto()
    ARCHIVE_ENTRY_NAME_INVALID = auto()
    ARCHIVE_PAYLOAD_UNDECODABLE = auto()

    # Reconstruction diagnostics
    PATCH_APPLY_PARTIAL = auto()
    PATCH_UNDECODABLE = auto()
    LATEST_NOT_FULL_SNAPSHOT = auto()
    WALK_LIMIT_EXCEEDED = auto()

    # Orchestration errors
    RESOLUTION_CANCELLED = auto()
    DOCUMENT_NOT_FOUND = auto()
    DOCUMENT_UNREADABLE = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    @staticmethod
    def create(code: ErrorCode, message: str, **context: object) -> Error:
        """Build an error stamped with the current UTC time."""
        return Error(
            code=code,
            message=message,
            timestamp=datetime.now(timezone.utc),
            context=tuple((key, str(value)) for key, value in context.items())
        )

    def context_value(self, key: str) -> Optional[str]:
        for k, v in self.context:
            if k == key:
                return v
        return None


# =============================================================================
# IDENTITY TYPES
# =============================================================================

@dataclass(frozen=True)
class DocumentId:
    """Opaque document identifier issued by the host document store."""
    value: str

    def __post_init__(self):
        if not self.value or not isinstance(self.value, str):
            raise ValueError("DocumentId value must be a non-empty string")

    def __str__(self) -> str:
        return self.value


# =============================================================================
# TEMPORAL TYPES (Immutable, explicit semantics)
# =============================================================================

def to_epoch_ms(value: datetime) -> int:
    """Convert a datetime to UTC epoch milliseconds (naive values are UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class Threshold:
    """
    Cutoff instant defining "changes since".

    A threshold is a concrete epoch-millisecond value or one of two
    sentinels:
    - UNBOUNDED: change tracking is inactive, the whole document counts
    - MISSING: changes were asked for but no cutoff is known (no previous
      generation run, no custom date), so nothing counts as new
    What to do with a sentinel is the caller's decision; the resolver only
    accepts bounded thresholds.
    """
    value_ms: Optional[int]
    missing: bool = False

    UNBOUNDED = None  # replaced below with the sentinel instances
    MISSING = None

    @property
    def is_unbounded(self) -> bool:
        return self.value_ms is None and not self.missing

    @property
    def is_missing(self) -> bool:
        return self.missing

    @property
    def is_bounded(self) -> bool:
        return self.value_ms is not None

    @staticmethod
    def at(value_ms: int) -> Threshold:
        return Threshold(value_ms=int(value_ms))

    @staticmethod
    def from_datetime(value: datetime) -> Threshold:
        return Threshold(value_ms=to_epoch_ms(value))

    def require_ms(self) -> int:
        """Return the bounded value, failing loudly for the sentinels."""
        if self.value_ms is None:
            kind = "Missing" if self.missing else "Unbounded"
            raise ValueError(f"{kind} threshold has no timestamp")
        return self.value_ms


Threshold.UNBOUNDED = Threshold(value_ms=None)
Threshold.MISSING = Threshold(value_ms=None, missing=True)
