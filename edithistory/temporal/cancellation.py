"""
Cooperative Cancellation
========================

Tokens checked between archive entries and between documents.

A cancelled resolution raises ResolutionCancelled; it NEVER returns a
partial change set. Callers discard the in-flight work and mark the
document for recomputation.
"""

from __future__ import annotations
from threading import Event
from typing import Optional


class ResolutionCancelled(Exception):
    """Raised when a cancellation token fires mid-resolution."""
    pass


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self):
        self._event = Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled") -> None:
        self._reason = reason
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise ResolutionCancelled(self._reason or "cancelled")


def check(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()
