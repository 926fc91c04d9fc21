"""
Logical Clock
=============

Injectable clock used wherever "now" matters (relative thresholds such as
"the last 7 days").

MODES:
- LIVE: reads system time and counts every read
- FIXED: always returns one pinned instant (tests, replays)
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from ..contracts.base import to_epoch_ms


@dataclass
class LogicalClock:
    """
    Injectable source of the current time in epoch milliseconds.

    All threshold computations read time through this clock, so the same
    clock produces the same thresholds.
    """
    _ticks: int = 0
    _fixed_ms: Optional[int] = None

    def now_ms(self) -> int:
        if self._fixed_ms is not None:
            current = self._fixed_ms
        else:
            current = to_epoch_ms(datetime.now(timezone.utc))
        self._ticks += 1
        return current

    def tick_count(self) -> int:
        """Number of reads served."""
        return self._ticks

    def is_live(self) -> bool:
        return self._fixed_ms is None

    @classmethod
    def live(cls) -> 'LogicalClock':
        return cls()

    @classmethod
    def fixed(cls, at_ms: int) -> 'LogicalClock':
        return cls(_fixed_ms=int(at_ms))

    def __repr__(self) -> str:
        mode = "LIVE" if self.is_live() else f"FIXED@{self._fixed_ms}"
        return f"LogicalClock({mode}, ticks={self._ticks})"
