"""
Threshold Policy
================

Turns the selection workflow's date filter into a Threshold.

FILTERS:
- "any": change tracking off -> Threshold.UNBOUNDED (whole documents)
- "last-generation": the instant of the previous generation run, or
  Threshold.MISSING when none was recorded
- "custom": an explicit instant supplied by the user, or Threshold.MISSING
  when no date was picked
- "<days>": relative to now; fractional days are allowed ("0.25" = 6 hours)

Anything else is Threshold.MISSING: no cutoff, so no content counts as new.
"""

from __future__ import annotations
import math
import re
from datetime import datetime
from typing import Optional

from ..contracts.base import Threshold
from ..temporal.clock import LogicalClock

FILTER_ANY = "any"
FILTER_LAST_GENERATION = "last-generation"
FILTER_CUSTOM = "custom"

MS_PER_DAY = 24 * 60 * 60 * 1000

# Leading decimal number; trailing text such as "3days" is ignored
LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_days(filter_date: str) -> Optional[float]:
    """Days encoded in a relative filter, or None when it is not numeric."""
    if not isinstance(filter_date, str):
        return None
    match = LEADING_NUMBER.match(filter_date)
    if match is None:
        return None
    days = float(match.group(1))
    if not math.isfinite(days):
        return None
    return days


class ThresholdPolicy:
    """
    Computes thresholds from date filters.

    Time is read from an injected LogicalClock, so a fixed clock yields
    reproducible thresholds.
    """

    def __init__(self, clock: Optional[LogicalClock] = None):
        self._clock = clock or LogicalClock.live()

    def resolve(
        self,
        filter_date: str,
        custom_date: Optional[datetime] = None,
        last_generation_ms: Optional[int] = None
    ) -> Threshold:
        if filter_date == FILTER_ANY:
            return Threshold.UNBOUNDED

        if filter_date == FILTER_LAST_GENERATION:
            if last_generation_ms is None:
                return Threshold.MISSING
            return Threshold.at(last_generation_ms)

        if filter_date == FILTER_CUSTOM:
            if custom_date is None:
                return Threshold.MISSING
            return Threshold.from_datetime(custom_date)

        days = parse_days(filter_date)
        if days is None:
            return Threshold.MISSING
        if days < 0:
            raise ValueError(f"Relative date filter must not be negative: {filter_date!r}")

        return Threshold.at(self._clock.now_ms() - int(days * MS_PER_DAY))
