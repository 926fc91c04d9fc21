"""
Selection Settings
==================

User-facing settings for change-based content selection, validated with
pydantic because they arrive from a JSON settings file.
"""

from __future__ import annotations
import json
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ..contracts.base import Threshold, to_epoch_ms
from ..temporal.clock import LogicalClock
from ..temporal.resolver import ResolverConfig
from .threshold import FILTER_ANY, FILTER_CUSTOM, FILTER_LAST_GENERATION, ThresholdPolicy, parse_days

MODE_CHANGES = "changes"
MODE_FULL = "full"


class SelectionSettings(BaseModel):
    """Settings for one selection session."""
    filter_date: str = FILTER_ANY
    custom_date: Optional[datetime] = None
    last_generation_at: Optional[datetime] = None
    mode: Literal["changes", "full"] = MODE_CHANGES
    max_concurrency: int = Field(default=4, ge=1)
    max_entries: Optional[int] = Field(default=None, ge=1)
    corrupt_archive_policy: Literal["raise", "no_history"] = "raise"

    @field_validator("filter_date")
    @classmethod
    def _check_filter_date(cls, value: str) -> str:
        if value in (FILTER_ANY, FILTER_LAST_GENERATION, FILTER_CUSTOM):
            return value
        days = parse_days(value)
        if days is None or days < 0:
            raise ValueError(
                "filter_date must be 'any', 'last-generation', 'custom' "
                "or a non-negative number of days"
            )
        return value

    @classmethod
    def load(cls, path: Path) -> 'SelectionSettings':
        with open(path, 'r', encoding='utf-8') as f:
            return cls.model_validate(json.load(f))

    def resolver_config(self) -> ResolverConfig:
        return ResolverConfig(
            max_entries=self.max_entries,
            corrupt_archive_policy=self.corrupt_archive_policy
        )

    def threshold(self, clock: Optional[LogicalClock] = None) -> Threshold:
        last_generation_ms = None
        if self.last_generation_at is not None:
            last_generation_ms = to_epoch_ms(self.last_generation_at)
        return ThresholdPolicy(clock).resolve(
            self.filter_date,
            custom_date=self.custom_date,
            last_generation_ms=last_generation_ms
        )
