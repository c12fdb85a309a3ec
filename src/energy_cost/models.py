"""Data models for usage readings, windows and cost summaries."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UsageRow:
    """A raw row from a usage export, before any parsing."""

    date_text: str  # e.g. "tiistai 1.1.2019 00:00"
    usage_text: str  # e.g. "2,69"


@dataclass(frozen=True)
class UsageRecord:
    """A single hourly electricity usage reading."""

    timestamp: datetime
    quantity_kwh: float


@dataclass(frozen=True)
class Window:
    """A date range, inclusive on both ends."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"Window start {self.start} is after end {self.end}")

    def contains(self, timestamp: datetime) -> bool:
        return self.start <= timestamp <= self.end


@dataclass(frozen=True)
class CostSummary:
    """Total cost (cents) and usage (kWh) of a window under one contract."""

    total_cost: float = 0.0
    total_usage: float = 0.0
    record_count: int = 0

    @property
    def total_cost_euros(self) -> float:
        return self.total_cost / 100
