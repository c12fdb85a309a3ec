"""Electricity contracts and per-reading cost calculation.

Each contract is a small frozen dataclass exposing ``price(record)``, the
cost in cents of one usage record. Rates are in cents/kWh.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

from .config import ConfigError
from .models import UsageRecord
from .prices import PriceIndex

DAY_START_HOUR = 7
DAY_END_HOUR = 22


def is_day_price(dt: datetime) -> bool:
    """Check if a time falls in the day rate period (07:00 to 22:00)."""
    return DAY_START_HOUR <= dt.hour < DAY_END_HOUR


@dataclass(frozen=True)
class FlatRate:
    """A single fixed rate for every hour."""

    rate: float
    kind: Literal["flat"] = "flat"

    def price(self, record: UsageRecord) -> float:
        return record.quantity_kwh * self.rate


@dataclass(frozen=True)
class DayNightRate:
    """Separate rates for day (07-22) and night hours."""

    day_rate: float
    night_rate: float
    kind: Literal["dayNight"] = "dayNight"

    def price(self, record: UsageRecord) -> float:
        rate = self.day_rate if is_day_price(record.timestamp) else self.night_rate
        return record.quantity_kwh * rate


@dataclass(frozen=True)
class SpotRate:
    """Hourly spot market price, including tax.

    Raises PriceNotFoundError for hours missing from the index.
    """

    index: PriceIndex
    kind: Literal["spot"] = "spot"

    def price(self, record: UsageRecord) -> float:
        return record.quantity_kwh * self.index.lookup(record.timestamp)


PricingPolicy = FlatRate | DayNightRate | SpotRate


def _rate(data: Mapping[str, Any], key: str) -> float:
    if key not in data:
        raise ConfigError(f"Contract of kind {data.get('kind')!r} needs '{key}'")
    value = data[key]
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
        raise ConfigError(f"Invalid {key} {value!r}, expected a non-negative number")
    return float(value)


def policy_from_config(data: Mapping[str, Any], price_index: PriceIndex | None = None) -> PricingPolicy:
    """Build a contract from a config mapping.

    Supported shapes:
        {kind: flat, rate: 6}
        {kind: dayNight, day_rate: 6, night_rate: 5}
        {kind: spot}
    """
    kind = data.get("kind")
    if kind == "flat":
        return FlatRate(rate=_rate(data, "rate"))
    if kind == "dayNight":
        return DayNightRate(day_rate=_rate(data, "day_rate"), night_rate=_rate(data, "night_rate"))
    if kind == "spot":
        if price_index is None:
            raise ConfigError("Spot contract requires spot price data")
        return SpotRate(index=price_index)
    raise ConfigError(f"Unknown contract kind {kind!r}")


def describe_policy(policy: PricingPolicy) -> str:
    """Short human-readable description of a contract."""
    if isinstance(policy, FlatRate):
        return f"flat {policy.rate} c/kWh"
    if isinstance(policy, DayNightRate):
        return f"day {policy.day_rate} / night {policy.night_rate} c/kWh"
    return f"spot ({len(policy.index)} hourly prices)"
