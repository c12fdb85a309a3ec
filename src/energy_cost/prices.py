"""Spot price index construction and lookup.

Spot feeds publish hourly market prices in EUR/MWh as a list of
``{"date": "2019-12-31T23:00:00.000Z", "value": 28.78}`` entries, either
bare or wrapped as ``{"prices": [...]}``. The index stores tax-inclusive
prices in cents/kWh keyed by the canonical UTC timestamp string.
"""

from collections.abc import Iterable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any

from .timeparse import canonical_key, parse_iso_timestamp

# VAT 24%
DEFAULT_VAT_MULTIPLIER = 1.24
# EUR/MWh -> cents/kWh
DEFAULT_PRICE_DIVISOR = 10

ENVELOPE_FIELD = "prices"


class PriceNotFoundError(LookupError):
    """Raised when no spot price exists for a usage timestamp."""
    pass


class PriceSourceError(ValueError):
    """Raised when a spot price source has an unexpected shape."""
    pass


class PriceIndex:
    """Read-only mapping from timestamp to tax-inclusive price (cents/kWh)."""

    def __init__(self, prices: Mapping[str, float]):
        self._prices = MappingProxyType(dict(prices))

    def __len__(self) -> int:
        return len(self._prices)

    def __contains__(self, timestamp: datetime) -> bool:
        return canonical_key(timestamp) in self._prices

    def get(self, key: str) -> float | None:
        return self._prices.get(key)

    def lookup(self, timestamp: datetime) -> float:
        """Get the price for a timestamp, raising PriceNotFoundError if absent."""
        price = self._prices.get(canonical_key(timestamp))
        if price is None:
            raise PriceNotFoundError(f"Spot price missing for {timestamp.isoformat()}")
        return price

    @property
    def start(self) -> datetime | None:
        """Earliest priced timestamp."""
        if not self._prices:
            return None
        return min(parse_iso_timestamp(key) for key in self._prices)

    @property
    def end(self) -> datetime | None:
        """Latest priced timestamp."""
        if not self._prices:
            return None
        return max(parse_iso_timestamp(key) for key in self._prices)


def unwrap_source(source: Any) -> list[dict]:
    """Return the list of price entries from a bare or enveloped source."""
    if isinstance(source, Mapping):
        if ENVELOPE_FIELD not in source:
            raise PriceSourceError(f"Price source has no '{ENVELOPE_FIELD}' field")
        source = source[ENVELOPE_FIELD]

    if not isinstance(source, list):
        raise PriceSourceError(f"Expected a list of price entries, got {type(source).__name__}")
    return source


def to_unit_price(
    value: float,
    vat_multiplier: float = DEFAULT_VAT_MULTIPLIER,
    divisor: float = DEFAULT_PRICE_DIVISOR,
) -> float:
    """Convert a raw market price to a tax-inclusive cents/kWh price."""
    return value / divisor * vat_multiplier


def build_price_index(
    sources: Iterable[Any],
    vat_multiplier: float = DEFAULT_VAT_MULTIPLIER,
    divisor: float = DEFAULT_PRICE_DIVISOR,
) -> PriceIndex:
    """Merge spot price sources into a single index.

    Later sources overwrite earlier ones for the same timestamp. Missing
    hours are left missing.
    """
    prices: dict[str, float] = {}

    for source in sources:
        for entry in unwrap_source(source):
            try:
                date, value = entry["date"], entry["value"]
            except (KeyError, TypeError) as e:
                raise PriceSourceError(f"Malformed price entry {entry!r}") from e
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise PriceSourceError(f"Non-numeric price {value!r} for {date}")

            key = canonical_key(parse_iso_timestamp(date))
            prices[key] = to_unit_price(value, vat_multiplier, divisor)

    return PriceIndex(prices)


def count_entries(sources: Iterable[Any]) -> int:
    """Total number of raw price entries across sources."""
    return sum(len(unwrap_source(source)) for source in sources)
