"""Cost and usage totals over a date window."""

from collections.abc import Iterable, Mapping

from .models import CostSummary, UsageRecord, Window
from .tariffs import PricingPolicy


def rows_between(records: Iterable[UsageRecord], window: Window) -> list[UsageRecord]:
    """Records whose timestamp falls within the window (inclusive)."""
    return [record for record in records if window.contains(record.timestamp)]


def calculate_cost(
    records: Iterable[UsageRecord], window: Window, policy: PricingPolicy
) -> CostSummary:
    """Total cost and usage of the records in a window under one contract.

    PriceNotFoundError from a spot contract aborts the whole calculation.
    """
    total_cost = 0.0
    total_usage = 0.0
    count = 0

    for record in rows_between(records, window):
        total_cost += policy.price(record)
        total_usage += record.quantity_kwh
        count += 1

    return CostSummary(total_cost=total_cost, total_usage=total_usage, record_count=count)


def compare_contracts(
    records: Iterable[UsageRecord], window: Window, policies: Mapping[str, PricingPolicy]
) -> dict[str, CostSummary]:
    """Calculate the same window under several named contracts."""
    records = list(records)
    return {name: calculate_cost(records, window, policy) for name, policy in policies.items()}
