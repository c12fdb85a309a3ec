"""Normalization of raw usage export rows into usage records."""

import math
import re
from collections.abc import Iterable

from .models import UsageRecord, UsageRow
from .timeparse import TimeParser

# Written by the exporter for hours with no metering data
NO_DATA_SENTINEL = "Ei kulutustietoja tällä ajanjaksolla."

NUMBER_PREFIX = re.compile(r"^\s*[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?")


def parse_usage(text: str) -> float:
    """Parse a decimal-comma usage value ("2,69") into kWh.

    The no-data sentinel and anything without a leading number become 0, as
    do negative and non-finite values.
    """
    if text == NO_DATA_SENTINEL:
        return 0.0

    match = NUMBER_PREFIX.match(text.replace(",", ".", 1))
    if not match:
        return 0.0

    usage = float(match.group(0))
    if not math.isfinite(usage) or usage < 0:
        return 0.0
    return usage


def normalize(rows: Iterable[UsageRow], parser: TimeParser) -> list[UsageRecord]:
    """Turn raw rows into usage records, keeping input order.

    ParseError from a malformed date propagates to the caller.
    """
    return [
        UsageRecord(
            timestamp=parser.parse_usage_date(row.date_text),
            quantity_kwh=parse_usage(row.usage_text),
        )
        for row in rows
    ]
