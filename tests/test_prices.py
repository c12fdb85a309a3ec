"""Tests for spot price index construction."""

from datetime import datetime, timezone

import pytest
from energy_cost.prices import (
    PriceNotFoundError,
    PriceSourceError,
    build_price_index,
    count_entries,
    to_unit_price,
)
from energy_cost.timeparse import ParseError

T1 = "2019-12-31T23:00:00.000Z"
T2 = "2020-01-01T00:00:00.000Z"


def test_later_source_wins():
    index = build_price_index([[{"date": T1, "value": 10}], [{"date": T1, "value": 20}]])

    assert len(index) == 1
    assert index.get(T1) == pytest.approx(2.48)


def test_envelope_and_bare_sources():
    bare = [{"date": T1, "value": 28.78}]
    wrapped = {"prices": [{"date": T2, "value": 30.0}]}

    index = build_price_index([bare, wrapped])

    assert index.get(T1) == pytest.approx(28.78 / 10 * 1.24)
    assert index.get(T2) == pytest.approx(3.72)


def test_offsets_share_a_key():
    """The same instant written with different offsets overwrites."""
    index = build_price_index([[{"date": T1, "value": 10}], [{"date": "2020-01-01T01:00:00+02:00", "value": 50}]])

    assert len(index) == 1
    assert index.get(T1) == pytest.approx(6.2)


def test_lookup():
    index = build_price_index([[{"date": T1, "value": 10}]])
    ts = datetime(2019, 12, 31, 23, tzinfo=timezone.utc)

    assert ts in index
    assert index.lookup(ts) == pytest.approx(1.24)


def test_lookup_missing_hour():
    """Gaps are not filled from neighbouring hours."""
    index = build_price_index([[{"date": T1, "value": 10}]])

    with pytest.raises(PriceNotFoundError):
        index.lookup(datetime(2020, 1, 1, 0, tzinfo=timezone.utc))


def test_custom_tax_and_divisor():
    index = build_price_index([[{"date": T1, "value": 28.78}]], vat_multiplier=1.0, divisor=10)
    assert index.get(T1) == pytest.approx(2.878)
    assert to_unit_price(100, vat_multiplier=1.1, divisor=1000) == pytest.approx(0.11)


def test_start_and_end():
    index = build_price_index([[{"date": T2, "value": 1}, {"date": T1, "value": 2}]])

    assert index.start == datetime(2019, 12, 31, 23, tzinfo=timezone.utc)
    assert index.end == datetime(2020, 1, 1, 0, tzinfo=timezone.utc)


def test_empty_index():
    index = build_price_index([])
    assert len(index) == 0
    assert index.start is None
    assert index.end is None


@pytest.mark.parametrize(
    "source",
    [
        {"data": []},
        "prices",
        [{"date": T1}],
        [{"value": 10}],
        [{"date": T1, "value": "10"}],
    ],
)
def test_bad_sources(source):
    with pytest.raises(PriceSourceError):
        build_price_index([source])


def test_bad_date():
    with pytest.raises(ParseError):
        build_price_index([[{"date": "31.12.2019", "value": 10}]])


def test_count_entries():
    assert count_entries([[{"date": T1, "value": 1}], {"prices": [{"date": T1, "value": 1}, {"date": T2, "value": 1}]}]) == 3
