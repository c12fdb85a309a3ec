"""Spot price data collector.

Loads hourly spot prices from JSON files (e.g. yearly archives) or fetches
them from an HTTP endpoint. Both return the raw decoded JSON; sources are
either a list of {"date", "value"} entries or {"prices": [...]}.
"""

import json
from pathlib import Path
from typing import Any

import httpx


class SpotPriceFetchError(Exception):
    """Raised when spot prices cannot be fetched or decoded."""
    pass


def load_spot_file(path: Path) -> Any:
    """Load a spot price JSON file."""
    with open(path, encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            raise SpotPriceFetchError(f"Invalid JSON in {path}: {e}") from e


def fetch_spot_prices(url: str, timeout: float = 30.0) -> Any:
    """Fetch spot prices from an HTTP endpoint returning JSON.

    Args:
        url: Endpoint URL
        timeout: Request timeout in seconds

    Returns:
        Decoded JSON body

    Raises:
        SpotPriceFetchError: On network errors, non-2xx responses or invalid JSON
    """
    try:
        response = httpx.get(url, timeout=timeout)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SpotPriceFetchError(f"HTTP error fetching spot prices: {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise SpotPriceFetchError(f"Network error fetching spot prices: {e}") from e

    try:
        return response.json()
    except ValueError as e:
        raise SpotPriceFetchError(f"Invalid JSON from {url}: {e}") from e
