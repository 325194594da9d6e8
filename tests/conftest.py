"""Pytest configuration helpers.

Ensure the project root is on `sys.path` so imports like
`from seasonality import ...` work during test collection, and provide
small synthetic price tables shared across test modules.
"""
from pathlib import Path
import calendar
import math
import sys

import pandas as pd
import pytest


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    # Insert at front so tests prefer local package sources
    sys.path.insert(0, str(ROOT))


def seasonal_price(t: int, month: int, *, level: float = 100.0, slope: float = 0.5, amplitude: float = 10.0) -> float:
    """Linear trend plus a pure 12-month sinusoid."""
    return level + slope * t + amplitude * math.sin(2.0 * math.pi * month / 12.0)


def _observations(markets, start_year=2014, start_month=1, months=36):
    rows = []
    for name, opts in markets.items():
        lon, lat = opts.get("coords", (None, None))
        scale = opts.get("scale", 1.0)
        first = opts.get("first", 0)
        last = opts.get("last", months - 1)
        skip = set(opts.get("skip", ()))
        for t in range(first, last + 1):
            y, m = divmod(start_month - 1 + t, 12)
            year, month = start_year + y, m + 1
            price = None if t in skip else scale * seasonal_price(t, month)
            rows.append({
                "market": name,
                "region": opts.get("region", "Central"),
                "longitude": float("nan") if lon is None else lon,
                "latitude": float("nan") if lat is None else lat,
                "year": year,
                "month": calendar.month_name[month],
                "price": float("nan") if price is None else price,
            })
    return pd.DataFrame(rows)


@pytest.fixture
def make_observations():
    """Factory building typed observations.

    ``markets`` maps a market name to a dict with optional keys
    ``coords`` (lon, lat), ``scale`` (price multiplier), ``first`` /
    ``last`` (first and last month offset reported) and ``skip``
    (month offsets reported as absent).
    """
    return _observations


@pytest.fixture
def malawi_markets():
    return {
        "Lilongwe": {"coords": (33.78, -13.96), "region": "Central"},
        "Blantyre": {"coords": (35.00, -15.78), "scale": 1.2, "region": "Southern"},
        "Mzuzu": {"coords": (34.02, -11.46), "scale": 0.9, "region": "Northern"},
        "Zomba": {"coords": (35.32, -15.38), "scale": 1.1, "first": 10, "last": 27, "region": "Southern"},
        "Nowhere": {"scale": 1.05},
    }
