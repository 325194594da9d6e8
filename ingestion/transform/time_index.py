"""
ingestion.transform.time_index
------------------------------

Canonical monthly time keys for market price reports.

Raw reports identify a month by a ``year`` integer and an English
month name whose casing varies between sources ("March", "march",
"MARCH", "Mar").  This module maps those pairs to an integer key

    key = year * 12 + month        (month in 1..12)

which orders chronologically and makes gap detection a subtraction.
The shared time axis used by every market is a monthly
``pandas.PeriodIndex`` built from these keys.
"""

from __future__ import annotations

import calendar
from typing import Iterable

import numpy as np
import pandas as pd

from utils.errors import InvalidMonth

_MONTHS = {name.lower(): i for i, name in enumerate(calendar.month_name) if name}
_MONTHS.update({abbr.lower(): i for i, abbr in enumerate(calendar.month_abbr) if abbr})


def month_number(name: str) -> int:
    """Return the calendar month (1..12) for a month name, ignoring case."""
    if not isinstance(name, str):
        raise InvalidMonth([name])
    number = _MONTHS.get(name.strip().lower())
    if number is None:
        raise InvalidMonth([name])
    return number


def time_key(year: int, month: int) -> int:
    if not 1 <= int(month) <= 12:
        raise InvalidMonth([month])
    return int(year) * 12 + int(month)


def key_to_period(key: int) -> pd.Period:
    """Invert :func:`time_key` into a monthly ``pandas.Period``."""
    year, month = divmod(int(key) - 1, 12)
    return pd.Period(year=year, month=month + 1, freq="M")


def period_to_key(period: pd.Period) -> int:
    return time_key(period.year, period.month)


def add_time_keys(df: pd.DataFrame, *, year_col: str = "year", month_col: str = "month") -> pd.DataFrame:
    """Return a copy of ``df`` with an integer ``time_key`` column.

    Parameters
    ----------
    df : pandas.DataFrame
        Observations with a year column and a month-name column.
    year_col, month_col : str
        Column names holding the year and the month name.

    Returns
    -------
    pandas.DataFrame
        Copy of ``df`` with ``month_num`` and ``time_key`` columns appended.

    Raises
    ------
    InvalidMonth
        If any month label does not name a calendar month.  All
        offending labels are reported at once.
    """
    for col in (year_col, month_col):
        if col not in df.columns:
            raise ValueError(f"Observations must contain a '{col}' column.")
    out = df.copy()
    labels = out[month_col].astype("string").str.strip().str.lower()
    numbers = labels.map(_MONTHS)
    bad = numbers.isna()
    if bad.any():
        raise InvalidMonth(pd.unique(out.loc[bad, month_col]))
    out["month_num"] = numbers.astype(int)
    out["time_key"] = out[year_col].astype(int) * 12 + out["month_num"]
    return out


def build_time_axis(keys: Iterable[int], *, contiguous: bool = True) -> pd.PeriodIndex:
    """Build the ordered monthly time axis shared by all markets.

    With ``contiguous=True`` every month between the first and last key
    is included, even when no market reported in it, so that a
    position on the axis always corresponds to one calendar month.
    With ``contiguous=False`` only the distinct keys present are kept.
    """
    unique = np.unique(np.asarray(list(keys), dtype=int))
    if unique.size == 0:
        return pd.PeriodIndex([], freq="M", name="period")
    if contiguous:
        unique = np.arange(unique[0], unique[-1] + 1)
    return pd.PeriodIndex([key_to_period(k) for k in unique], freq="M", name="period")


__all__ = [
    "month_number",
    "time_key",
    "key_to_period",
    "period_to_key",
    "add_time_keys",
    "build_time_axis",
]
