"""Coverage and missingness diagnostics for market price matrices.

Market price reports are sparse: markets open and close, enumerators
skip months, whole regions go unreported during the lean season.
Before decomposing or indexing it helps to see, per market, how much
of the time axis is covered and where the holes are.  The functions
here only *describe* the data; none of them fills or alters it.

Typical usage
-------------

>>> from utils.data_quality import coverage_report
>>> report = coverage_report(matrix.prices)
>>> report.sort_values("reported").head()

to find the markets least likely to obtain a seasonal profile.
"""

from __future__ import annotations

from typing import Dict, Tuple

import numpy as np
import pandas as pd


def calculate_missingness(prices: pd.DataFrame) -> pd.Series:
    """Fraction of absent months per market.

    Examples
    --------

    >>> import pandas as pd
    >>> df = pd.DataFrame({"2016-01": [1.0, None], "2016-02": [2.0, 3.0]}, index=["a", "b"])
    >>> calculate_missingness(df)
    a    0.0
    b    0.5
    dtype: float64
    """
    return prices.isna().mean(axis=1)


def _longest_run(flags: np.ndarray) -> int:
    best = run = 0
    for flag in flags:
        run = run + 1 if flag else 0
        best = max(best, run)
    return best


def coverage_report(prices: pd.DataFrame) -> pd.DataFrame:
    """Per-market coverage of the time axis.

    Parameters
    ----------
    prices : pd.DataFrame
        Market-by-month matrix, ``NaN`` where a market did not report.

    Returns
    -------
    pd.DataFrame
        Indexed by market with columns:

        - ``first_reported`` / ``last_reported`` – first and last
          reported month (``None`` for an empty row)
        - ``reported`` – number of reported months
        - ``span`` – months between first and last report, inclusive
        - ``longest_gap`` – longest run of absent months inside the span
        - ``missingness`` – fraction of the whole axis that is absent
    """
    rows: Dict[object, Dict[str, object]] = {}
    columns = list(prices.columns)
    for market, row in prices.iterrows():
        observed = np.flatnonzero(row.notna().to_numpy())
        if observed.size == 0:
            rows[market] = {
                "first_reported": None, "last_reported": None,
                "reported": 0, "span": 0, "longest_gap": 0,
            }
            continue
        first, last = observed[0], observed[-1]
        inner = row.iloc[first: last + 1].isna().to_numpy()
        rows[market] = {
            "first_reported": str(columns[first]),
            "last_reported": str(columns[last]),
            "reported": int(observed.size),
            "span": int(last - first + 1),
            "longest_gap": _longest_run(inner),
        }
    report = pd.DataFrame.from_dict(rows, orient="index")
    report.index.name = prices.index.name or "market"
    report["missingness"] = calculate_missingness(prices)
    return report


def compute_summary_statistics(values: pd.Series) -> Dict[str, float]:
    """Mean, median, standard deviation, minimum and maximum of a series.

    Absent values are ignored; an empty series yields an empty dict.
    """
    series = values.dropna()
    if series.empty:
        return {}
    return {
        "mean": float(series.mean()),
        "median": float(series.median()),
        "std": float(series.std(ddof=0)),
        "min": float(series.min()),
        "max": float(series.max()),
    }


def axis_span(prices: pd.DataFrame) -> Tuple[str, str]:
    """First and last month of the time axis as strings."""
    if prices.shape[1] == 0:
        return ("", "")
    return (str(prices.columns[0]), str(prices.columns[-1]))
