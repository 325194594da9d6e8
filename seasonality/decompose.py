"""
seasonality.decompose
---------------------

Per-market seasonal decomposition and the national seasonal profile.

For each market the monthly price series is trimmed to its reported
span, internal gaps are filled (:func:`seasonality.impute.fill_gaps`)
and the filled series is split into trend, seasonal and residual parts
with a classical moving-average decomposition of period 12.  Because the
seasonal part of a classical decomposition is strictly periodic, one
cycle of 12 coefficients summarises it; we key those by calendar month.

A decomposition of period 12 needs at least two full cycles, so a market
with fewer than 24 reported months yields :class:`InsufficientData`.
That is a per-market outcome, not a pipeline failure:
:func:`decompose_markets` records the market as excluded and carries on.

Example
-------
::

    from seasonality import decompose_markets
    result = decompose_markets(matrix.prices, model="additive")
    result.profiles      # market x month (1..12)
    result.national      # mean profile across markets
    result.excluded      # markets without a profile
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from statsmodels.tsa.seasonal import seasonal_decompose

from utils.errors import InsufficientData
from .impute import MIN_PERIODS, SEASON_PERIOD, fill_gaps

logger = logging.getLogger(__name__)

MONTHS = list(range(1, 13))
STATUS_OK = "ok"
STATUS_INSUFFICIENT = "insufficient_data"


@dataclass(frozen=True, eq=False)
class SeasonalResult:
    """Outcome of decomposing every market of a price matrix."""

    profiles: pd.DataFrame
    status: pd.Series
    national: pd.Series
    model: str

    @property
    def excluded(self) -> List[str]:
        return self.status.index[self.status != STATUS_OK].tolist()


def _monthly_index(series: pd.Series) -> pd.Series:
    index = series.index
    if isinstance(index, pd.DatetimeIndex):
        series = series.set_axis(index.to_period("M"))
    elif isinstance(index, pd.PeriodIndex):
        if index.freqstr not in {"M", "ME"}:
            series = series.set_axis(index.asfreq("M"))
    else:
        raise TypeError("series.index must be a monthly PeriodIndex or DatetimeIndex")
    if not (series.index.is_monotonic_increasing and series.index.is_unique):
        raise ValueError("series.index must be sorted with one entry per month")
    return series


def _calendar_months(index: pd.PeriodIndex) -> np.ndarray:
    return np.asarray(index.month)


def trim_to_reported(series: pd.Series) -> pd.Series:
    """Drop leading and trailing absent months."""
    observed = np.flatnonzero(series.notna().to_numpy())
    if observed.size == 0:
        return series.iloc[0:0]
    return series.iloc[observed[0]: observed[-1] + 1]


def complete_months(series: pd.Series) -> pd.Series:
    """Reindex a trimmed series onto every calendar month of its span.

    Months missing from a sparse axis become absent entries, so that
    position ``i`` is always ``i`` months after the first report.
    """
    if series.empty:
        return series
    full = pd.period_range(series.index[0], series.index[-1], freq="M", name=series.index.name)
    if len(full) == len(series):
        return series
    return series.reindex(full)


def decompose_series(
    series: pd.Series,
    *,
    model: str = "additive",
    market: Optional[str] = None,
) -> pd.Series:
    """Return the 12 seasonal coefficients of one market's price series.

    Parameters
    ----------
    series : pandas.Series
        Monthly prices over the shared time axis, ``NaN`` where the
        market did not report.  The index must be a monthly
        ``PeriodIndex`` (or ``DatetimeIndex``) so that positions map to
        calendar months.  A sparse axis is expanded to every month of the
        reported span, the skipped months becoming gaps.
    model : {"additive", "multiplicative"}, default "additive"
        Decomposition model.  Additive coefficients sum to zero over a
        year; multiplicative coefficients average to one.
    market : str, optional
        Market identifier, used in messages only.

    Returns
    -------
    pandas.Series
        Seasonal coefficients indexed by calendar month 1..12.

    Raises
    ------
    InsufficientData
        If fewer than 24 months are reported between the first and the
        last report, or the multiplicative model meets non-positive
        prices.
    """
    if model not in {"additive", "multiplicative"}:
        raise ValueError(f"Invalid model '{model}'. Expected 'additive' or 'multiplicative'.")
    name = market if market is not None else series.name

    trimmed = complete_months(trim_to_reported(_monthly_index(series)))
    n_reported = int(trimmed.notna().sum())
    if n_reported < MIN_PERIODS:
        raise InsufficientData(name, n_reported, MIN_PERIODS)

    filled = fill_gaps(trimmed, market=name)
    if model == "multiplicative" and (filled <= 0).any():
        raise InsufficientData(
            name, n_reported, MIN_PERIODS,
            reason="multiplicative decomposition needs strictly positive prices",
        )

    result = seasonal_decompose(filled.to_numpy(), model=model, period=SEASON_PERIOD)
    seasonal = pd.Series(result.seasonal, index=_calendar_months(filled.index))
    profile = seasonal.groupby(level=0).first().reindex(MONTHS)
    profile.index.name = "month"
    profile.name = name
    return profile


def _decompose_one(market: str, series: pd.Series, model: str) -> Tuple[str, Optional[pd.Series], str]:
    try:
        return market, decompose_series(series, model=model, market=market), STATUS_OK
    except InsufficientData as exc:
        logger.info("Excluding %s from seasonal aggregation: %s", market, exc)
        return market, None, STATUS_INSUFFICIENT


def national_profile(profiles: pd.DataFrame) -> pd.Series:
    """Mean seasonal coefficient per calendar month across markets."""
    national = profiles.reindex(columns=MONTHS).mean(axis=0, skipna=True)
    national.index.name = "month"
    national.name = "national"
    return national


def decompose_markets(
    prices: pd.DataFrame,
    *,
    model: str = "additive",
    max_workers: int = 1,
) -> SeasonalResult:
    """Decompose every market of a price matrix.

    Markets are independent, so with ``max_workers > 1`` they are
    decomposed in a process pool.  A market raising
    :class:`InsufficientData` only loses its own profile; any other
    exception aborts the call.

    Parameters
    ----------
    prices : pandas.DataFrame
        Market-by-month matrix (see
        :class:`ingestion.transform.reshape.PriceMatrix`).
    model : {"additive", "multiplicative"}, default "additive"
    max_workers : int, default 1
        Number of worker processes.  ``1`` runs in the calling process.

    Returns
    -------
    SeasonalResult
    """
    if max_workers < 1:
        raise ValueError("max_workers must be >= 1")

    outcomes: Dict[str, Tuple[Optional[pd.Series], str]] = {}
    if max_workers == 1:
        for market, row in prices.iterrows():
            _, profile, status = _decompose_one(market, row, model)
            outcomes[market] = (profile, status)
    else:
        with ProcessPoolExecutor(max_workers=max_workers) as ex:
            futures = {
                ex.submit(_decompose_one, market, row, model): market
                for market, row in prices.iterrows()
            }
            for f in as_completed(futures):
                market, profile, status = f.result()
                outcomes[market] = (profile, status)

    status = pd.Series({m: outcomes[m][1] for m in prices.index}, name="status", dtype=object)
    status.index.name = "market"
    defined = [outcomes[m][0] for m in prices.index if outcomes[m][0] is not None]
    if defined:
        profiles = pd.DataFrame(defined)
    else:
        profiles = pd.DataFrame(columns=MONTHS, dtype=float)
    profiles.index.name = "market"
    profiles.columns.name = "month"

    logger.info(
        "Seasonal profiles: %d defined, %d excluded (model=%s)",
        len(profiles), int((status != STATUS_OK).sum()), model,
    )
    return SeasonalResult(
        profiles=profiles,
        status=status,
        national=national_profile(profiles),
        model=model,
    )


__all__ = [
    "MIN_PERIODS",
    "SeasonalResult",
    "trim_to_reported",
    "complete_months",
    "decompose_series",
    "decompose_markets",
    "national_profile",
]
