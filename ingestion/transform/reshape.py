"""Functions to pivot long price reports into a fixed-shape market matrix.

Price reports arrive as a long table with one row per
(market, year, month).  Most markets skip months, some skip years.
This module lays those reports out on the shared monthly time axis
built by :mod:`ingestion.transform.time_index`:

* **prices** – one row per market, one column per month on the axis.
  A month the market did not report is ``NaN`` (absent), never zero.
* **locations** – one row per market with its single
  ``longitude``/``latitude`` pair (and ``region`` when supplied).

The matrix is filled by integer position (row code, column code)
rather than by label lookup, so its shape is fixed up front by the
market list and the time axis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from utils.errors import DuplicateObservation, InconsistentLocation
from .time_index import add_time_keys, build_time_axis, key_to_period, period_to_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PriceMatrix:
    """Market-by-month price matrix and the location of each market."""

    prices: pd.DataFrame
    locations: pd.DataFrame

    @property
    def axis(self) -> pd.PeriodIndex:
        return self.prices.columns

    @property
    def markets(self) -> pd.Index:
        return self.prices.index

    def series(self, market: str) -> pd.Series:
        """Return one market's prices over the full time axis."""
        return self.prices.loc[market].copy()

    def fill_rate(self) -> float:
        if self.prices.size == 0:
            return 0.0
        return float(self.prices.notna().to_numpy().mean())


def _market_locations(obs: pd.DataFrame, markets: pd.Index) -> pd.DataFrame:
    """One location row per market; conflicting coordinates are an error."""
    cols = ["longitude", "latitude"]
    coords = obs[["market"] + cols].dropna(subset=cols).drop_duplicates()
    conflicts = coords["market"][coords["market"].duplicated()].unique()
    if len(conflicts):
        raise InconsistentLocation(conflicts)
    locations = coords.set_index("market").reindex(markets)
    if "region" in obs.columns:
        region = obs.dropna(subset=["region"]).drop_duplicates("market").set_index("market")["region"]
        locations["region"] = region.reindex(markets)
    else:
        locations["region"] = np.nan
    locations.index.name = "market"
    return locations[["longitude", "latitude", "region"]]


def reshape_observations(
    observations: pd.DataFrame,
    axis: Optional[pd.PeriodIndex] = None,
) -> PriceMatrix:
    """Pivot long observations into a :class:`PriceMatrix`.

    Parameters
    ----------
    observations : pandas.DataFrame
        Typed observations with columns ``market``, ``longitude``,
        ``latitude``, ``year``, ``month`` and ``price`` (see
        :data:`ingestion.quality.contracts.ObservationSchema`).  Rows
        whose price is absent are kept as explicit absences.
    axis : pandas.PeriodIndex, optional
        Monthly time axis to lay the matrix out on.  Built from the
        observations (contiguous span) when omitted.

    Returns
    -------
    PriceMatrix

    Raises
    ------
    DuplicateObservation
        If a (market, month) pair is reported more than once.
    InconsistentLocation
        If one market is reported at two different coordinate pairs.
    ValueError
        If an observation falls outside an explicitly supplied axis.
    """
    obs = add_time_keys(observations)
    dupes = obs[obs.duplicated(subset=["market", "time_key"], keep=False)]
    if not dupes.empty:
        pairs = dupes[["market", "time_key"]].drop_duplicates()
        raise DuplicateObservation(
            (m, str(key_to_period(k)))
            for m, k in pairs.itertuples(index=False)
        )

    if axis is None:
        axis = build_time_axis(obs["time_key"])
    axis_keys = np.array([period_to_key(p) for p in axis], dtype=int)
    col_codes = pd.Index(axis_keys).get_indexer(obs["time_key"])
    if (col_codes < 0).any():
        outside = obs.loc[col_codes < 0, "time_key"].unique()
        raise ValueError(f"{len(outside)} observation month(s) fall outside the supplied time axis.")

    row_codes, markets = pd.factorize(obs["market"], sort=True)
    markets = pd.Index(markets, name="market")

    arena = np.full((len(markets), len(axis)), np.nan, dtype=float)
    arena[row_codes, col_codes] = obs["price"].to_numpy(dtype=float)

    prices = pd.DataFrame(arena, index=markets, columns=axis)
    locations = _market_locations(obs, markets)
    matrix = PriceMatrix(prices=prices, locations=locations)
    logger.info(
        "Reshaped %d observations into %d markets x %d months (fill rate %.1f%%)",
        len(obs), len(markets), len(axis), 100.0 * matrix.fill_rate(),
    )
    return matrix


def to_long(matrix: PriceMatrix) -> pd.DataFrame:
    """Unpivot a :class:`PriceMatrix` back to one row per reported price.

    Absent cells are dropped, so the result holds exactly the
    non-absent observations the matrix was built from.
    """
    long = (
        matrix.prices.reset_index()
        .melt(id_vars="market", var_name="period", value_name="price")
        .dropna(subset=["price"])
    )
    long["year"] = long["period"].map(lambda p: p.year).astype(int)
    long["month"] = long["period"].map(lambda p: p.strftime("%B").lower())
    long = long.merge(matrix.locations.reset_index(), on="market", how="left")
    return long[["market", "region", "longitude", "latitude", "year", "month", "price"]]
