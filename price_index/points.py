"""
price_index.points
------------------

Assemble the per-market point samples fed to the spatial interpolator.

A point sample joins a market's coordinates with its relative price
index.  Markets without coordinates or without a defined index cannot
be placed on the map and are dropped here, with a warning listing
them.  When ``require_seasonal`` is set, only markets that also
obtained a seasonal profile are kept.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import pandas as pd

from ingestion.quality.contracts import PointSampleSchema
from spatial.covariates import CovariateRaster, sample_covariates

logger = logging.getLogger(__name__)


def build_point_samples(
    locations: pd.DataFrame,
    index: pd.Series,
    *,
    seasonal_status: Optional[pd.Series] = None,
    require_seasonal: bool = False,
    covariates: Optional[Iterable[CovariateRaster]] = None,
) -> pd.DataFrame:
    """Join market locations with the relative price index.

    Parameters
    ----------
    locations : pandas.DataFrame
        Indexed by market with ``longitude`` and ``latitude`` columns
        (``PriceMatrix.locations``).
    index : pandas.Series
        Relative price index by market.
    seasonal_status : pandas.Series, optional
        Decomposition status by market (``SeasonalResult.status``).
    require_seasonal : bool, default False
        Keep only markets whose status is ``"ok"``.
    covariates : iterable of CovariateRaster, optional
        Layers sampled at each market and appended as columns.

    Returns
    -------
    pandas.DataFrame
        Columns ``market, longitude, latitude, relative_index`` plus
        one column per covariate, validated against
        :data:`ingestion.quality.contracts.PointSampleSchema`.
    """
    if require_seasonal and seasonal_status is None:
        raise ValueError("require_seasonal=True needs seasonal_status")

    df = locations[["longitude", "latitude"]].join(index.rename("relative_index"), how="inner")
    df.index.name = "market"
    df = df.reset_index()

    if require_seasonal:
        ok = df["market"].map(seasonal_status).eq("ok")
        if not ok.all():
            logger.info("Dropping %d market(s) without a seasonal profile", int((~ok).sum()))
        df = df[ok]

    absent = df[["longitude", "latitude", "relative_index"]].isna().any(axis=1)
    if absent.any():
        logger.warning(
            "Dropping %d market(s) with absent coordinates or index: %s",
            int(absent.sum()), df.loc[absent, "market"].tolist(),
        )
        df = df[~absent]

    df = df.reset_index(drop=True)
    covariates = list(covariates or [])
    if covariates:
        sampled = sample_covariates(covariates, df["longitude"], df["latitude"])
        df = pd.concat([df, sampled], axis=1)

    return PointSampleSchema.validate(df)


__all__ = ["build_point_samples"]
