"""
interface.pipeline
------------------

End-to-end orchestration of the price surface pipeline.

Steps, in dependency order:

1. reshape typed observations into a market-by-month matrix
2. decompose every market's series (national seasonal profile)
3. compute the relative price index against the anchor market
4. assemble point samples
5. build the boundary-masked grid
6. interpolate with each configured estimator

Each step returns a new value; nothing produced by one step is
modified by a later one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import pandas as pd
from shapely.geometry.base import BaseGeometry

from ingestion.transform.reshape import PriceMatrix, reshape_observations
from price_index import build_point_samples, relative_price_index
from seasonality import MIN_PERIODS, SeasonalResult, decompose_markets
from spatial import CovariateRaster, Grid, PriceSurface, build_grid, interpolate_all
from utils.config import PipelineConfig
from utils.data_quality import coverage_report
from utils.errors import AnchorNotFound

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PipelineResult:
    matrix: PriceMatrix
    coverage: pd.DataFrame
    seasonal: SeasonalResult
    relative_index: pd.Series
    points: pd.DataFrame
    grid: Grid
    surfaces: Dict[str, PriceSurface]


def check_anchor(matrix: PriceMatrix, config: PipelineConfig) -> None:
    """Fail fast when the configured anchor is not a market of the matrix."""
    if config.anchor_market not in matrix.markets:
        raise AnchorNotFound(config.anchor_market)


def run_seasonal(matrix: PriceMatrix, config: PipelineConfig) -> SeasonalResult:
    return decompose_markets(
        matrix.prices,
        model=config.decomposition_model,
        max_workers=config.max_workers,
    )


def run_index(
    matrix: PriceMatrix,
    config: PipelineConfig,
    seasonal: Optional[SeasonalResult] = None,
    covariates: Optional[Iterable[CovariateRaster]] = None,
) -> pd.DataFrame:
    """Relative price index joined to market locations as point samples."""
    index = relative_price_index(matrix.prices, config.anchor_market, mode=config.relative_mode)
    return build_point_samples(
        matrix.locations,
        index,
        seasonal_status=seasonal.status if seasonal is not None else None,
        require_seasonal=config.require_seasonal,
        covariates=covariates,
    )


def run_pipeline(
    observations: pd.DataFrame,
    boundary: BaseGeometry,
    config: PipelineConfig,
    *,
    covariates: Optional[Iterable[CovariateRaster]] = None,
) -> PipelineResult:
    """Run every step from typed observations to price surfaces.

    Parameters
    ----------
    observations : pandas.DataFrame
        Typed observations (see :func:`ingestion.transform.coerce.coerce_raw_prices`).
    boundary : shapely geometry
        Country boundary used for the grid extent and mask.
    config : PipelineConfig
    covariates : iterable of CovariateRaster, optional
        Extra random forest features.

    Returns
    -------
    PipelineResult
    """
    covariates = list(covariates or [])
    matrix = reshape_observations(observations)
    check_anchor(matrix, config)
    coverage = coverage_report(matrix.prices)
    short = coverage.index[coverage["reported"] < MIN_PERIODS].tolist()
    if short:
        logger.info("%d market(s) report fewer than %d months: %s", len(short), MIN_PERIODS, short)

    seasonal = run_seasonal(matrix, config)
    index = relative_price_index(matrix.prices, config.anchor_market, mode=config.relative_mode)
    points = build_point_samples(
        matrix.locations,
        index,
        seasonal_status=seasonal.status,
        require_seasonal=config.require_seasonal,
    )
    logger.info("%d point sample(s) available for interpolation", len(points))

    grid = build_grid(boundary, config.resolution)
    surfaces = interpolate_all(points, grid, config.estimators, covariates=covariates)

    return PipelineResult(
        matrix=matrix,
        coverage=coverage,
        seasonal=seasonal,
        relative_index=index,
        points=points,
        grid=grid,
        surfaces=surfaces,
    )


__all__ = ["PipelineResult", "check_anchor", "run_seasonal", "run_index", "run_pipeline"]
