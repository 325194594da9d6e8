"""
spatial.interpolate
-------------------

Fit an estimator on point samples and evaluate it on a grid.

Callers supply the point sample table built by
:func:`price_index.points.build_point_samples`, a :class:`spatial.grid.Grid`
and an :class:`InterpolationConfig`.  The estimator is fitted once on
all samples and evaluated on every grid cell whose centre lies inside
the boundary; other cells are ``NaN``.  Nothing is extrapolated
outside the mask and nothing is written back to the inputs, so
several configurations can be run on the same samples and grid
independently.

Example
-------
::

    from spatial.interpolate import InterpolationConfig, interpolate
    surface = interpolate(points, grid, InterpolationConfig(method="idw", idw_power=2))
    surface.to_frame().head()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from utils.errors import UnderdeterminedFit
from .covariates import CovariateRaster, sample_covariates
from .estimators import IDWEstimator, RandomForestEstimator, ThinPlateSplineEstimator
from .grid import Grid, PriceSurface

logger = logging.getLogger(__name__)

_METHOD_ALIASES = {
    "tps": "tps",
    "thinplatespline": "tps",
    "thin_plate_spline": "tps",
    "spline": "tps",
    "idw": "idw",
    "inversedistanceweighting": "idw",
    "inverse_distance_weighting": "idw",
    "rf": "rf",
    "randomforest": "rf",
    "random_forest": "rf",
}


def normalise_method(method: str) -> str:
    key = str(method).strip().lower().replace("-", "_")
    if key not in _METHOD_ALIASES:
        raise ValueError(f"Unknown interpolation method '{method}'. Expected tps, idw or rf.")
    return _METHOD_ALIASES[key]


@dataclass(frozen=True)
class InterpolationConfig:
    """Estimator choice and its options.

    Attributes
    ----------
    method : str
        ``tps`` (thin-plate spline), ``idw`` (inverse-distance
        weighting) or ``rf`` (random forest).  Long names such as
        ``ThinPlateSpline`` are accepted.
    idw_power : float, default 2.0
        Distance exponent for IDW; must be >= 1.
    idw_neighbors : int, optional
        Restrict IDW to the k nearest samples.  All samples by default.
    forest_trees : int, default 100
        Number of trees for the random forest (scikit-learn default).
    smoothing : float, default 0.0
        Thin-plate spline smoothing; 0 interpolates exactly.
    random_state : int, optional
        Seed for the random forest.
    """

    method: str = "tps"
    idw_power: float = 2.0
    idw_neighbors: Optional[int] = None
    forest_trees: int = 100
    smoothing: float = 0.0
    random_state: Optional[int] = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", normalise_method(self.method))
        if not self.idw_power >= 1:
            raise ValueError("idw_power must be >= 1")
        if self.idw_neighbors is not None and int(self.idw_neighbors) < 1:
            raise ValueError("idw_neighbors must be >= 1")
        if int(self.forest_trees) < 1:
            raise ValueError("forest_trees must be >= 1")
        if not self.smoothing >= 0:
            raise ValueError("smoothing must be >= 0")

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "InterpolationConfig":
        known = set(cls.__dataclass_fields__)
        unknown = set(cfg) - known
        if unknown:
            raise ValueError(f"Unknown interpolation option(s): {sorted(unknown)}")
        return cls(**cfg)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _check_determined(xy: np.ndarray, method: str) -> None:
    n = len(xy)
    if method == "idw":
        if n < 1:
            raise UnderdeterminedFit(method, n, "at least one sample is required")
        return
    if n < 3:
        raise UnderdeterminedFit(method, n, "at least three samples are required")
    design = np.column_stack([xy, np.ones(n)])
    if np.linalg.matrix_rank(design) < 3:
        raise UnderdeterminedFit(method, n, "samples are collinear")


def merge_coincident(samples: pd.DataFrame, feature_cols: Sequence[str] = ()) -> pd.DataFrame:
    """Average samples sharing the same coordinates.

    Several markets may be reported at one town's coordinates.  An
    exact interpolator cannot pass through two values at one point, so
    such samples are replaced by a single sample holding the mean index
    (and mean features).
    """
    keys = ["longitude", "latitude"]
    if not samples.duplicated(subset=keys).any():
        return samples
    value_cols = ["relative_index", *feature_cols]
    merged = samples.groupby(keys, as_index=False, sort=False)[value_cols].mean()
    logger.warning(
        "Merged %d sample(s) sharing coordinates into %d location(s)",
        len(samples), len(merged),
    )
    return merged


def make_estimator(config: InterpolationConfig):
    if config.method == "tps":
        return ThinPlateSplineEstimator(smoothing=config.smoothing)
    if config.method == "idw":
        return IDWEstimator(power=config.idw_power, neighbors=config.idw_neighbors)
    return RandomForestEstimator(n_estimators=config.forest_trees, random_state=config.random_state)


def fit_estimator(
    samples: pd.DataFrame,
    config: InterpolationConfig,
    *,
    feature_cols: Sequence[str] = (),
):
    """Fit the configured estimator on point samples.

    Samples at identical coordinates are averaged first
    (:func:`merge_coincident`).

    Parameters
    ----------
    samples : pandas.DataFrame
        Columns ``longitude``, ``latitude``, ``relative_index`` and any
        ``feature_cols``.
    config : InterpolationConfig
    feature_cols : sequence of str
        Extra regression features (random forest only).

    Returns
    -------
    A fitted estimator exposing ``predict(xy, features=None)``.

    Raises
    ------
    UnderdeterminedFit
        Thin-plate spline and random forest need three non-collinear
        samples; IDW needs one.
    """
    for col in ["longitude", "latitude", "relative_index", *feature_cols]:
        if col not in samples.columns:
            raise ValueError(f"samples must contain '{col}' column.")
    if feature_cols and config.method != "rf":
        raise ValueError("Covariate features are only supported by the random forest estimator.")

    samples = merge_coincident(samples, feature_cols)
    xy = samples[["longitude", "latitude"]].to_numpy(dtype=float)
    values = samples["relative_index"].to_numpy(dtype=float)
    features = samples[list(feature_cols)].to_numpy(dtype=float) if feature_cols else None
    _check_determined(xy, config.method)

    estimator = make_estimator(config)
    estimator.fit(xy, values, features)
    logger.info("Fitted %s estimator on %d samples", config.method, len(xy))
    return estimator


def interpolate(
    samples: pd.DataFrame,
    grid: Grid,
    config: InterpolationConfig,
    *,
    covariates: Optional[Iterable[CovariateRaster]] = None,
) -> PriceSurface:
    """Fit on ``samples`` and evaluate on every in-boundary cell of ``grid``.

    Covariates (random forest only) are sampled at the sample locations
    and at each cell centre.  A cell where a covariate has no data is
    left undefined.
    """
    covariates = list(covariates or [])
    names: List[str] = [c.name for c in covariates]
    if covariates:
        sampled = sample_covariates(covariates, samples["longitude"], samples["latitude"])
        samples = pd.concat([samples.reset_index(drop=True).drop(columns=names, errors="ignore"), sampled], axis=1)
        complete = samples[names].notna().all(axis=1)
        if not complete.all():
            logger.warning("Dropping %d sample(s) with missing covariate values", int((~complete).sum()))
            samples = samples[complete]

    estimator = fit_estimator(samples, config, feature_cols=names)

    values = np.full(grid.shape, np.nan, dtype=float)
    pts = grid.inside_points()
    if len(pts):
        if covariates:
            cell_features = sample_covariates(covariates, pts[:, 0], pts[:, 1]).to_numpy(dtype=float)
            ok = np.isfinite(cell_features).all(axis=1)
            preds = np.full(len(pts), np.nan, dtype=float)
            if ok.any():
                preds[ok] = estimator.predict(pts[ok], cell_features[ok])
        else:
            preds = estimator.predict(pts)
        values[grid.mask] = preds

    surface = PriceSurface(grid=grid, values=values, method=config.method)
    logger.info("Interpolated %s surface over %d cell(s)", config.method, len(pts))
    return surface


def interpolate_all(
    samples: pd.DataFrame,
    grid: Grid,
    configs: Iterable[InterpolationConfig],
    *,
    covariates: Optional[Iterable[CovariateRaster]] = None,
) -> Dict[str, PriceSurface]:
    """Run several estimators on the same samples and grid.

    Covariates are passed to the random forest only.  Results are keyed
    by method; configuring the same method twice is an error.
    """
    covariates = list(covariates or [])
    surfaces: Dict[str, PriceSurface] = {}
    for cfg in configs:
        if cfg.method in surfaces:
            raise ValueError(f"Method '{cfg.method}' configured more than once")
        covs = covariates if cfg.method == "rf" else None
        surfaces[cfg.method] = interpolate(samples, grid, cfg, covariates=covs)
    return surfaces


__all__ = [
    "InterpolationConfig",
    "normalise_method",
    "merge_coincident",
    "make_estimator",
    "fit_estimator",
    "interpolate",
    "interpolate_all",
]
