"""
spatial
=======

Spatial layer: output grid, estimators and interpolation.

Modules
-------

grid
    Boundary-masked output grid (:func:`build_grid`) and the
    :class:`PriceSurface` value holding one estimator's result.
estimators
    Thin-plate spline, inverse-distance weighting and random forest
    estimators sharing a ``fit``/``predict`` interface.
interpolate
    :class:`InterpolationConfig` and the fit-then-evaluate-on-grid
    entry points.
covariates
    Optional covariate rasters sampled as extra random forest features.
"""

from .grid import Grid, PriceSurface, build_grid, load_boundary
from .covariates import CovariateRaster
from .interpolate import InterpolationConfig, fit_estimator, interpolate, interpolate_all

__all__ = [
    "Grid",
    "PriceSurface",
    "build_grid",
    "load_boundary",
    "CovariateRaster",
    "InterpolationConfig",
    "fit_estimator",
    "interpolate",
    "interpolate_all",
]
