"""
spatial.covariates
------------------

Covariate rasters (travel time to the nearest city, climate, crop area
or yield) that can be sampled at market locations and at grid cell
centres and appended as extra regression features for the random
forest estimator.

Rasters are obtained by an external collaborator; here they are plain
north-up arrays with an origin and a cell size.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np
import pandas as pd


@dataclass(frozen=True, eq=False)
class CovariateRaster:
    """A north-up raster layer.

    Attributes
    ----------
    name : str
        Feature name used as column name once sampled.
    values : numpy.ndarray
        2-D array of shape ``(ny, nx)``; row 0 is the northern edge.
        ``NaN`` marks nodata.
    xmin, ymax : float
        Longitude of the western edge and latitude of the northern edge.
    resolution : float
        Cell size in degrees.
    """

    name: str
    values: np.ndarray
    xmin: float
    ymax: float
    resolution: float

    def __post_init__(self) -> None:
        if np.ndim(self.values) != 2:
            raise ValueError(f"Covariate '{self.name}' must be a 2-D array")
        if self.resolution <= 0:
            raise ValueError(f"Covariate '{self.name}' resolution must be positive")

    def sample(self, lon, lat) -> np.ndarray:
        """Nearest-cell values at the given coordinates; ``NaN`` off-raster."""
        lon = np.atleast_1d(np.asarray(lon, dtype=float))
        lat = np.atleast_1d(np.asarray(lat, dtype=float))
        ny, nx = self.values.shape
        col = np.floor((lon - self.xmin) / self.resolution).astype(int)
        row = np.floor((self.ymax - lat) / self.resolution).astype(int)
        inside = (col >= 0) & (col < nx) & (row >= 0) & (row < ny)
        out = np.full(lon.shape, np.nan, dtype=float)
        out[inside] = np.asarray(self.values, dtype=float)[row[inside], col[inside]]
        return out


def sample_covariates(
    covariates: Iterable[CovariateRaster],
    lon,
    lat,
) -> pd.DataFrame:
    """Sample each covariate at the given coordinates, one column per layer."""
    columns = {}
    for cov in covariates:
        if cov.name in columns:
            raise ValueError(f"Duplicate covariate name '{cov.name}'")
        columns[cov.name] = cov.sample(lon, lat)
    return pd.DataFrame(columns)


def covariate_names(covariates: Iterable[CovariateRaster]) -> List[str]:
    return [c.name for c in covariates]


__all__ = ["CovariateRaster", "sample_covariates", "covariate_names"]
