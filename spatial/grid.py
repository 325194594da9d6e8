"""
spatial.grid
------------

Output raster grid and interpolated price surfaces.

:func:`build_grid` derives a regular longitude/latitude grid from a
country boundary polygon.  The extent is the polygon's bounding box
rounded outward to whole multiples of the resolution; a cell belongs
to the country when its centre falls inside the polygon.  Cells are
stored north to south, west to east, as in a north-up raster.

Grids and surfaces are immutable values: every estimator receives the
same ``Grid`` and returns its own ``PriceSurface``.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

import numpy as np
import pandas as pd
import shapely
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Grid:
    """Regular grid of cell centres with a country mask.

    ``mask[i, j]`` is ``True`` when the cell at ``(lats[i], lons[j])``
    lies inside the boundary.
    """

    resolution: float
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    lons: np.ndarray = field(repr=False)
    lats: np.ndarray = field(repr=False)
    mask: np.ndarray = field(repr=False)

    @property
    def shape(self) -> Tuple[int, int]:
        return (len(self.lats), len(self.lons))

    @property
    def n_inside(self) -> int:
        return int(self.mask.sum())

    def cell_centres(self) -> Tuple[np.ndarray, np.ndarray]:
        """Longitude and latitude arrays of shape ``(ny, nx)``."""
        return np.meshgrid(self.lons, self.lats)

    def inside_points(self) -> np.ndarray:
        """``(n_inside, 2)`` array of (lon, lat) for in-country cells."""
        lon, lat = self.cell_centres()
        return np.column_stack([lon[self.mask], lat[self.mask]])


@dataclass(frozen=True, eq=False)
class PriceSurface:
    """Interpolated relative price on a :class:`Grid`; ``NaN`` outside the mask."""

    grid: Grid
    values: np.ndarray = field(repr=False)
    method: str

    def __post_init__(self) -> None:
        if self.values.shape != self.grid.shape:
            raise ValueError(
                f"Surface shape {self.values.shape} does not match grid shape {self.grid.shape}"
            )

    def to_frame(self, *, dropna: bool = True) -> pd.DataFrame:
        """Long table with one row per cell: ``longitude, latitude, value``."""
        lon, lat = self.grid.cell_centres()
        df = pd.DataFrame({
            "longitude": lon.ravel(),
            "latitude": lat.ravel(),
            "value": self.values.ravel(),
        })
        if dropna:
            df = df.dropna(subset=["value"]).reset_index(drop=True)
        df["method"] = self.method
        return df

    def metadata(self) -> Dict[str, Any]:
        g = self.grid
        return {
            "method": self.method,
            "resolution": g.resolution,
            "extent": [g.xmin, g.ymin, g.xmax, g.ymax],
            "shape": list(g.shape),
            "cells_inside": g.n_inside,
            "value_min": float(np.nanmin(self.values)) if np.isfinite(self.values).any() else None,
            "value_max": float(np.nanmax(self.values)) if np.isfinite(self.values).any() else None,
        }


def _round_out(lo: float, hi: float, resolution: float) -> Tuple[float, float]:
    # round() absorbs float noise, e.g. 3.0000000001 / 0.1 must not ceil to 31.
    lo_r = math.floor(round(lo / resolution, 9)) * resolution
    hi_r = math.ceil(round(hi / resolution, 9)) * resolution
    if hi_r <= lo_r:
        hi_r = lo_r + resolution
    return lo_r, hi_r


def build_grid(boundary: BaseGeometry, resolution: float) -> Grid:
    """Build the output grid for a boundary polygon.

    Parameters
    ----------
    boundary : shapely geometry
        Country (or region) polygon or multipolygon in lon/lat degrees.
    resolution : float
        Cell size in degrees.

    Returns
    -------
    Grid
    """
    if resolution <= 0:
        raise ValueError("resolution must be positive")
    if boundary is None or boundary.is_empty:
        raise ValueError("boundary geometry is empty")

    minx, miny, maxx, maxy = boundary.bounds
    xmin, xmax = _round_out(minx, maxx, resolution)
    ymin, ymax = _round_out(miny, maxy, resolution)
    nx = int(round((xmax - xmin) / resolution))
    ny = int(round((ymax - ymin) / resolution))

    lons = xmin + resolution * (np.arange(nx) + 0.5)
    lats = ymax - resolution * (np.arange(ny) + 0.5)
    lon, lat = np.meshgrid(lons, lats)
    shapely.prepare(boundary)
    mask = shapely.contains_xy(boundary, lon, lat)

    grid = Grid(
        resolution=float(resolution),
        xmin=float(xmin), ymin=float(ymin), xmax=float(xmax), ymax=float(ymax),
        lons=lons, lats=lats, mask=np.asarray(mask, dtype=bool),
    )
    logger.info(
        "Built %dx%d grid at %.4g deg, %d cell(s) inside boundary",
        ny, nx, resolution, grid.n_inside,
    )
    return grid


def load_boundary(path: str | Path) -> BaseGeometry:
    """Read a boundary from a GeoJSON file.

    Accepts a bare geometry, a Feature or a FeatureCollection; the
    geometries of a collection are merged into one.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Boundary file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    kind = data.get("type")
    if kind == "FeatureCollection":
        geoms = [shape(feat["geometry"]) for feat in data.get("features", []) if feat.get("geometry")]
    elif kind == "Feature":
        geoms = [shape(data["geometry"])]
    else:
        geoms = [shape(data)]
    if not geoms:
        raise ValueError(f"No geometry found in {path}")
    return geoms[0] if len(geoms) == 1 else unary_union(geoms)


__all__ = ["Grid", "PriceSurface", "build_grid", "load_boundary"]
