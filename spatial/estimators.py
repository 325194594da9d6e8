"""
spatial.estimators
------------------

Estimators mapping (longitude, latitude) to a relative price index.

Three estimators are provided.  They differ on purpose and the
pipeline does not rank them:

* :class:`ThinPlateSplineEstimator` – smooth surface of minimum bending
  energy; passes exactly through the samples when ``smoothing=0``.
* :class:`IDWEstimator` – inverse-distance weighted mean with weights
  ``1 / d**power``; reproduces a sample exactly at its own location.
* :class:`RandomForestEstimator` – regression forest on the coordinates
  and any covariate columns; smooths rather than interpolates.

All three share the same small interface: ``fit(xy, values,
features=None)`` once, then ``predict(xy, features=None)`` as often as
needed.  ``xy`` is an ``(n, 2)`` array of (lon, lat).
"""

from __future__ import annotations

from typing import Optional

import numpy as np
from scipy.interpolate import RBFInterpolator
from scipy.spatial import cKDTree
from sklearn.ensemble import RandomForestRegressor


class _Estimator:
    name = "estimator"

    def __init__(self) -> None:
        self._fitted = False

    def _check_fitted(self) -> None:
        if not self._fitted:
            raise RuntimeError(f"{self.name} estimator is not fitted")

    def _mark_fitted(self) -> None:
        if self._fitted:
            raise RuntimeError(f"{self.name} estimator is already fitted")
        self._fitted = True

    @staticmethod
    def _as_xy(xy) -> np.ndarray:
        arr = np.asarray(xy, dtype=float)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError("xy must have shape (n, 2)")
        return arr


class ThinPlateSplineEstimator(_Estimator):
    """Thin-plate spline via :class:`scipy.interpolate.RBFInterpolator`."""

    name = "tps"

    def __init__(self, smoothing: float = 0.0) -> None:
        super().__init__()
        self.smoothing = float(smoothing)
        self._rbf: Optional[RBFInterpolator] = None

    def fit(self, xy, values, features=None) -> "ThinPlateSplineEstimator":
        self._rbf = RBFInterpolator(
            self._as_xy(xy),
            np.asarray(values, dtype=float),
            kernel="thin_plate_spline",
            smoothing=self.smoothing,
        )
        self._mark_fitted()
        return self

    def predict(self, xy, features=None) -> np.ndarray:
        self._check_fitted()
        return np.asarray(self._rbf(self._as_xy(xy)), dtype=float)


class IDWEstimator(_Estimator):
    """Inverse-distance weighting.

    The weight of sample ``i`` at distance ``d_i`` from the query point
    is ``1 / d_i**power``.  A query point coinciding with a sample takes
    that sample's value.  With ``neighbors`` set, only the ``k`` nearest
    samples contribute.
    """

    name = "idw"

    def __init__(self, power: float = 2.0, neighbors: Optional[int] = None) -> None:
        super().__init__()
        self.power = float(power)
        self.neighbors = neighbors
        self._tree: Optional[cKDTree] = None
        self._values: Optional[np.ndarray] = None

    def fit(self, xy, values, features=None) -> "IDWEstimator":
        pts = self._as_xy(xy)
        self._tree = cKDTree(pts)
        self._values = np.asarray(values, dtype=float)
        self._mark_fitted()
        return self

    def predict(self, xy, features=None) -> np.ndarray:
        self._check_fitted()
        query = self._as_xy(xy)
        n = len(self._values)
        k = n if self.neighbors is None else min(int(self.neighbors), n)
        dist, idx = self._tree.query(query, k=k)
        # cKDTree drops the neighbour axis when k == 1
        dist = np.asarray(dist, dtype=float).reshape(len(query), k)
        idx = np.asarray(idx).reshape(len(query), k)

        vals = self._values[idx]
        exact = dist == 0.0
        with np.errstate(divide="ignore", invalid="ignore"):
            weights = 1.0 / np.power(dist, self.power)
            weights[exact] = 0.0
            out = np.sum(weights * vals, axis=1) / np.sum(weights, axis=1)

        hit = exact.any(axis=1)
        if hit.any():
            first = np.argmax(exact[hit], axis=1)
            out[hit] = vals[hit][np.arange(hit.sum()), first]
        return out


class RandomForestEstimator(_Estimator):
    """Random forest regression on coordinates plus optional covariates."""

    name = "rf"

    def __init__(self, n_estimators: int = 100, random_state: Optional[int] = 0, n_jobs: Optional[int] = None) -> None:
        super().__init__()
        self.model = RandomForestRegressor(
            n_estimators=int(n_estimators), random_state=random_state, n_jobs=n_jobs
        )

    @staticmethod
    def _design(xy: np.ndarray, features) -> np.ndarray:
        if features is None:
            return xy
        extra = np.asarray(features, dtype=float)
        if extra.ndim == 1:
            extra = extra.reshape(-1, 1)
        if len(extra) != len(xy):
            raise ValueError("features must have one row per coordinate pair")
        return np.column_stack([xy, extra])

    def fit(self, xy, values, features=None) -> "RandomForestEstimator":
        X = self._design(self._as_xy(xy), features)
        self.model.fit(X, np.asarray(values, dtype=float))
        self._mark_fitted()
        return self

    def predict(self, xy, features=None) -> np.ndarray:
        self._check_fitted()
        X = self._design(self._as_xy(xy), features)
        return np.asarray(self.model.predict(X), dtype=float)


__all__ = ["ThinPlateSplineEstimator", "IDWEstimator", "RandomForestEstimator"]
