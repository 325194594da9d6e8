"""
seasonality.impute
------------------

Gap filling for monthly market price series.

Market series have internal gaps of very different lengths: a missed
month here, half a year there.  Linear interpolation across a long gap
flattens the seasonal swing it spans and biases any seasonal estimate
computed afterwards.  Instead we fit a structural time-series model
(local linear trend plus a stochastic 12-month seasonal) by Kalman
filtering, which handles missing observations natively, and replace
each gap with the Kalman-smoothed signal.  Observed values are never
altered.

This is the only place in the pipeline where absent values are
replaced by estimates.
"""

from __future__ import annotations

import logging
import warnings
from typing import Optional

import numpy as np
import pandas as pd
from statsmodels.tools.sm_exceptions import ConvergenceWarning
from statsmodels.tsa.statespace.structural import UnobservedComponents

from utils.errors import InsufficientData

logger = logging.getLogger(__name__)

SEASON_PERIOD = 12
# Two full seasonal cycles; shared with decompose.py as the reporting threshold.
MIN_PERIODS = 2 * SEASON_PERIOD

# Trend specifications tried in order; the simpler one is used when the
# likelihood of the richer one cannot be evaluated.
_TREND_SPECS = ("local linear trend", "local level")


def _smoothed_signal(values: np.ndarray, level: str) -> np.ndarray:
    model = UnobservedComponents(values, level=level, seasonal=SEASON_PERIOD)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", category=ConvergenceWarning)
        warnings.filterwarnings("ignore", message="Optimization failed to converge")
        res = model.fit(disp=False)
    pred = res.get_prediction(information_set="smoothed")
    return np.asarray(pred.predicted_mean, dtype=float)


def fill_gaps(series: pd.Series, *, market: Optional[str] = None) -> pd.Series:
    """Fill internal gaps of a trimmed monthly series.

    Parameters
    ----------
    series : pandas.Series
        Monthly prices whose first and last entries are observed.
        Internal entries may be ``NaN``.
    market : str, optional
        Market identifier, used in log and error messages only.

    Returns
    -------
    pandas.Series
        A new series, same index, with no ``NaN``.  Observed values
        are returned unchanged.

    Raises
    ------
    InsufficientData
        If the structural model cannot be fitted to the series.
    """
    gaps = series.isna()
    if not gaps.any():
        return series.astype(float).copy()

    values = series.to_numpy(dtype=float)
    last_exc: Optional[Exception] = None
    for level in _TREND_SPECS:
        try:
            signal = _smoothed_signal(values, level)
        except (np.linalg.LinAlgError, ValueError) as exc:
            logger.debug("Structural fit (%s) failed for %s: %s", level, market, exc)
            last_exc = exc
            continue
        if np.isfinite(signal[gaps.to_numpy()]).all():
            filled = series.astype(float).copy()
            filled[gaps] = signal[gaps.to_numpy()]
            logger.debug("Filled %d gap month(s) for %s with %s model", int(gaps.sum()), market, level)
            return filled
        last_exc = ValueError("non-finite smoothed signal")

    raise InsufficientData(
        market,
        int(series.notna().sum()),
        MIN_PERIODS,
        reason=f"state-space gap filling failed ({last_exc})",
    )


__all__ = ["fill_gaps", "SEASON_PERIOD", "MIN_PERIODS"]
