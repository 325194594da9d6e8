"""
seasonality
===========

Seasonal analysis of monthly market price series.

Modules
-------

impute
    State-space (Kalman smoother) filling of internal gaps in a
    market's reported span.  The only imputation step in the pipeline.
decompose
    Classical period-12 decomposition per market, the parallel
    per-market map with isolated failures, and the national seasonal
    profile.
"""

from .impute import fill_gaps
from .decompose import (
    MIN_PERIODS,
    SeasonalResult,
    decompose_markets,
    decompose_series,
    national_profile,
)

__all__ = [
    "fill_gaps",
    "MIN_PERIODS",
    "SeasonalResult",
    "decompose_markets",
    "decompose_series",
    "national_profile",
]
