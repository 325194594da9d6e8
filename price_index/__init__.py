"""
Relative price index of markets against an anchor market.

This package consumes the market-by-month price matrix produced by
:mod:`ingestion.transform.reshape` and exposes functions to compute:

- the elementwise relative price of each market to the anchor
- the time-averaged relative price index per market
- the point sample table fed to the spatial interpolator
"""

from .relative import relative_price_matrix, relative_price_index
from .points import build_point_samples
