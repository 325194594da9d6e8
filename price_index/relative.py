"""
price_index.relative
--------------------

Relative price index of each market against an anchor market.

Prices in every market move together with national supply and
demand.  Dividing each market's price by the anchor market's price in
the same month removes that shared movement and leaves the persistent
spatial premium or discount of the market.  Averaging the monthly
ratios gives one scalar per market, the quantity later interpolated
across the country.

Absence propagates: a month where either the market or the anchor did
not report contributes nothing, and a market that never reports in
the same month as the anchor has an undefined (``NaN``) index.

Example
-------
::

    from price_index.relative import relative_price_index
    index = relative_price_index(matrix.prices, anchor="Lilongwe")
    index["Lilongwe"]   # 1.0
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from utils.errors import AnchorNotFound

logger = logging.getLogger(__name__)

MODES = {"ratio", "difference"}


def relative_price_matrix(prices: pd.DataFrame, anchor: str, *, mode: str = "ratio") -> pd.DataFrame:
    """Elementwise price of each market relative to the anchor market.

    Parameters
    ----------
    prices : pandas.DataFrame
        Market-by-month price matrix, ``NaN`` for absent reports.
    anchor : str
        Identifier of the reference market; must be a row of ``prices``.
    mode : {"ratio", "difference"}, default "ratio"
        ``ratio`` computes ``market / anchor``; ``difference`` computes
        ``market - anchor``.

    Returns
    -------
    pandas.DataFrame
        Same shape as ``prices``.  A cell is ``NaN`` whenever either
        operand is absent.  In ratio mode an anchor price of zero also
        yields ``NaN`` since the ratio is undefined.

    Raises
    ------
    AnchorNotFound
        If ``anchor`` is not a market in ``prices``.
    """
    if mode not in MODES:
        raise ValueError(f"Invalid mode '{mode}'. Expected one of {sorted(MODES)}.")
    if anchor not in prices.index:
        raise AnchorNotFound(anchor)

    reference = prices.loc[anchor].astype(float)
    if mode == "ratio":
        zero = reference == 0
        if zero.any():
            logger.warning("Anchor %s reports a zero price in %d month(s); ratios undefined there", anchor, int(zero.sum()))
            reference = reference.mask(zero)
        return prices.astype(float).div(reference, axis=1)
    return prices.astype(float).sub(reference, axis=1)


def relative_price_index(prices: pd.DataFrame, anchor: str, *, mode: str = "ratio") -> pd.Series:
    """Time-averaged relative price of each market.

    Returns
    -------
    pandas.Series
        Indexed by market, named ``relative_index``.  Markets with no
        month in common with the anchor are ``NaN``.
    """
    rel = relative_price_matrix(prices, anchor, mode=mode)
    rel = rel.replace([np.inf, -np.inf], np.nan)
    overlap = rel.notna().sum(axis=1)
    index = rel.mean(axis=1, skipna=True).where(overlap > 0)
    index.name = "relative_index"
    index.index.name = "market"

    undefined = index.index[index.isna()].tolist()
    if undefined:
        logger.info("Relative index undefined for %d market(s) without anchor overlap: %s", len(undefined), undefined)
    return index


__all__ = ["relative_price_matrix", "relative_price_index"]
