"""Ingestion boundary: raw price table → typed observations.

Monthly market price exports encode missing values as a single
character (``"-"`` by default) in otherwise numeric columns, label the
price column ``maize_price`` and carry stray whitespace around text
fields.  :func:`coerce_raw_prices` turns such a table into the typed
observation table described by
:data:`ingestion.quality.contracts.ObservationSchema`.  After this
step the sentinel no longer exists; absence is ``NaN``.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd

from ingestion.quality.contracts import ObservationSchema, RawPriceSchema

logger = logging.getLogger(__name__)

_COLUMN_ALIASES: Dict[str, str] = {
    "maize_price": "price",
    "lon": "longitude",
    "long": "longitude",
    "lat": "latitude",
}
_NUMERIC = ["longitude", "latitude", "price"]
_TEXT = ["market", "region", "month"]


def coerce_raw_prices(
    raw: pd.DataFrame,
    *,
    missing_marker: str = "-",
    aliases: Optional[Dict[str, str]] = None,
) -> pd.DataFrame:
    """Coerce a raw price table into typed observations.

    Parameters
    ----------
    raw : pandas.DataFrame
        Table as read from disk, typically with every column as text.
        Expected columns (after aliasing): ``market``, ``region``
        (optional), ``longitude``, ``latitude``, ``year``, ``month``,
        ``price``.
    missing_marker : str, default "-"
        Text sentinel standing for a missing value.  Empty strings are
        treated the same way.
    aliases : dict, optional
        Extra column renames applied on top of the built-in ones
        (``maize_price`` → ``price`` etc.).

    Returns
    -------
    pandas.DataFrame
        Validated observations.  Numeric columns are ``float`` with
        ``NaN`` for absent values; month labels are lower-cased.

    Raises
    ------
    ValueError
        If a numeric column holds text other than the missing marker.
    pandera.errors.SchemaError
        If the coerced table violates the observation contract (for
        example a negative price).
    """
    df = raw.copy()
    df.columns = [str(c).strip().lower() for c in df.columns]
    df = df.rename(columns={**_COLUMN_ALIASES, **(aliases or {})})

    missing = {"market", "year", "month", "price"} - set(df.columns)
    if missing:
        raise ValueError(f"Missing required columns in price table: {sorted(missing)}")
    for col in ("longitude", "latitude"):
        if col not in df.columns:
            df[col] = np.nan
    df = RawPriceSchema.validate(df)

    for col in _TEXT:
        if col in df.columns:
            text = df[col].astype("string").str.strip()
            df[col] = text.mask(text.isin([missing_marker, ""])).astype(object)
    df["month"] = df["month"].str.lower()

    for col in _NUMERIC:
        values = df[col]
        if values.dtype == object or pd.api.types.is_string_dtype(values):
            text = values.astype("string").str.strip()
            values = text.mask(text.isin([missing_marker, ""]))
        try:
            df[col] = pd.to_numeric(values, errors="raise").astype(float)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Column '{col}' holds non-numeric values: {exc}") from exc

    df["year"] = pd.to_numeric(df["year"], errors="raise")
    df = df.dropna(subset=["market"])

    for col in _NUMERIC:
        n_absent = int(df[col].isna().sum())
        if n_absent:
            logger.info("Column '%s': %d absent value(s) after coercion", col, n_absent)

    cols = ["market", "region", "longitude", "latitude", "year", "month", "price"]
    return ObservationSchema.validate(df[[c for c in cols if c in df.columns]])


__all__ = ["coerce_raw_prices"]
