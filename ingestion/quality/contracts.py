"""Data contracts for the price surface pipeline.

We use the [Pandera](https://pandera.readthedocs.io/) library to define
schemas for the tables crossing layer boundaries.  Schemas act both as
documentation and as runtime validation:

* ``RawPriceSchema`` – the raw export after column renaming, before any
  type conversion.  Only presence of the key columns is enforced.
* ``ObservationSchema`` – typed monthly price reports handed to the core
  by the ingestion boundary (:mod:`ingestion.transform.coerce`).  Absent
  values are ``NaN``; no text sentinel may survive to this point.
* ``PointSampleSchema`` – per-market records fed to the spatial
  interpolator (:mod:`price_index.points`).  Nothing may be absent here.
"""

import numpy as np
from pandera import Column, DataFrameSchema, Check


RawPriceSchema = DataFrameSchema(
    {
        "market": Column(nullable=True),
        "year": Column(nullable=False),
        "month": Column(nullable=False),
        "price": Column(nullable=True),
    },
    strict=False,
    name="RawPrices",
)

ObservationSchema = DataFrameSchema(
    {
        "market": Column(str, nullable=False),
        "region": Column(object, nullable=True, required=False),
        "longitude": Column(float, nullable=True, checks=Check.in_range(-180.0, 180.0)),
        "latitude": Column(float, nullable=True, checks=Check.in_range(-90.0, 90.0)),
        "year": Column(int, nullable=False, checks=Check.in_range(1900, 2200)),
        "month": Column(str, nullable=False),
        "price": Column(float, nullable=True, checks=Check.ge(0.0)),
    },
    strict=False,
    coerce=True,
    name="Observations",
)


PointSampleSchema = DataFrameSchema(
    {
        "market": Column(str, nullable=False, unique=True),
        "longitude": Column(float, nullable=False, checks=Check.in_range(-180.0, 180.0)),
        "latitude": Column(float, nullable=False, checks=Check.in_range(-90.0, 90.0)),
        "relative_index": Column(
            float, nullable=False, checks=Check(lambda s: np.isfinite(s))
        ),
    },
    strict=False,
    coerce=True,
    name="PointSamples",
)

__all__ = ["RawPriceSchema", "ObservationSchema", "PointSampleSchema"]
