import numpy as np
import pandas as pd
import pytest
from pandera.errors import SchemaError

from ingestion.transform.coerce import coerce_raw_prices


def _raw(**overrides):
    data = {
        "Market": ["Lilongwe ", "Mzuzu", "Zomba"],
        "Region": ["Central", "Northern", "-"],
        "Lon": ["33.78", "34.02", "-"],
        "Lat": ["-13.96", "-11.46", "-"],
        "Year": ["2016", "2016", "2016"],
        "Month": ["March", "APRIL", "may"],
        "Maize_Price": ["120.5", "-", "98"],
    }
    data.update(overrides)
    return pd.DataFrame(data)


def test_sentinel_becomes_absent_and_columns_are_typed():
    out = coerce_raw_prices(_raw())

    assert list(out.columns) == ["market", "region", "longitude", "latitude", "year", "month", "price"]
    assert out["market"].tolist() == ["Lilongwe", "Mzuzu", "Zomba"]
    assert out["month"].tolist() == ["march", "april", "may"]
    assert out["price"].iloc[0] == pytest.approx(120.5)
    assert np.isnan(out["price"].iloc[1])
    assert np.isnan(out["longitude"].iloc[2])
    assert pd.isna(out["region"].iloc[2])
    assert out["year"].dtype.kind == "i"


def test_custom_missing_marker():
    raw = _raw(Maize_Price=["120.5", "n/a", "98"], Lon=["33.78", "34.02", "35.3"], Lat=["-13.96", "-11.46", "-15.4"])
    out = coerce_raw_prices(raw, missing_marker="n/a")
    assert np.isnan(out["price"].iloc[1])


def test_non_numeric_price_is_rejected():
    with pytest.raises(ValueError):
        coerce_raw_prices(_raw(Maize_Price=["120.5", "cheap", "98"]))


def test_negative_price_violates_contract():
    with pytest.raises(SchemaError):
        coerce_raw_prices(_raw(Maize_Price=["120.5", "-3", "98"]))


def test_missing_required_column():
    raw = _raw().drop(columns=["Maize_Price"])
    with pytest.raises(ValueError, match="price"):
        coerce_raw_prices(raw)


def test_coordinates_are_optional():
    raw = _raw().drop(columns=["Lon", "Lat"])
    out = coerce_raw_prices(raw)
    assert out["longitude"].isna().all()
    assert out["latitude"].isna().all()
