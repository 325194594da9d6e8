import numpy as np
import pandas as pd
import pytest

from ingestion.transform.reshape import reshape_observations, to_long
from ingestion.transform.time_index import build_time_axis, time_key
from utils.errors import DuplicateObservation, InconsistentLocation


def _obs(rows):
    return pd.DataFrame(rows, columns=["market", "longitude", "latitude", "year", "month", "price"])


def test_matrix_shape_and_absent_cells():
    obs = _obs([
        ("A", 33.0, -14.0, 2016, "january", 10.0),
        ("A", 33.0, -14.0, 2016, "march", 12.0),
        ("B", 35.0, -15.0, 2016, "february", 20.0),
    ])
    matrix = reshape_observations(obs)

    assert matrix.prices.shape == (2, 3)
    assert list(matrix.markets) == ["A", "B"]
    assert list(matrix.axis.astype(str)) == ["2016-01", "2016-02", "2016-03"]
    # an unreported month is absent, never zero
    assert np.isnan(matrix.prices.loc["A"].iloc[1])
    assert matrix.prices.loc["B"].iloc[1] == 20.0
    assert matrix.fill_rate() == pytest.approx(3 / 6)


def test_explicit_absent_price_rows_stay_absent():
    obs = _obs([
        ("A", 33.0, -14.0, 2016, "january", 10.0),
        ("A", 33.0, -14.0, 2016, "february", np.nan),
    ])
    matrix = reshape_observations(obs)
    assert matrix.prices.shape == (1, 2)
    assert np.isnan(matrix.prices.iloc[0, 1])


def test_duplicate_market_month_raises():
    obs = _obs([
        ("X", 33.0, -14.0, 2016, "march", 10.0),
        ("X", 33.0, -14.0, 2016, "March", 11.0),
        ("Y", 34.0, -13.0, 2016, "march", 9.0),
    ])
    with pytest.raises(DuplicateObservation) as excinfo:
        reshape_observations(obs)
    assert excinfo.value.pairs == [("X", "2016-03")]


def test_market_at_two_locations_raises():
    obs = _obs([
        ("X", 33.0, -14.0, 2016, "january", 10.0),
        ("X", 33.5, -14.0, 2016, "february", 11.0),
    ])
    with pytest.raises(InconsistentLocation) as excinfo:
        reshape_observations(obs)
    assert excinfo.value.markets == ["X"]


def test_locations_take_the_reported_pair_and_keep_missing_markets():
    obs = _obs([
        ("X", np.nan, np.nan, 2016, "january", 10.0),
        ("X", 33.0, -14.0, 2016, "february", 11.0),
        ("Z", np.nan, np.nan, 2016, "january", 12.0),
    ])
    matrix = reshape_observations(obs)
    assert matrix.locations.loc["X", "longitude"] == 33.0
    assert matrix.locations.loc["Z"].isna().all()


def test_supplied_axis_must_cover_observations():
    obs = _obs([("A", 33.0, -14.0, 2016, "june", 10.0)])
    axis = build_time_axis([time_key(2016, 1), time_key(2016, 3)])
    with pytest.raises(ValueError):
        reshape_observations(obs, axis=axis)


def test_round_trip_recovers_observations(make_observations, malawi_markets):
    obs = make_observations(malawi_markets)
    obs["month"] = obs["month"].str.lower()
    matrix = reshape_observations(obs)
    back = to_long(matrix)

    key = ["market", "year", "month"]
    expected = obs.dropna(subset=["price"]).sort_values(key).reset_index(drop=True)
    got = back.sort_values(key).reset_index(drop=True)

    assert len(got) == len(expected)
    pd.testing.assert_series_equal(got["price"], expected["price"], check_names=False)
    assert (got["market"] == expected["market"]).all()
    assert (got["month"] == expected["month"]).all()
    assert (got["year"].to_numpy() == expected["year"].to_numpy()).all()
