import numpy as np
import pandas as pd
import pytest

from price_index import build_point_samples, relative_price_index, relative_price_matrix
from utils.errors import AnchorNotFound


@pytest.fixture
def prices():
    columns = pd.period_range("2016-01", periods=4, freq="M", name="period")
    data = {
        "Anchor": [100.0, 110.0, np.nan, 120.0],
        "Dear": [120.0, 132.0, 150.0, np.nan],
        "Cheap": [80.0, np.nan, 90.0, 96.0],
        "Orphan": [np.nan, np.nan, 95.0, np.nan],
    }
    df = pd.DataFrame.from_dict(data, orient="index", columns=columns)
    df.index.name = "market"
    return df


def test_anchor_against_itself_is_one(prices):
    index = relative_price_index(prices, "Anchor")
    assert index["Anchor"] == pytest.approx(1.0)
    assert index.name == "relative_index"


def test_anchor_against_itself_is_zero_in_difference_mode(prices):
    index = relative_price_index(prices, "Anchor", mode="difference")
    assert index["Anchor"] == pytest.approx(0.0)
    assert index["Dear"] == pytest.approx((20.0 + 22.0) / 2)


def test_absence_propagates_through_ratio(prices):
    rel = relative_price_matrix(prices, "Anchor")
    assert rel.shape == prices.shape
    # March: anchor absent
    assert rel.iloc[:, 2].isna().all()
    # Cheap: absent in February
    assert np.isnan(rel.loc["Cheap"].iloc[1])
    assert rel.loc["Cheap"].iloc[3] == pytest.approx(0.8)


def test_index_is_mean_of_overlapping_ratios(prices):
    index = relative_price_index(prices, "Anchor")
    assert index["Dear"] == pytest.approx(1.2)
    assert index["Cheap"] == pytest.approx(0.8)


def test_market_without_anchor_overlap_is_undefined(prices):
    index = relative_price_index(prices, "Anchor")
    assert np.isnan(index["Orphan"])


def test_missing_anchor_raises(prices):
    with pytest.raises(AnchorNotFound) as excinfo:
        relative_price_index(prices, "Atlantis")
    assert excinfo.value.anchor == "Atlantis"


def test_zero_anchor_price_is_undefined_not_infinite(prices):
    prices.loc["Anchor"] = [0.0, 110.0, np.nan, 120.0]
    rel = relative_price_matrix(prices, "Anchor")
    assert rel.iloc[:, 0].isna().all()
    assert np.isfinite(relative_price_index(prices, "Anchor").dropna()).all()


def test_invalid_mode(prices):
    with pytest.raises(ValueError):
        relative_price_matrix(prices, "Anchor", mode="log")


def test_inputs_are_not_modified(prices):
    before = prices.copy()
    relative_price_index(prices, "Anchor")
    pd.testing.assert_frame_equal(prices, before)


def _locations():
    return pd.DataFrame(
        {
            "longitude": [33.8, 35.0, 34.0, np.nan],
            "latitude": [-14.0, -15.8, -11.5, np.nan],
            "region": ["Central", "Southern", "Northern", None],
        },
        index=pd.Index(["Anchor", "Dear", "Cheap", "Orphan"], name="market"),
    )


def test_point_samples_drop_unplaceable_markets(prices):
    index = relative_price_index(prices, "Anchor")
    points = build_point_samples(_locations(), index)
    assert points["market"].tolist() == ["Anchor", "Dear", "Cheap"]
    assert list(points.columns[:4]) == ["market", "longitude", "latitude", "relative_index"]


def test_point_samples_can_require_a_seasonal_profile(prices):
    index = relative_price_index(prices, "Anchor")
    status = pd.Series({"Anchor": "ok", "Dear": "insufficient_data", "Cheap": "ok", "Orphan": "ok"})
    points = build_point_samples(_locations(), index, seasonal_status=status, require_seasonal=True)
    assert points["market"].tolist() == ["Anchor", "Cheap"]

    with pytest.raises(ValueError):
        build_point_samples(_locations(), index, require_seasonal=True)
