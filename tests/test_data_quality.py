import numpy as np
import pandas as pd
import pytest

from utils.data_quality import axis_span, calculate_missingness, compute_summary_statistics, coverage_report


@pytest.fixture
def prices():
    columns = pd.period_range("2016-01", periods=6, freq="M", name="period")
    data = {
        "A": [1.0, 2.0, 3.0, 4.0, 5.0, 6.0],
        "B": [np.nan, 2.0, np.nan, np.nan, 5.0, np.nan],
        "C": [np.nan] * 6,
    }
    df = pd.DataFrame.from_dict(data, orient="index", columns=columns)
    df.index.name = "market"
    return df


def test_missingness(prices):
    miss = calculate_missingness(prices)
    assert miss["A"] == 0.0
    assert miss["B"] == pytest.approx(4 / 6)
    assert miss["C"] == 1.0


def test_coverage_report(prices):
    report = coverage_report(prices)
    assert report.loc["A", "span"] == 6
    assert report.loc["A", "longest_gap"] == 0
    assert report.loc["B", "first_reported"] == "2016-02"
    assert report.loc["B", "last_reported"] == "2016-05"
    assert report.loc["B", "reported"] == 2
    assert report.loc["B", "span"] == 4
    assert report.loc["B", "longest_gap"] == 2
    assert report.loc["C", "reported"] == 0


def test_summary_statistics():
    stats = compute_summary_statistics(pd.Series([1.0, np.nan, 3.0]))
    assert stats["mean"] == 2.0
    assert stats["min"] == 1.0
    assert stats["max"] == 3.0
    assert compute_summary_statistics(pd.Series([np.nan])) == {}


def test_axis_span(prices):
    assert axis_span(prices) == ("2016-01", "2016-06")
