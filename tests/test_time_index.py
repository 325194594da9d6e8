import pandas as pd
import pytest

from ingestion.transform.time_index import (
    add_time_keys,
    build_time_axis,
    key_to_period,
    month_number,
    time_key,
)
from utils.errors import InvalidMonth


@pytest.mark.parametrize("label", ["March", "march", "MARCH", " march ", "Mar"])
def test_month_number_ignores_case_and_whitespace(label):
    assert month_number(label) == 3


def test_month_number_rejects_unknown_label():
    with pytest.raises(InvalidMonth):
        month_number("Marchember")


def test_time_key_orders_chronologically():
    assert time_key(2016, 12) < time_key(2017, 1)
    assert time_key(2017, 1) - time_key(2016, 12) == 1


def test_key_to_period_inverts_time_key():
    for year, month in [(2015, 1), (2016, 6), (2019, 12)]:
        period = key_to_period(time_key(year, month))
        assert (period.year, period.month) == (year, month)


def test_add_time_keys_reports_every_bad_label():
    df = pd.DataFrame({"year": [2016, 2016, 2016], "month": ["march", "Smarch", "13th"]})
    with pytest.raises(InvalidMonth) as excinfo:
        add_time_keys(df)
    assert set(excinfo.value.values) == {"Smarch", "13th"}


def test_add_time_keys_does_not_modify_input():
    df = pd.DataFrame({"year": [2016], "month": ["April"]})
    out = add_time_keys(df)
    assert "time_key" not in df.columns
    assert out.loc[0, "month_num"] == 4
    assert out.loc[0, "time_key"] == 2016 * 12 + 4


def test_contiguous_axis_includes_unreported_months():
    keys = [time_key(2016, 1), time_key(2016, 4)]
    axis = build_time_axis(keys)
    assert list(axis.astype(str)) == ["2016-01", "2016-02", "2016-03", "2016-04"]
    assert axis.name == "period"

    sparse = build_time_axis(keys, contiguous=False)
    assert list(sparse.astype(str)) == ["2016-01", "2016-04"]


def test_empty_axis():
    assert len(build_time_axis([])) == 0
