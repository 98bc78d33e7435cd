from __future__ import annotations

import math

import pandas as pd

from stockview.data.bundle import series_frame
from stockview.domain.models import SummaryRow
from stockview.transform.summary import summarize, summary_frame


def _frame(rows: list[dict]) -> pd.DataFrame:
    return series_frame(rows, tz="UTC")


def test_summary_row_metrics() -> None:
    bundle = {
        "AAPL": _frame(
            [
                {"date": "2024-01-02", "high": 112, "low": 104, "close": 110},
                {"date": "2024-01-01", "high": 101, "low": 97, "close": 100},
            ]
        )
    }

    rows = summarize(bundle, ["AAPL"])

    assert rows == [
        SummaryRow(
            symbol="AAPL",
            start_price=100.0,
            end_price=110.0,
            change=10.0,
            percent_change=10.0,
            high=112.0,
            low=97.0,
        )
    ]


def test_summary_returns_one_row_per_ticker_in_order() -> None:
    bundle = {
        "MSFT": _frame([{"date": "2024-01-01", "high": 1, "low": 1, "close": 1}]),
        "AAPL": _frame([]),
    }

    rows = summarize(bundle, ["AAPL", "GOOGL", "MSFT"])

    assert [row.symbol for row in rows] == ["AAPL", "GOOGL", "MSFT"]
    assert rows[0] == SummaryRow.missing("AAPL")
    assert rows[1].no_data
    assert not rows[2].no_data
    assert rows[2].change == 0.0


def test_summary_marks_missing_first_close_as_no_data() -> None:
    bundle = {
        "AAPL": _frame(
            [
                {"date": "2024-01-01", "high": 5, "low": 4},
                {"date": "2024-01-02", "high": 6, "low": 5, "close": 5.5},
            ]
        ),
        "ZERO": _frame([{"date": "2024-01-01", "close": 0}]),
    }

    rows = summarize(bundle, ["AAPL", "ZERO"])

    assert rows[0].to_record() == {"symbol": "AAPL", "no_data": True}
    assert rows[1].no_data


def test_summary_never_produces_nan() -> None:
    bundle = {
        "AAPL": _frame(
            [
                {"date": "2024-01-01", "close": 100},
                {"date": "2024-01-02"},
                {"date": "2024-01-03", "close": 90},
                {"date": "2024-01-04"},
            ]
        )
    }

    row = summarize(bundle, ["AAPL"])[0]

    assert row.end_price == 90.0
    assert row.high == 100.0
    assert row.low == 90.0
    values = [row.start_price, row.end_price, row.change, row.percent_change, row.high, row.low]
    assert not any(math.isnan(value) for value in values)


def test_summary_isolates_malformed_series() -> None:
    bundle = {
        "BAD": pd.DataFrame({"open": [1.0]}, index=pd.to_datetime(["2024-01-01"], utc=True)),
        "AAPL": _frame([{"date": "2024-01-01", "high": 2, "low": 1, "close": 1.5}]),
    }

    rows = summarize(bundle, ["BAD", "AAPL"])

    assert rows[0].no_data
    assert rows[1].start_price == 1.5


def test_summarize_is_deterministic() -> None:
    bundle = {"AAPL": _frame([{"date": "2024-01-01", "close": 3}, {"date": "2024-01-05", "close": 4}])}

    assert summarize(bundle, ["AAPL"]) == summarize(bundle, ["AAPL"])


def test_summary_frame_tabulates_rows() -> None:
    rows = [
        SummaryRow("AAPL", 100.0, 110.0, 10.0, 10.0, 112.0, 97.0),
        SummaryRow.missing("MSFT"),
    ]

    frame = summary_frame(rows)

    assert frame["symbol"].tolist() == ["AAPL", "MSFT"]
    assert frame["no_data"].tolist() == [False, True]
    assert float(frame["percent_change"].iloc[0]) == 10.0
