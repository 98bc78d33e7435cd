"""Per-ticker performance summary rows."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence

import pandas as pd

from stockview.domain.models import SeriesBundle, SummaryRow, TickerSeries

logger = logging.getLogger("stockview.transform.summary")

SUMMARY_COLUMNS = [
    "symbol",
    "start_price",
    "end_price",
    "change",
    "percent_change",
    "high",
    "low",
]


def summarize(bundle: SeriesBundle, tickers: Sequence[str]) -> list[SummaryRow]:
    """Return one row per ticker, in ticker order. Never raises for bad series."""
    rows: list[SummaryRow] = []
    for symbol in tickers:
        try:
            rows.append(summarize_series(symbol, bundle.get(symbol)))
        except Exception as exc:
            logger.warning("Error calculating performance for %s: %s", symbol, exc)
            rows.append(SummaryRow.missing(symbol))
    return rows


def summarize_series(symbol: str, frame: TickerSeries | None) -> SummaryRow:
    """Compute start/end, change, high and low for one ticker."""
    if frame is None or not isinstance(frame, pd.DataFrame) or frame.empty:
        return SummaryRow.missing(symbol)

    ordered = frame.sort_index(kind="mergesort")
    closes = pd.to_numeric(ordered["close"], errors="coerce")
    start_price = _finite(closes.iloc[0])
    if start_price is None or start_price == 0.0:
        return SummaryRow.missing(symbol)

    valid_closes = closes.dropna()
    end_price = float(valid_closes.iloc[-1])
    change = end_price - start_price
    high = _extreme(ordered, "high", max)
    if high is None:
        high = float(valid_closes.max())
    low = _extreme(ordered, "low", min)
    if low is None:
        low = float(valid_closes.min())
    return SummaryRow(
        symbol=symbol,
        start_price=start_price,
        end_price=end_price,
        change=change,
        percent_change=change / start_price * 100.0,
        high=high,
        low=low,
    )


def summary_frame(rows: Sequence[SummaryRow]) -> pd.DataFrame:
    """Tabulate rows for display. No-data tickers keep their row with blank metrics."""
    records = []
    for row in rows:
        record = {column: getattr(row, column) for column in SUMMARY_COLUMNS}
        record["no_data"] = row.no_data
        records.append(record)
    return pd.DataFrame(records, columns=[*SUMMARY_COLUMNS, "no_data"])


def _extreme(
    frame: TickerSeries,
    column: str,
    pick: Callable[[pd.Series], float],
) -> float | None:
    if column not in frame.columns:
        return None
    values = pd.to_numeric(frame[column], errors="coerce").dropna()
    if values.empty:
        return None
    return float(pick(values))


def _finite(value: object) -> float | None:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
