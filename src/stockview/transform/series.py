"""Percent-normalized chart series derived from a series bundle."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import date
from typing import Any

import numpy as np
import pandas as pd

from stockview.domain.models import ChartData, ChartSeries, SeriesBundle, TickerSeries, Timeframe
from stockview.errors import MalformedDataError

logger = logging.getLogger("stockview.transform.series")

NO_DATA_MESSAGE = "No data available"

LABEL_FORMATS: dict[Timeframe, str] = {
    Timeframe.ONE_DAY: "%I:%M %p",
    Timeframe.ONE_WEEK: "%b %d, %I:%M %p",
    Timeframe.ONE_MONTH: "%b %d",
    Timeframe.THREE_MONTHS: "%b %d, %Y",
    Timeframe.ONE_YEAR: "%b %d, %Y",
    Timeframe.YEAR_TO_DATE: "%b %d, %Y",
    Timeframe.MONTH_TO_DATE: "%b %d, %Y",
    Timeframe.CUSTOM: "%b %d, %Y",
}

# Zero padding on day and hour fields ("Jan 05", "09:30"), never on minutes or years.
_PADDED_FIELD = re.compile(r"(?<![\d:])0(\d)")


def to_chart_series(
    bundle: SeriesBundle,
    tickers: Sequence[str],
    timeframe: Timeframe | str,
) -> ChartData:
    """Build one percent-change series per ticker, in ticker order.

    Each value is the close's change relative to the first close in the window.
    With the 1D timeframe every series is restricted to the latest calendar
    date of the reference ticker, the first bundle entry holding rows.
    A ticker that fails to transform yields an empty series; the rest of the
    batch is unaffected.
    """
    resolved = Timeframe.parse(timeframe)
    if not bundle:
        return ChartData(placeholder=NO_DATA_MESSAGE)

    labels: list[str] = []
    session_day: date | None = None
    try:
        reference = _reference_series(bundle)
        if reference is not None:
            if resolved == Timeframe.ONE_DAY:
                session_day = _latest_session(reference)
            labels = format_labels(_restrict(reference, session_day).index, resolved)
    except Exception as exc:
        logger.warning("Error deriving x-axis from reference ticker: %s", exc)

    series: list[ChartSeries] = []
    for symbol in tickers:
        try:
            series.append(_ticker_series(symbol, bundle.get(symbol), resolved, session_day))
        except Exception as exc:
            logger.warning("Error processing data for ticker %s: %s", symbol, exc)
            series.append(ChartSeries(name=symbol))
    return ChartData(labels=labels, series=series)


def format_labels(index: pd.DatetimeIndex, timeframe: Timeframe) -> list[str]:
    """Format axis labels with the timeframe's date pattern."""
    pattern = LABEL_FORMATS[Timeframe.parse(timeframe)]
    return [_PADDED_FIELD.sub(r"\1", timestamp.strftime(pattern)) for timestamp in index]


def _ticker_series(
    symbol: str,
    frame: TickerSeries | None,
    timeframe: Timeframe,
    session_day: date | None,
) -> ChartSeries:
    if frame is None:
        logger.warning("No valid data for ticker %s", symbol)
        return ChartSeries(name=symbol)
    if not isinstance(frame, pd.DataFrame):
        raise MalformedDataError(f"{symbol}: expected a DataFrame, got {type(frame).__name__}")
    if frame.empty:
        return ChartSeries(name=symbol)

    window = _restrict(_sorted(frame), session_day)
    if window.empty:
        return ChartSeries(name=symbol)

    closes = pd.to_numeric(window["close"], errors="coerce")
    base = closes.iloc[0]
    if not _valid_base(base):
        logger.warning("Invalid first close value for %s", symbol)
        return ChartSeries(name=symbol)

    percent = (closes - base) / base * 100.0
    labels = format_labels(window.index, timeframe)
    points = [
        (label, None if pd.isna(value) else float(value))
        for label, value in zip(labels, percent, strict=True)
    ]
    return ChartSeries(name=symbol, points=points)


def _reference_series(bundle: SeriesBundle) -> TickerSeries | None:
    for frame in bundle.values():
        if isinstance(frame, pd.DataFrame) and not frame.empty:
            return _sorted(frame)
    return None


def _sorted(frame: TickerSeries) -> TickerSeries:
    if not isinstance(frame.index, pd.DatetimeIndex):
        raise MalformedDataError("series index is not a DatetimeIndex")
    return frame.sort_index(kind="mergesort")


def _latest_session(frame: TickerSeries) -> date:
    return frame.index.max().date()


def _restrict(frame: TickerSeries, session_day: date | None) -> TickerSeries:
    if session_day is None:
        return frame
    mask = np.fromiter(
        (timestamp.date() == session_day for timestamp in frame.index),
        dtype=bool,
        count=len(frame.index),
    )
    return frame.loc[mask]


def _valid_base(value: Any) -> bool:
    try:
        base = float(value)
    except (TypeError, ValueError):
        return False
    return bool(np.isfinite(base)) and base != 0.0
