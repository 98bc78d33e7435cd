"""Conversion of backend JSON payloads into series bundles."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pandas as pd

from stockview.domain.models import (
    PRICE_COLUMNS,
    SeriesBundle,
    TickerSeries,
    TimeSeriesPoint,
    empty_series,
)
from stockview.errors import MalformedDataError

logger = logging.getLogger("stockview.data.bundle")


def series_frame(records: Iterable[Any], tz: str = "UTC") -> TickerSeries:
    """Build a ticker series from point records.

    Rows keep the source order and rows with a missing close are kept so the
    chart can render them as gaps. Records without a parseable date are skipped.
    """
    rows: list[dict[str, Any]] = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        timestamp = _parse_timestamp(record.get("date"), tz)
        if timestamp is None:
            continue
        point = TimeSeriesPoint.from_record({**record, "date": timestamp})
        rows.append(
            {
                "date": timestamp,
                "open": point.open,
                "high": point.high,
                "low": point.low,
                "close": point.close,
            }
        )
    if not rows:
        return empty_series(tz)
    frame = pd.DataFrame(rows)
    frame.index = pd.DatetimeIndex(frame.pop("date"), name="date")
    return frame[PRICE_COLUMNS].apply(pd.to_numeric, errors="coerce").astype("float64")


def parse_bundle(payload: Any, tickers: Sequence[str], tz: str = "UTC") -> SeriesBundle:
    """Build a bundle covering exactly ``tickers`` from the response ``data`` field."""
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise MalformedDataError("Stock data payload is not an object keyed by ticker")

    bundle: SeriesBundle = {}
    for symbol in tickers:
        raw = payload.get(symbol)
        if raw is None:
            bundle[symbol] = empty_series(tz)
            continue
        if not isinstance(raw, list):
            logger.warning("%s: expected a list of points, got %s", symbol, type(raw).__name__)
            bundle[symbol] = empty_series(tz)
            continue
        bundle[symbol] = series_frame(raw, tz)
    return bundle


def bundle_from_points(
    points: Mapping[str, Iterable[TimeSeriesPoint]],
    tz: str = "UTC",
) -> SeriesBundle:
    """Build a bundle from in-memory points, mostly for fixtures and notebooks."""
    return {
        symbol: series_frame((point.to_record() for point in series), tz)
        for symbol, series in points.items()
    }


def _parse_timestamp(value: Any, tz: str) -> pd.Timestamp | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        # Epoch values are milliseconds since 1970-01-01 UTC.
        try:
            timestamp = pd.Timestamp(value, unit="ms", tz="UTC")
        except (OverflowError, ValueError):
            return None
        return None if pd.isna(timestamp) else timestamp.tz_convert(tz)
    try:
        timestamp = pd.Timestamp(value)
    except (TypeError, ValueError):
        return None
    if pd.isna(timestamp):
        return None
    if timestamp.tzinfo is None:
        localized = timestamp.tz_localize(tz, ambiguous="NaT", nonexistent="shift_forward")
        return None if pd.isna(localized) else localized
    return timestamp.tz_convert(tz)
