"""Domain models for stock series, chart output and fetch state."""

from .models import (
    PRICE_COLUMNS,
    ChartData,
    ChartSeries,
    DateRange,
    FetchError,
    FetchState,
    SeriesBundle,
    SummaryRow,
    SymbolMatch,
    TickerSeries,
    Timeframe,
    TimeSeriesPoint,
    empty_series,
)

__all__ = [
    "PRICE_COLUMNS",
    "ChartData",
    "ChartSeries",
    "DateRange",
    "FetchError",
    "FetchState",
    "SeriesBundle",
    "SummaryRow",
    "SymbolMatch",
    "TickerSeries",
    "Timeframe",
    "TimeSeriesPoint",
    "empty_series",
]
