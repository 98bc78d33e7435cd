"""Core stock series domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from typing import Any, Self

import pandas as pd

from stockview.errors import ErrorKind

PRICE_COLUMNS = ["open", "high", "low", "close"]

TickerSeries = pd.DataFrame
SeriesBundle = dict[str, TickerSeries]


class Timeframe(StrEnum):
    """Window selector controlling data range and label granularity."""

    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    ONE_YEAR = "1Y"
    YEAR_TO_DATE = "YTD"
    MONTH_TO_DATE = "MTD"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: str | Timeframe) -> Timeframe:
        """Parse a timeframe token, accepting any letter case."""
        if isinstance(value, Timeframe):
            return value
        candidate = str(value).strip()
        for member in cls:
            if member.value.lower() == candidate.lower():
                return member
        supported = ", ".join(member.value for member in cls)
        raise ValueError(f"Unknown timeframe '{value}'. Supported: {supported}")

    @property
    def is_intraday(self) -> bool:
        return self in {Timeframe.ONE_DAY, Timeframe.ONE_WEEK}


@dataclass(frozen=True)
class DateRange:
    """Explicit start/end pair for the custom timeframe."""

    start: date
    end: date

    @classmethod
    def parse(cls, start: str, end: str) -> DateRange:
        return cls(start=date.fromisoformat(start.strip()), end=date.fromisoformat(end.strip()))

    def validate(self) -> Self:
        if self.start > self.end:
            raise ValueError(
                f"custom range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )
        return self

    def to_params(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One sampled bar for one ticker."""

    date: datetime | str
    open: float | None = None
    high: float | None = None
    low: float | None = None
    close: float | None = None

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> TimeSeriesPoint:
        return cls(
            date=record["date"],
            open=_as_price(record.get("open")),
            high=_as_price(record.get("high")),
            low=_as_price(record.get("low")),
            close=_as_price(record.get("close")),
        )

    def to_record(self) -> dict[str, Any]:
        timestamp = self.date.isoformat() if isinstance(self.date, datetime) else self.date
        return {
            "date": timestamp,
            "open": self.open,
            "high": self.high,
            "low": self.low,
            "close": self.close,
        }


@dataclass(frozen=True)
class ChartSeries:
    """Percent-change line for one ticker. ``None`` values are gaps."""

    name: str
    points: list[tuple[str, float | None]] = field(default_factory=list)

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.points]

    @property
    def values(self) -> list[float | None]:
        return [value for _, value in self.points]

    @property
    def is_empty(self) -> bool:
        return not self.points


@dataclass(frozen=True)
class ChartData:
    """Chart-ready series plus the shared x-axis labels."""

    labels: list[str] = field(default_factory=list)
    series: list[ChartSeries] = field(default_factory=list)
    placeholder: str | None = None

    @property
    def has_data(self) -> bool:
        return any(not item.is_empty for item in self.series)


@dataclass(frozen=True)
class SummaryRow:
    """Per-ticker performance metrics for the summary table."""

    symbol: str
    start_price: float | None = None
    end_price: float | None = None
    change: float | None = None
    percent_change: float | None = None
    high: float | None = None
    low: float | None = None
    no_data: bool = False

    @classmethod
    def missing(cls, symbol: str) -> SummaryRow:
        return cls(symbol=symbol, no_data=True)

    def to_record(self) -> dict[str, Any]:
        if self.no_data:
            return {"symbol": self.symbol, "no_data": True}
        return {
            "symbol": self.symbol,
            "start_price": self.start_price,
            "end_price": self.end_price,
            "change": self.change,
            "percent_change": self.percent_change,
            "high": self.high,
            "low": self.low,
            "no_data": False,
        }


@dataclass(frozen=True)
class FetchError:
    """Error surfaced by the fetcher: a kind plus a human-readable message."""

    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class FetchState:
    """Observable result slot of one fetch consumer."""

    data: SeriesBundle = field(default_factory=dict)
    is_loading: bool = False
    error: FetchError | None = None
    generation: int = 0

    @property
    def rate_limited(self) -> bool:
        return self.error is not None and self.error.kind == ErrorKind.RATE_LIMITED

    @property
    def auth_expired(self) -> bool:
        return self.error is not None and self.error.kind == ErrorKind.AUTH_EXPIRED


@dataclass(frozen=True)
class SymbolMatch:
    """One ticker search result."""

    symbol: str
    name: str = ""
    type: str = "EQUITY"

    @property
    def label(self) -> str:
        return f"{self.symbol} - {self.name}" if self.name else self.symbol

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> SymbolMatch:
        return cls(
            symbol=str(record.get("symbol") or "").strip().upper(),
            name=str(record.get("name") or "").strip(),
            type=str(record.get("type") or "").strip().upper(),
        )


def empty_series(tz: str = "UTC") -> TickerSeries:
    """Return an empty frame with the ticker series layout."""
    index = pd.DatetimeIndex([], tz=tz, name="date")
    return pd.DataFrame(columns=PRICE_COLUMNS, index=index, dtype="float64")


def _as_price(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(parsed):
        return None
    return parsed
