"""Environment and CLI runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Self

from dotenv import load_dotenv

from stockview.domain.models import DateRange, Timeframe

DEFAULT_TICKERS = ["AAPL", "MSFT", "GOOGL"]


def parse_float(value: str | None, default: float, *, field_name: str) -> float:
    """Parse float values from env strings."""
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError as exc:
        raise ValueError(f"{field_name} must be a number") from exc


def parse_int(value: str | None, default: int, *, field_name: str) -> int:
    """Parse integer values from env strings."""
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{field_name} must be an integer") from exc


def parse_symbols(value: str | None, default: list[str] | None = None) -> list[str]:
    """Parse comma-separated symbols."""
    fallback = default if default is not None else DEFAULT_TICKERS
    if not value:
        return list(fallback)
    symbols = [item.strip().upper() for item in value.split(",") if item.strip()]
    return dedupe_symbols(symbols) or list(fallback)


def dedupe_symbols(symbols: list[str]) -> list[str]:
    """Remove duplicate symbols while preserving order."""
    deduped: list[str] = []
    seen: set[str] = set()
    for symbol in symbols:
        if symbol in seen:
            continue
        seen.add(symbol)
        deduped.append(symbol)
    return deduped


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""

    api_url: str = "http://localhost:5000/api"
    token_env: str = "STOCKVIEW_TOKEN"
    tickers: list[str] = field(default_factory=lambda: list(DEFAULT_TICKERS))
    timeframe: str = "1M"
    custom_start: str | None = None
    custom_end: str | None = None
    request_timeout_seconds: float = 30.0
    max_retries: int = 3
    debounce_seconds: float = 0.1
    market_timezone: str = "America/New_York"
    report_path: str = "reports/dashboard.html"
    log_level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls) -> Self:
        """Create settings from environment variables."""
        load_dotenv()
        raw = cls(
            api_url=str(os.getenv("STOCKVIEW_API_URL", "http://localhost:5000/api")).strip(),
            token_env=str(os.getenv("STOCKVIEW_TOKEN_ENV", "STOCKVIEW_TOKEN")).strip(),
            tickers=parse_symbols(os.getenv("TICKERS")),
            timeframe=str(os.getenv("TIMEFRAME", "1M")).strip(),
            custom_start=os.getenv("CUSTOM_START") or None,
            custom_end=os.getenv("CUSTOM_END") or None,
            request_timeout_seconds=parse_float(
                os.getenv("REQUEST_TIMEOUT_SECONDS"),
                30.0,
                field_name="request_timeout_seconds",
            ),
            max_retries=parse_int(os.getenv("MAX_RETRIES"), 3, field_name="max_retries"),
            debounce_seconds=parse_float(
                os.getenv("DEBOUNCE_SECONDS"),
                0.1,
                field_name="debounce_seconds",
            ),
            market_timezone=str(os.getenv("MARKET_TIMEZONE", "America/New_York")).strip(),
            report_path=str(os.getenv("REPORT_PATH", "reports/dashboard.html")).strip(),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
            log_file=os.getenv("LOG_FILE") or None,
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        updated = replace(self, **kwargs)
        return updated.validate()

    def resolved_timeframe(self) -> Timeframe:
        return Timeframe.parse(self.timeframe)

    def custom_range(self) -> DateRange | None:
        """Return the validated custom range, or None for preset timeframes."""
        if self.resolved_timeframe() != Timeframe.CUSTOM:
            return None
        if not self.custom_start or not self.custom_end:
            raise ValueError("custom timeframe requires both start and end dates")
        try:
            window = DateRange.parse(self.custom_start, self.custom_end)
        except ValueError as exc:
            raise ValueError(f"custom range dates must be ISO formatted: {exc}") from exc
        return window.validate()

    def validate(self) -> Self:
        """Validate settings fields."""
        if not self.api_url:
            raise ValueError("api_url must not be empty")
        if not self.token_env:
            raise ValueError("token_env must not be empty")
        self.resolved_timeframe()
        self.custom_range()
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        if self.max_retries < 0:
            raise ValueError("max_retries must not be negative")
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds must not be negative")
        if not self.market_timezone:
            raise ValueError("market_timezone must not be empty")
        return self
