"""Exceptions raised by the stock data pipeline."""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Error categories surfaced to fetch consumers."""

    AUTH_EXPIRED = "auth_expired"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"


class StockDataError(Exception):
    """Base exception for stock data retrieval failures."""

    kind: ErrorKind = ErrorKind.ERROR


class AuthExpiredError(StockDataError):
    """Raised when the backend rejects the session (HTTP 401) or no token exists."""

    kind = ErrorKind.AUTH_EXPIRED


class RateLimitedError(StockDataError):
    """Raised on HTTP 429. Never retried by the client."""

    kind = ErrorKind.RATE_LIMITED


class TransientNetworkError(StockDataError):
    """Raised once network or 5xx retries are exhausted."""


class MalformedDataError(StockDataError):
    """Raised when a ticker's series cannot be transformed."""


class RequestCancelled(Exception):
    """A superseded or torn-down request stopped early. Not shown to users."""
