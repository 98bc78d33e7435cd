"""HTTP client for the backend stock data and search endpoints."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from typing import Any

import requests

from stockview.data.symbols import POPULAR_SYMBOLS, equity_matches, popular_matches
from stockview.domain.models import DateRange, SymbolMatch, Timeframe
from stockview.errors import (
    AuthExpiredError,
    RateLimitedError,
    RequestCancelled,
    StockDataError,
    TransientNetworkError,
)
from stockview.session import Session

Waiter = Callable[[float, threading.Event | None], bool]


def wait_for_cancel(seconds: float, cancel_event: threading.Event | None) -> bool:
    """Sleep for ``seconds``. Return True when ``cancel_event`` fired meanwhile."""
    event = cancel_event if cancel_event is not None else threading.Event()
    return event.wait(seconds)


class StockDataClient:
    """Fetch raw stock series with bearer auth and exponential-backoff retries."""

    def __init__(
        self,
        base_url: str,
        session: Session,
        timeout: float = 30,
        max_retries: int = 3,
        http: requests.Session | None = None,
        wait: Waiter = wait_for_cancel,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self.max_retries = max_retries
        self.http = http or requests.Session()
        self.http.headers.update({"Content-Type": "application/json"})
        self._wait = wait
        self.logger = logging.getLogger("stockview.data.client")

    def get_stock_data(
        self,
        tickers: Sequence[str],
        timeframe: Timeframe | str,
        custom_range: DateRange | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        """Return the ``data`` object of a successful ``/stocks/data`` response."""
        resolved = Timeframe.parse(timeframe)
        params = {
            "tickers": ",".join(tickers),
            "timeframe": resolved.value,
        }
        if resolved == Timeframe.CUSTOM and custom_range is not None:
            params.update(custom_range.to_params())
        payload = self._request_with_retry("/stocks/data", params, cancel_event)
        if not isinstance(payload, dict) or payload.get("status") != "success":
            raise StockDataError("Failed to fetch stock data")
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    def search_symbols(
        self,
        query: str,
        cancel_event: threading.Event | None = None,
    ) -> list[SymbolMatch]:
        """Search tickers through ``/stocks/search``, keeping equities only.

        Failed or unsuccessful searches fall back to the popular symbols that
        match ``query``. A successful search without equities returns the full
        popular list.
        """
        term = query.strip()
        if not term:
            return popular_matches(term)
        try:
            payload = self._request_with_retry("/stocks/search", {"query": term}, cancel_event)
        except StockDataError as exc:
            self.logger.warning(
                "Error searching stocks for %r, showing popular symbols: %s", term, exc
            )
            return popular_matches(term)
        if not isinstance(payload, dict) or payload.get("status") != "success":
            return popular_matches(term)
        records = payload.get("data")
        if not isinstance(records, list) or not records:
            return popular_matches(term)
        return equity_matches(records) or list(POPULAR_SYMBOLS)

    @staticmethod
    def backoff_seconds(attempt: int) -> float:
        return float(2**attempt)

    def _request_with_retry(
        self,
        path: str,
        params: dict[str, str],
        cancel_event: threading.Event | None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        last_error: requests.RequestException | None = None
        for attempt in range(self.max_retries + 1):
            self._raise_if_cancelled(cancel_event)
            token = self.session.get_token()
            if not token:
                raise AuthExpiredError("Authentication required. Please log in again.")
            try:
                response = self.http.get(
                    url,
                    params=params,
                    headers={"Authorization": f"Bearer {token}"},
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                last_error = exc
                failure = f"Stock data request failed: {exc}"
            else:
                if response.status_code == 401:
                    self.logger.error("Authentication error from %s", url)
                    raise AuthExpiredError("Your session has expired. Please log in again.")
                if response.status_code == 429:
                    self.logger.warning("Rate limited! Too many requests.")
                    raise RateLimitedError("Too many requests. Please wait before retrying.")
                if response.status_code >= 500:
                    last_error = None
                    failure = f"Stock data server error: {response.status_code}"
                elif response.status_code >= 400:
                    detail = response.text.strip() or "No response body"
                    raise StockDataError(f"Stock data error {response.status_code}: {detail}")
                else:
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise StockDataError("Failed to fetch stock data") from exc

            if attempt == self.max_retries:
                raise TransientNetworkError(failure) from last_error
            delay = self.backoff_seconds(attempt + 1)
            self.logger.warning(
                "Retrying request (%s/%s) after %ss: %s",
                attempt + 1,
                self.max_retries,
                delay,
                failure,
            )
            if self._wait(delay, cancel_event):
                raise RequestCancelled("Request cancelled during backoff")
        raise TransientNetworkError("Stock data request exhausted retries") from last_error

    @staticmethod
    def _raise_if_cancelled(cancel_event: threading.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise RequestCancelled("Request superseded before it was sent")
