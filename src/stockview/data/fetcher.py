"""Latest-wins stock data fetcher.

Each fetcher instance is one logical consumer with one result slot. Issuing a
request supersedes the previous one: its task is cancelled, its cancel flag is
set so the worker thread stops retrying, and any response that still arrives
is discarded because its generation no longer matches.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import replace

from stockview.data.bundle import parse_bundle
from stockview.data.client import StockDataClient
from stockview.domain.models import DateRange, FetchError, FetchState, SeriesBundle, Timeframe
from stockview.errors import ErrorKind, RequestCancelled, StockDataError
from stockview.session import Session

SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."
FETCH_FAILED_MESSAGE = "Failed to fetch stock data"

RequestKey = tuple[list[str], Timeframe, DateRange | None]


class StockDataFetcher:
    """Fetch series bundles for one consumer, keeping only the latest result."""

    def __init__(
        self,
        client: StockDataClient,
        session: Session,
        tz: str = "UTC",
        debounce_seconds: float = 0.0,
        on_auth_expired: Callable[[], None] | None = None,
    ) -> None:
        self.client = client
        self.session = session
        self.tz = tz
        self.debounce_seconds = debounce_seconds
        self.on_auth_expired = on_auth_expired
        self.logger = logging.getLogger("stockview.data.fetcher")
        self._state = FetchState()
        self._generation = 0
        self._task: asyncio.Task[FetchState] | None = None
        self._cancel_event: threading.Event | None = None
        self._last_request: RequestKey | None = None
        self._closed = False

    @property
    def state(self) -> FetchState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    def request(
        self,
        tickers: Sequence[str],
        timeframe: Timeframe | str,
        custom_range: DateRange | None = None,
    ) -> asyncio.Task[FetchState]:
        """Issue a fetch and return its task. Must run inside an event loop."""
        if self._closed:
            raise RuntimeError("Fetcher is closed")
        symbols = normalize_tickers(tickers)
        resolved = Timeframe.parse(timeframe)
        window: DateRange | None = None
        if resolved == Timeframe.CUSTOM:
            if custom_range is None:
                raise ValueError("custom timeframe requires a start/end range")
            window = custom_range.validate()

        loop = asyncio.get_running_loop()
        self._last_request = (symbols, resolved, window)
        self._supersede("Operation canceled due to new request.")
        self._generation += 1
        generation = self._generation
        cancel_event = threading.Event()
        self._cancel_event = cancel_event

        if symbols:
            self._state = replace(self._state, is_loading=True, error=None, generation=generation)
        else:
            self._state = FetchState(generation=generation)

        task = loop.create_task(self._run(generation, symbols, resolved, window, cancel_event))
        self._task = task
        return task

    async def fetch(
        self,
        tickers: Sequence[str],
        timeframe: Timeframe | str,
        custom_range: DateRange | None = None,
    ) -> FetchState:
        """Issue a fetch, wait for it and return the consumer state."""
        task = self.request(tickers, timeframe, custom_range)
        await asyncio.wait({task})
        if task.cancelled():
            return self._state
        return task.result()

    async def refetch(self) -> FetchState:
        """Reissue the most recent request."""
        if self._last_request is None:
            return self._state
        symbols, timeframe, window = self._last_request
        return await self.fetch(symbols, timeframe, window)

    def close(self) -> None:
        """Tear the consumer down, dropping any outstanding request."""
        if self._closed:
            return
        self._closed = True
        self._supersede("Operation canceled due to consumer teardown.")
        if self._state.is_loading:
            self._state = replace(self._state, is_loading=False)

    async def _run(
        self,
        generation: int,
        symbols: list[str],
        timeframe: Timeframe,
        window: DateRange | None,
        cancel_event: threading.Event,
    ) -> FetchState:
        if not symbols:
            return self._state
        try:
            if self.debounce_seconds > 0:
                await asyncio.sleep(self.debounce_seconds)
            bundle = await asyncio.to_thread(self._load, symbols, timeframe, window, cancel_event)
        except asyncio.CancelledError:
            self.logger.debug("Request generation %s canceled", generation)
            raise
        except RequestCancelled as exc:
            self.logger.debug("Request generation %s canceled: %s", generation, exc)
            return self._state
        except StockDataError as exc:
            self.logger.error("Error fetching stock data: %s", exc)
            self._apply_error(generation, exc)
            return self._state
        except Exception:
            self.logger.exception("Unexpected error fetching stock data")
            self._apply_error(generation, StockDataError(FETCH_FAILED_MESSAGE))
            return self._state
        self._apply_data(generation, bundle)
        return self._state

    def _load(
        self,
        symbols: list[str],
        timeframe: Timeframe,
        window: DateRange | None,
        cancel_event: threading.Event,
    ) -> SeriesBundle:
        payload = self.client.get_stock_data(symbols, timeframe, window, cancel_event=cancel_event)
        return parse_bundle(payload, symbols, self.tz)

    def _is_current(self, generation: int) -> bool:
        if self._closed or generation != self._generation:
            self.logger.debug(
                "Discarding stale result for generation %s (current %s)",
                generation,
                self._generation,
            )
            return False
        return True

    def _apply_data(self, generation: int, bundle: SeriesBundle) -> None:
        if not self._is_current(generation):
            return
        self._state = FetchState(data=bundle, is_loading=False, error=None, generation=generation)

    def _apply_error(self, generation: int, exc: StockDataError) -> None:
        if not self._is_current(generation):
            return
        message = str(exc) or FETCH_FAILED_MESSAGE
        if exc.kind == ErrorKind.AUTH_EXPIRED:
            message = SESSION_EXPIRED_MESSAGE
        self._state = replace(
            self._state,
            is_loading=False,
            error=FetchError(kind=exc.kind, message=message),
        )
        if exc.kind == ErrorKind.AUTH_EXPIRED:
            self.session.invalidate()
            if self.on_auth_expired is not None:
                self.on_auth_expired()

    def _supersede(self, reason: str) -> None:
        if self._cancel_event is not None:
            self._cancel_event.set()
        if self._task is not None and not self._task.done():
            self.logger.debug(reason)
            self._task.cancel(reason)


def normalize_tickers(tickers: Sequence[str]) -> list[str]:
    """Uppercase, strip and de-duplicate symbols, preserving order."""
    symbols: list[str] = []
    seen: set[str] = set()
    for ticker in tickers:
        symbol = str(ticker).strip().upper()
        if not symbol or symbol in seen:
            continue
        seen.add(symbol)
        symbols.append(symbol)
    return symbols
