from __future__ import annotations

import asyncio
import threading
from datetime import date
from typing import Any

import pytest

from stockview.data.fetcher import StockDataFetcher, normalize_tickers
from stockview.domain.models import DateRange, Timeframe
from stockview.errors import AuthExpiredError, ErrorKind, RateLimitedError, TransientNetworkError
from stockview.session import StaticSession


def _points(close: float) -> list[dict[str, Any]]:
    return [
        {"date": "2024-01-01", "open": close, "high": close, "low": close, "close": close},
        {"date": "2024-01-02", "open": close, "high": close, "low": close, "close": close + 1},
    ]


class GatedClient:
    """Fake client whose responses are released per first ticker."""

    def __init__(self, payloads: dict[str, dict[str, Any]], gated: bool = True) -> None:
        self.payloads = payloads
        self.gates = {symbol: threading.Event() for symbol in payloads}
        if not gated:
            for gate in self.gates.values():
                gate.set()
        self.calls: list[list[str]] = []

    def release(self, symbol: str) -> None:
        self.gates[symbol].set()

    def get_stock_data(
        self,
        tickers: list[str],
        timeframe: Timeframe,
        custom_range: DateRange | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        _ = (timeframe, custom_range, cancel_event)
        self.calls.append(list(tickers))
        assert self.gates[tickers[0]].wait(5)
        return self.payloads[tickers[0]]


class FailingClient:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    def get_stock_data(self, *args: Any, **kwargs: Any) -> dict[str, Any]:
        _ = (args, kwargs)
        raise self.exc


def test_latest_request_wins_when_earlier_response_arrives_late() -> None:
    client = GatedClient({"AAPL": {"AAPL": _points(100)}, "MSFT": {"MSFT": _points(300)}})

    async def scenario() -> tuple[StockDataFetcher, asyncio.Task, Any]:
        fetcher = StockDataFetcher(client, StaticSession("token"))
        first = fetcher.request(["AAPL"], "1M")
        await asyncio.sleep(0.01)
        second = fetcher.request(["MSFT"], "1M")
        client.release("MSFT")
        state = await second
        client.release("AAPL")
        await asyncio.wait({first})
        await asyncio.sleep(0.05)
        return fetcher, first, state

    fetcher, first, state = asyncio.run(scenario())

    assert first.cancelled()
    assert list(state.data) == ["MSFT"]
    assert list(fetcher.state.data) == ["MSFT"]
    assert fetcher.state.generation == 2
    assert fetcher.state.error is None


def test_stale_generation_result_is_discarded() -> None:
    client = GatedClient({"AAPL": {"AAPL": _points(100)}, "MSFT": {"MSFT": _points(300)}})
    client.release("MSFT")

    async def scenario() -> StockDataFetcher:
        fetcher = StockDataFetcher(client, StaticSession("token"))
        fetcher.request(["AAPL"], "1M")
        await fetcher.fetch(["MSFT"], "1M")
        client.release("AAPL")
        stale = await fetcher._run(1, ["AAPL"], Timeframe.ONE_MONTH, None, threading.Event())
        assert list(stale.data) == ["MSFT"]
        return fetcher

    fetcher = asyncio.run(scenario())

    assert list(fetcher.state.data) == ["MSFT"]
    assert fetcher.state.generation == 2


def test_empty_tickers_issue_no_request() -> None:
    client = GatedClient({"AAPL": {"AAPL": _points(100)}}, gated=False)

    async def scenario() -> Any:
        fetcher = StockDataFetcher(client, StaticSession("token"))
        await fetcher.fetch(["AAPL"], "1M")
        return await fetcher.fetch([], "1M")

    state = asyncio.run(scenario())

    assert state.data == {}
    assert state.is_loading is False
    assert client.calls == [["AAPL"]]


def test_custom_timeframe_requires_valid_range() -> None:
    client = GatedClient({}, gated=False)

    async def scenario() -> None:
        fetcher = StockDataFetcher(client, StaticSession("token"))
        with pytest.raises(ValueError, match="requires a start/end range"):
            fetcher.request(["AAPL"], "custom")
        with pytest.raises(ValueError, match="after end"):
            fetcher.request(
                ["AAPL"],
                "custom",
                DateRange(start=date(2024, 2, 1), end=date(2024, 1, 1)),
            )

    asyncio.run(scenario())

    assert client.calls == []


def test_auth_expired_invalidates_session_and_signals_caller() -> None:
    session = StaticSession("token")
    signals: list[str] = []

    async def scenario() -> Any:
        fetcher = StockDataFetcher(
            FailingClient(AuthExpiredError("401")),
            session,
            on_auth_expired=lambda: signals.append("login"),
        )
        return await fetcher.fetch(["AAPL"], "1M")

    state = asyncio.run(scenario())

    assert state.auth_expired
    assert state.error.message == "Your session has expired. Please log in again."
    assert session.get_token() is None
    assert signals == ["login"]


def test_rate_limit_surfaces_distinct_flag() -> None:
    async def scenario() -> Any:
        fetcher = StockDataFetcher(
            FailingClient(RateLimitedError("Too many requests")),
            StaticSession("token"),
        )
        return await fetcher.fetch(["AAPL"], "1M")

    state = asyncio.run(scenario())

    assert state.rate_limited
    assert not state.auth_expired
    assert state.is_loading is False


def test_transient_failure_keeps_previous_data_with_generic_error() -> None:
    client = GatedClient({"AAPL": {"AAPL": _points(100)}}, gated=False)

    async def scenario() -> Any:
        fetcher = StockDataFetcher(client, StaticSession("token"))
        await fetcher.fetch(["AAPL"], "1M")
        fetcher.client = FailingClient(TransientNetworkError("server error: 503"))
        return await fetcher.refetch()

    state = asyncio.run(scenario())

    assert state.error is not None
    assert state.error.kind == ErrorKind.ERROR
    assert state.error.message == "server error: 503"
    assert list(state.data) == ["AAPL"]


def test_unexpected_client_error_clears_loading_with_generic_error() -> None:
    async def scenario() -> Any:
        fetcher = StockDataFetcher(FailingClient(RuntimeError("boom")), StaticSession("token"))
        return await fetcher.fetch(["AAPL"], "1M")

    state = asyncio.run(scenario())

    assert state.is_loading is False
    assert state.error is not None
    assert state.error.kind == ErrorKind.ERROR
    assert state.error.message == "Failed to fetch stock data"
    assert state.data == {}


def test_malformed_payload_surfaces_generic_error() -> None:
    client = GatedClient({"AAPL": ["not", "a", "mapping"]}, gated=False)

    async def scenario() -> Any:
        fetcher = StockDataFetcher(client, StaticSession("token"))
        return await fetcher.fetch(["AAPL"], "1M")

    state = asyncio.run(scenario())

    assert state.is_loading is False
    assert state.error is not None
    assert state.error.kind == ErrorKind.ERROR


def test_close_cancels_in_flight_request_without_error() -> None:
    client = GatedClient({"AAPL": {"AAPL": _points(100)}, "MSFT": {"MSFT": _points(300)}})
    client.release("AAPL")

    async def scenario() -> StockDataFetcher:
        fetcher = StockDataFetcher(client, StaticSession("token"))
        await fetcher.fetch(["AAPL"], "1M")
        pending = fetcher.request(["MSFT"], "1M")
        await asyncio.sleep(0.01)
        fetcher.close()
        client.release("MSFT")
        await asyncio.wait({pending})
        await asyncio.sleep(0.05)
        return fetcher

    fetcher = asyncio.run(scenario())

    assert list(fetcher.state.data) == ["AAPL"]
    assert fetcher.state.error is None
    assert fetcher.state.is_loading is False
    with pytest.raises(RuntimeError):
        asyncio.run(fetcher.fetch(["AAPL"], "1M"))


def test_debounce_collapses_rapid_requests() -> None:
    client = GatedClient({"AAPL": {"AAPL": _points(100)}, "MSFT": {"MSFT": _points(300)}}, False)

    async def scenario() -> Any:
        fetcher = StockDataFetcher(client, StaticSession("token"), debounce_seconds=0.05)
        fetcher.request(["AAPL"], "1M")
        return await fetcher.fetch(["MSFT"], "1M")

    state = asyncio.run(scenario())

    assert client.calls == [["MSFT"]]
    assert list(state.data) == ["MSFT"]


def test_normalize_tickers_uppercases_and_dedupes() -> None:
    assert normalize_tickers([" aapl", "MSFT", "AAPL", ""]) == ["AAPL", "MSFT"]
