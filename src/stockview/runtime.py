"""Runtime wiring: fetch, transform, summarize and report, plus ticker search."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from stockview.chart.report import write_report
from stockview.config import Settings
from stockview.data.client import StockDataClient
from stockview.data.fetcher import StockDataFetcher
from stockview.domain.models import ChartData, FetchState, SummaryRow
from stockview.logging.logger import ConsoleReporter, setup_logger
from stockview.session import EnvSession, Session
from stockview.transform.series import to_chart_series
from stockview.transform.summary import summarize


@dataclass(frozen=True)
class DashboardSnapshot:
    """Everything derived from one fetched bundle."""

    state: FetchState
    chart: ChartData = field(default_factory=ChartData)
    rows: list[SummaryRow] = field(default_factory=list)


def build_session(settings: Settings) -> Session:
    return EnvSession(settings.token_env)


def build_client(settings: Settings, session: Session) -> StockDataClient:
    return StockDataClient(
        base_url=settings.api_url,
        session=session,
        timeout=settings.request_timeout_seconds,
        max_retries=settings.max_retries,
    )


def build_fetcher(
    settings: Settings,
    session: Session | None = None,
    client: StockDataClient | None = None,
) -> StockDataFetcher:
    resolved_session = session or build_session(settings)
    return StockDataFetcher(
        client=client or build_client(settings, resolved_session),
        session=resolved_session,
        tz=settings.market_timezone,
        debounce_seconds=settings.debounce_seconds,
    )


async def load_snapshot(settings: Settings, fetcher: StockDataFetcher) -> DashboardSnapshot:
    """Fetch once and derive the chart series and summary rows."""
    timeframe = settings.resolved_timeframe()
    try:
        state = await fetcher.fetch(settings.tickers, timeframe, settings.custom_range())
    finally:
        fetcher.close()
    if state.error is not None:
        return DashboardSnapshot(state=state)
    return DashboardSnapshot(
        state=state,
        chart=to_chart_series(state.data, settings.tickers, timeframe),
        rows=summarize(state.data, settings.tickers),
    )


def run(settings: Settings, fetcher: StockDataFetcher | None = None) -> int:
    """Fetch, print the summary table and write the HTML report."""
    setup_logger(settings.log_level, settings.log_file)
    reporter = ConsoleReporter(level=settings.log_level)
    snapshot = asyncio.run(load_snapshot(settings, fetcher or build_fetcher(settings)))

    state = snapshot.state
    reporter.fetch(settings.tickers, settings.resolved_timeframe().value, state)
    if state.error is not None:
        reporter.error(f"{state.error.kind.value}: {state.error.message}")
        return 1

    for row in snapshot.rows:
        reporter.row(row)
    output = write_report(
        snapshot.chart,
        snapshot.rows,
        settings.resolved_timeframe(),
        settings.report_path,
    )
    reporter.report(str(output))
    return 0


def search(settings: Settings, query: str, client: StockDataClient | None = None) -> int:
    """Print equity matches for ``query``, or popular symbols when the search fails."""
    setup_logger(settings.log_level, settings.log_file)
    reporter = ConsoleReporter(level=settings.log_level)
    resolved_client = client or build_client(settings, build_session(settings))
    for match in resolved_client.search_symbols(query):
        reporter.match(match)
    return 0
