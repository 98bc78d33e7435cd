"""Logging setup and concise console output for CLI runs."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from stockview.domain.models import FetchState, SummaryRow, SymbolMatch

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    log_level: str = "INFO",
    log_file: str | None = None,
    name: str = "stockview",
) -> logging.Logger:
    """Configure and return the package logger.

    The console handler is attached once. ``log_file`` adds a file handler,
    creating the parent directory; repeated calls with the same path reuse it.
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level(log_level))
    logger.propagate = False
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    if not any(type(handler) is logging.StreamHandler for handler in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if log_file:
        path = Path(log_file).expanduser().resolve()
        attached = any(
            isinstance(handler, logging.FileHandler)
            and Path(handler.baseFilename).resolve() == path
            for handler in logger.handlers
        )
        if not attached:
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.INFO)


class ConsoleReporter:
    """Console logger with fixed line types."""

    def __init__(self, level: str = "INFO") -> None:
        self._logger = logging.getLogger("stockview.console")
        self._logger.setLevel(_level(level))
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s | %(message)s", "%Y-%m-%d %H:%M:%S")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def fetch(self, tickers: Sequence[str], timeframe: str, state: FetchState) -> None:
        rows = sum(len(frame) for frame in state.data.values())
        self._logger.info(
            "fetch | %s | %s | %s rows | generation %s",
            ",".join(tickers) or "-",
            timeframe,
            rows,
            state.generation,
        )

    def row(self, row: SummaryRow) -> None:
        if row.no_data:
            self._logger.info("row | %s | no data", row.symbol)
            return
        self._logger.info(
            "row | %s | start $%s | end $%s | change %s | change%% %s | high $%s | low $%s",
            row.symbol,
            self._money(row.start_price),
            self._money(row.end_price),
            f"{row.change:+,.2f}",
            f"{row.percent_change:+.2f}%",
            self._money(row.high),
            self._money(row.low),
        )

    def match(self, match: SymbolMatch) -> None:
        self._logger.info("match | %s | %s", match.symbol, match.name or "-")

    def report(self, path: str) -> None:
        self._logger.info("report | %s", path)

    def error(self, message: str) -> None:
        self._logger.error("error | %s", message)

    @staticmethod
    def _money(value: float | None) -> str:
        if value is None:
            return "n/a"
        return f"{value:,.2f}"
