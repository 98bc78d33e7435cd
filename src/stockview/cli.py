"""Command-line interface for the stock dashboard pipeline."""

from __future__ import annotations

import argparse
import sys

from stockview.config import Settings, parse_symbols
from stockview.domain.models import Timeframe
from stockview.runtime import run, search


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Fetch stock series, summarize them and write a comparison report"
    )
    parser.add_argument("--tickers", type=str, help="Comma-separated ticker symbols")
    parser.add_argument(
        "--timeframe",
        choices=[member.value for member in Timeframe],
        help="Chart window",
    )
    parser.add_argument("--start", type=str, help="Custom range start (YYYY-MM-DD)")
    parser.add_argument("--end", type=str, help="Custom range end (YYYY-MM-DD)")
    parser.add_argument("--api-url", type=str, help="Backend API base URL")
    parser.add_argument("--output", type=str, help="HTML report path")
    parser.add_argument("--max-retries", type=int, help="Retries for network and 5xx failures")
    parser.add_argument("--timeout", type=float, help="Per-attempt request timeout in seconds")
    parser.add_argument(
        "--debounce-seconds",
        type=float,
        help="Delay before a request is sent; newer requests within it replace it",
    )
    parser.add_argument("--log-level", type=str, help="Logging level")
    parser.add_argument("--log-file", type=str, help="Also write logs to this file")
    parser.add_argument(
        "--search",
        metavar="QUERY",
        type=str,
        help="Search ticker symbols instead of fetching series",
    )
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI values onto environment-derived settings."""
    requested_timeframe = args.timeframe or settings.timeframe
    if (args.start or args.end) and Timeframe.parse(requested_timeframe) != Timeframe.CUSTOM:
        raise ValueError("--start/--end require --timeframe custom")

    overrides: dict[str, object] = {}
    if args.tickers:
        overrides["tickers"] = parse_symbols(args.tickers, settings.tickers)
    if args.timeframe:
        overrides["timeframe"] = args.timeframe
    if args.start:
        overrides["custom_start"] = args.start
    if args.end:
        overrides["custom_end"] = args.end
    if args.api_url:
        overrides["api_url"] = args.api_url
    if args.output:
        overrides["report_path"] = args.output
    if args.max_retries is not None:
        overrides["max_retries"] = args.max_retries
    if args.timeout is not None:
        overrides["request_timeout_seconds"] = args.timeout
    if args.debounce_seconds is not None:
        overrides["debounce_seconds"] = args.debounce_seconds
    if args.log_level:
        overrides["log_level"] = args.log_level.strip().upper()
    if args.log_file:
        overrides["log_file"] = args.log_file
    return settings.with_overrides(**overrides)


def main() -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args()
    try:
        settings = apply_cli_overrides(Settings.from_env(), args)
    except ValueError as exc:
        print(f"Configuration error: {exc}")
        return 2
    if args.search is not None:
        return search(settings, args.search)
    return run(settings)


if __name__ == "__main__":
    sys.exit(main())
