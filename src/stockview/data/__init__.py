"""Stock data retrieval: HTTP client, payload parsing and latest-wins fetcher."""

from .bundle import bundle_from_points, parse_bundle, series_frame
from .client import StockDataClient
from .fetcher import StockDataFetcher, normalize_tickers
from .symbols import POPULAR_SYMBOLS, equity_matches, popular_matches

__all__ = [
    "POPULAR_SYMBOLS",
    "StockDataClient",
    "StockDataFetcher",
    "bundle_from_points",
    "equity_matches",
    "normalize_tickers",
    "parse_bundle",
    "popular_matches",
    "series_frame",
]
