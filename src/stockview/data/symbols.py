"""Ticker search results and the popular-symbols fallback list."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from stockview.domain.models import SymbolMatch

POPULAR_SYMBOLS = [
    SymbolMatch("AAPL", "Apple Inc."),
    SymbolMatch("MSFT", "Microsoft Corporation"),
    SymbolMatch("GOOGL", "Alphabet Inc."),
    SymbolMatch("AMZN", "Amazon.com Inc."),
    SymbolMatch("META", "Meta Platforms Inc."),
    SymbolMatch("TSLA", "Tesla, Inc."),
    SymbolMatch("NVDA", "NVIDIA Corporation"),
    SymbolMatch("JPM", "JPMorgan Chase & Co."),
    SymbolMatch("JNJ", "Johnson & Johnson"),
    SymbolMatch("V", "Visa Inc."),
]

# Shown when a search term matches none of the popular symbols.
FALLBACK_COUNT = 3


def equity_matches(records: Iterable[Any]) -> list[SymbolMatch]:
    """Keep equity results with a symbol, in response order."""
    matches: list[SymbolMatch] = []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        match = SymbolMatch.from_record(dict(record))
        if match.type == "EQUITY" and match.symbol:
            matches.append(match)
    return matches


def popular_matches(query: str) -> list[SymbolMatch]:
    """Filter the popular list by symbol or label, case-insensitively.

    An empty query returns the whole list; a query matching nothing returns
    the first few entries so the caller always has something to offer.
    """
    term = query.strip().lower()
    if not term:
        return list(POPULAR_SYMBOLS)
    found = [
        match
        for match in POPULAR_SYMBOLS
        if term in match.symbol.lower() or term in match.label.lower()
    ]
    return found or POPULAR_SYMBOLS[:FALLBACK_COUNT]
