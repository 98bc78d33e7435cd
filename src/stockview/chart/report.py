"""Standalone HTML dashboard report."""

from __future__ import annotations

import html
from collections.abc import Sequence
from pathlib import Path

from stockview.chart.figure import build_figure
from stockview.domain.models import ChartData, SummaryRow, Timeframe
from stockview.transform.summary import summary_frame

SUMMARY_TITLE = "Stock Performance Summary"


def write_report(
    chart: ChartData,
    rows: Sequence[SummaryRow],
    timeframe: Timeframe | str,
    output_html_path: str,
) -> Path:
    """Write the comparison chart and the summary table to one HTML page."""
    output = Path(output_html_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    resolved = Timeframe.parse(timeframe)
    figure = build_figure(chart, resolved)
    html_parts = [
        "<html><head><meta charset='utf-8'><title>stockview dashboard</title></head><body>",
        figure.to_html(full_html=False, include_plotlyjs="cdn"),
        f"<h2>{SUMMARY_TITLE} ({html.escape(resolved.value)})</h2>",
        summary_table_html(rows),
        "</body></html>",
    ]
    output.write_text("".join(html_parts), encoding="utf-8")
    return output


def summary_table_html(rows: Sequence[SummaryRow]) -> str:
    """Render summary rows as an HTML table; no-data tickers show a notice."""
    if not rows:
        return "<p>No stocks selected</p>"
    frame = summary_frame(rows)
    display = frame.drop(columns=["no_data"]).astype(object)
    for column in ("start_price", "end_price", "high", "low"):
        display[column] = [_money(value) for value in frame[column]]
    display["change"] = [_signed(value) for value in frame["change"]]
    display["percent_change"] = [_signed(value, suffix="%") for value in frame["percent_change"]]
    display.loc[frame["no_data"], ["start_price", "end_price", "change"]] = "No data available"
    display.loc[frame["no_data"], ["percent_change", "high", "low"]] = ""
    display.columns = ["Symbol", "Start Price", "End Price", "Change", "% Change", "High", "Low"]
    return display.to_html(index=False, escape=True, border=0)


def _money(value: object) -> str:
    if value is None or value != value:
        return ""
    return f"${float(value):,.2f}"


def _signed(value: object, suffix: str = "") -> str:
    if value is None or value != value:
        return ""
    return f"{float(value):+,.2f}{suffix}"
