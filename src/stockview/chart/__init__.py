"""Plotly chart and HTML report rendering."""

from .figure import build_figure, placeholder_figure
from .report import summary_table_html, write_report

__all__ = ["build_figure", "placeholder_figure", "summary_table_html", "write_report"]
