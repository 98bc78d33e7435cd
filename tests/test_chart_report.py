from __future__ import annotations

from pathlib import Path

from stockview.chart.figure import CHART_TITLE, EMPTY_TIMEFRAME_MESSAGE, build_figure
from stockview.chart.report import summary_table_html, write_report
from stockview.domain.models import ChartData, ChartSeries, SummaryRow


def _chart() -> ChartData:
    return ChartData(
        labels=["Jan 1", "Jan 2", "Jan 3"],
        series=[
            ChartSeries("AAPL", [("Jan 1", 0.0), ("Jan 2", None), ("Jan 3", 10.0)]),
            ChartSeries("MSFT"),
        ],
    )


def test_figure_has_one_trace_per_ticker_with_gaps() -> None:
    figure = build_figure(_chart(), "1Y")

    assert [trace.name for trace in figure.data] == ["AAPL", "MSFT"]
    assert list(figure.data[0].y) == [0.0, None, 10.0]
    assert figure.data[0].connectgaps is False
    assert figure.data[0].line.shape == "spline"
    assert figure.layout.title.text == CHART_TITLE
    assert figure.layout.yaxis.ticksuffix == "%"
    assert figure.layout.xaxis.rangeslider.visible is True


def test_intraday_figure_uses_markers_without_rotation() -> None:
    figure = build_figure(_chart(), "1D")

    assert figure.data[0].mode == "lines+markers"
    assert figure.data[0].marker.size == 4
    assert figure.layout.xaxis.tickangle == 0
    assert figure.layout.xaxis.rangeslider.visible is False


def test_placeholder_figures_show_message() -> None:
    placeholder = build_figure(ChartData(placeholder="No data available"), "1M")
    empty = build_figure(ChartData(series=[ChartSeries("AAPL")]), "1M")

    assert placeholder.data == ()
    assert placeholder.layout.annotations[0].text == "No data available"
    assert empty.layout.annotations[0].text == EMPTY_TIMEFRAME_MESSAGE


def test_summary_table_marks_missing_tickers() -> None:
    html = summary_table_html(
        [
            SummaryRow("AAPL", 100.0, 110.0, 10.0, 10.0, 112.0, 97.0),
            SummaryRow.missing("MSFT"),
        ]
    )

    assert "$100.00" in html
    assert "+10.00%" in html
    assert "No data available" in html
    assert "MSFT" in html


def test_write_report_creates_html(tmp_path: Path) -> None:
    output = tmp_path / "nested" / "report.html"

    written = write_report(_chart(), [SummaryRow.missing("AAPL")], "1M", str(output))

    assert written == output
    content = output.read_text(encoding="utf-8")
    assert "Stock Performance Summary (1M)" in content
    assert "plotly" in content.lower()
