"""Plotly figure for percent-change comparison charts."""

from __future__ import annotations

import plotly.graph_objects as go

from stockview.domain.models import ChartData, Timeframe

CHART_TITLE = "Stock Performance Comparison"
EMPTY_TIMEFRAME_MESSAGE = "No data available for the selected timeframe"

COLORS = [
    "#5470c6",
    "#91cc75",
    "#fac858",
    "#ee6666",
    "#73c0de",
    "#3ba272",
    "#fc8452",
    "#9a60b4",
]

MARKER_SIZES = {Timeframe.ONE_DAY: 4, Timeframe.ONE_WEEK: 3}
SMOOTHED = {Timeframe.THREE_MONTHS, Timeframe.ONE_YEAR, Timeframe.YEAR_TO_DATE}
RANGE_SLIDER = {
    Timeframe.THREE_MONTHS,
    Timeframe.ONE_YEAR,
    Timeframe.YEAR_TO_DATE,
    Timeframe.CUSTOM,
}


def build_figure(chart: ChartData, timeframe: Timeframe | str) -> go.Figure:
    """Render chart series as one line trace per ticker."""
    resolved = Timeframe.parse(timeframe)
    if chart.placeholder is not None:
        return placeholder_figure(chart.placeholder)
    if not chart.has_data:
        return placeholder_figure(EMPTY_TIMEFRAME_MESSAGE)

    figure = go.Figure()
    marker_size = MARKER_SIZES.get(resolved, 2)
    for position, series in enumerate(chart.series):
        color = COLORS[position % len(COLORS)]
        figure.add_trace(
            go.Scatter(
                x=series.labels,
                y=series.values,
                name=series.name,
                mode="lines+markers" if resolved in MARKER_SIZES else "lines",
                marker={"size": marker_size, "color": color},
                line={
                    "color": color,
                    "shape": "spline" if resolved in SMOOTHED else "linear",
                },
                connectgaps=False,
                hovertemplate="%{fullData.name}: %{y:.2f}%<extra></extra>",
            )
        )

    figure.update_layout(
        title={"text": CHART_TITLE, "x": 0.5},
        hovermode="x unified",
        legend={"orientation": "h", "y": 1.08},
        margin={"l": 40, "r": 40, "t": 90, "b": 40},
    )
    figure.update_xaxes(
        type="category",
        categoryorder="array",
        categoryarray=chart.labels,
        tickangle=0 if resolved == Timeframe.ONE_DAY else -45,
        rangeslider={"visible": resolved in RANGE_SLIDER},
    )
    figure.update_yaxes(ticksuffix="%", griddash="dash")
    return figure


def placeholder_figure(message: str) -> go.Figure:
    """Empty figure carrying a centred message."""
    figure = go.Figure()
    figure.add_annotation(
        text=message,
        x=0.5,
        y=0.5,
        xref="paper",
        yref="paper",
        showarrow=False,
        font={"size": 16},
    )
    figure.update_xaxes(visible=False)
    figure.update_yaxes(visible=False)
    return figure
