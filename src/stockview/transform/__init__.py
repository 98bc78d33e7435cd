"""Chart series and summary derivations over a fetched bundle."""

from .series import LABEL_FORMATS, NO_DATA_MESSAGE, format_labels, to_chart_series
from .summary import summarize, summary_frame

__all__ = [
    "LABEL_FORMATS",
    "NO_DATA_MESSAGE",
    "format_labels",
    "summarize",
    "summary_frame",
    "to_chart_series",
]
