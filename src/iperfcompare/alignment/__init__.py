"""
Series alignment layer.

Merges normalized runs into time-aligned line datasets and per-source bar
datasets for side-by-side comparison.
"""

from iperfcompare.alignment.charts import (
    ChartDescriptor,
    ChartKind,
    ChartPlaceholder,
    Comparison,
    build_comparison,
)
from iperfcompare.alignment.layout import chart_rows, pair_with_placeholders
from iperfcompare.alignment.series import (
    align,
    align_frame,
    has_displayable_data,
    summarize,
)

__all__ = [
    "ChartDescriptor",
    "ChartKind",
    "ChartPlaceholder",
    "Comparison",
    "align",
    "align_frame",
    "build_comparison",
    "chart_rows",
    "has_displayable_data",
    "pair_with_placeholders",
    "summarize",
]
