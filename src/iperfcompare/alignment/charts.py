"""
Comparison builder.

Assembles the chart datasets shown side by side for a batch of runs, drops
the ones with nothing to show and lays the rest out in two columns.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from iperfcompare.alignment.layout import chart_rows, pair_with_placeholders
from iperfcompare.alignment.series import (
    align,
    final_jitter_udp,
    has_displayable_data,
    latency_of,
    lost_or_retransmitted,
    round_two,
    sent_bytes_tcp,
    sent_packets_udp,
    summarize,
    throughput_of,
    to_megabits,
)
from iperfcompare.normalization.measurement import NormalizedMeasurement, Protocol
from iperfcompare.utils.logging import get_logger

log = get_logger(__name__)

# Color by upload index
PALETTE: tuple[str, ...] = (
    "#0088FE",
    "#00C49F",
    "#FFBB28",
    "#FF8042",
    "#A020F0",
    "#FF69B4",
    "#FF4500",
    "#2E8B57",
)


class ChartKind(str, Enum):
    """How a dataset is drawn."""

    LINE = "line"
    BAR = "bar"


@dataclass(frozen=True)
class ChartDescriptor:
    """
    One displayable chart.

    Attributes:
        key: Stable identifier.
        title: Human-readable title.
        kind: Line (aligned rows) or bar (one value per source).
        unit: Axis unit, empty if unitless.
        data: Aligned rows for line charts, {name, value} entries for bars.
        source_ids: Sources drawn in this chart, in upload order.
    """

    key: str
    title: str
    kind: ChartKind
    unit: str
    data: list[dict[str, Any]]
    source_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "kind": self.kind.value,
            "unit": self.unit,
            "data": self.data,
            "source_ids": list(self.source_ids),
            "placeholder": False,
        }


@dataclass(frozen=True)
class ChartPlaceholder:
    """Empty slot completing the last row of the grid."""

    key: str

    def to_dict(self) -> dict[str, Any]:
        return {"key": self.key, "placeholder": True}


@dataclass
class Comparison:
    """Everything the display layer needs to render one batch."""

    sources: list[NormalizedMeasurement]
    charts: list[ChartDescriptor]
    layout: list[ChartDescriptor | ChartPlaceholder]
    colors: dict[str, str] = field(default_factory=dict)

    @property
    def rows(self) -> list[tuple[ChartDescriptor | ChartPlaceholder, ...]]:
        """Layout grouped into two-slot rows."""
        return chart_rows(self.layout)

    def chart(self, key: str) -> ChartDescriptor | None:
        """Look up a displayable chart by key."""
        return next((chart for chart in self.charts if chart.key == key), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sources": [source.to_dict() for source in self.sources],
            "colors": self.colors,
            "layout": [entry.to_dict() for entry in self.layout],
        }


def _placeholder_for(chart: ChartDescriptor, index: int) -> ChartPlaceholder:
    return ChartPlaceholder(key=f"placeholder_for_{chart.key or f'chart_{index}'}_partner")


def _line_chart(
    key: str,
    title: str,
    unit: str,
    lines: Sequence[NormalizedMeasurement],
    rows: list[dict[str, Any]],
) -> ChartDescriptor | None:
    if not has_displayable_data(rows):
        return None
    return ChartDescriptor(
        key=key,
        title=title,
        kind=ChartKind.LINE,
        unit=unit,
        data=rows,
        source_ids=tuple(source.source_id for source in lines),
    )


def _bar_chart(
    key: str, title: str, unit: str, dataset: list[dict[str, Any]]
) -> ChartDescriptor | None:
    if not dataset:
        return None
    return ChartDescriptor(
        key=key,
        title=title,
        kind=ChartKind.BAR,
        unit=unit,
        data=dataset,
        source_ids=tuple(entry["name"] for entry in dataset),
    )


def assign_colors(sources: Sequence[NormalizedMeasurement]) -> dict[str, str]:
    """Map each source to a palette color by its position in the batch."""
    return {
        source.source_id: PALETTE[index % len(PALETTE)]
        for index, source in enumerate(sources)
    }


def build_comparison(sources: Sequence[NormalizedMeasurement]) -> Comparison:
    """
    Build the comparison datasets for a batch of normalized runs.

    Chart order: throughput, latency, sent packets (UDP), lost packets /
    retransmits, final jitter (UDP), sent bytes (TCP). Latency rows span
    every source's times but only TCP sources are drawn as lines.

    Args:
        sources: Successfully normalized runs in upload order.

    Returns:
        Comparison with the displayable charts and their two-column layout.
    """
    sources = list(sources)
    tcp_sources = [source for source in sources if source.protocol is Protocol.TCP]

    candidates = [
        _line_chart(
            "throughput-chart",
            "Throughput (Mbps)",
            "Mbps",
            sources,
            align(sources, throughput_of, to_megabits),
        ),
        _line_chart(
            "latency-chart",
            "Latency/RTT (ms) (TCP)",
            "ms",
            tcp_sources,
            align(sources, latency_of, round_two),
        ),
        _bar_chart(
            "sentpackets-udp-chart",
            "Sent Packets (UDP)",
            "",
            summarize(sources, sent_packets_udp),
        ),
        _bar_chart(
            "lostpackets-chart",
            "Packet Loss / Retransmits",
            "",
            summarize(sources, lost_or_retransmitted),
        ),
        _bar_chart(
            "finaljitter-chart",
            "Jitter (ms) (UDP)",
            "ms",
            summarize(sources, final_jitter_udp),
        ),
        _bar_chart(
            "sentbytes-tcp-chart",
            "Sent Bytes (TCP)",
            "bytes",
            summarize(sources, sent_bytes_tcp),
        ),
    ]
    charts = [chart for chart in candidates if chart is not None]
    layout = pair_with_placeholders(charts, _placeholder_for)

    log.info(
        "Built comparison",
        sources=len(sources),
        charts=[chart.key for chart in charts],
    )

    return Comparison(
        sources=sources,
        charts=charts,
        layout=layout,
        colors=assign_colors(sources),
    )
