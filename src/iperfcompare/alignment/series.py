"""
Cross-source alignment of reduced series and summary metrics.

Rows cover the union of every source's time values; a source without a
point at some time contributes None there. Nothing is interpolated.
"""

from collections.abc import Callable, Sequence
from typing import Any

import pandas as pd

from iperfcompare.normalization.measurement import (
    GraphPoint,
    MeasurementSummary,
    NormalizedMeasurement,
    Protocol,
)
from iperfcompare.schemas.series import AlignedSeriesSchema
from iperfcompare.utils.logging import get_logger

log = get_logger(__name__)

TIME_COLUMN = "time_seconds"

PointExtractor = Callable[[GraphPoint], float | int | None]
SummaryExtractor = Callable[[MeasurementSummary], float | int | None]
ValueTransform = Callable[[float], float]


def identity(value: float) -> float:
    return value


def to_megabits(bits_per_second: float) -> float:
    """Convert bits/s to Mbit/s, rounded to 2 decimals."""
    return round(bits_per_second / 1_000_000, 2)


def round_two(value: float) -> float:
    """Round to 2 decimals without changing the unit."""
    return round(value, 2)


# Point extractors
def throughput_of(point: GraphPoint) -> float | None:
    return point.throughput


def latency_of(point: GraphPoint) -> float | None:
    return point.latency


def jitter_of(point: GraphPoint) -> float | None:
    return point.jitter


def retransmits_of(point: GraphPoint) -> int | None:
    return point.retransmits


# Summary extractors, gated by protocol where the metric only exists for one
def lost_or_retransmitted(summary: MeasurementSummary) -> int | None:
    return summary.total_lost_or_retransmitted


def sent_packets_udp(summary: MeasurementSummary) -> int | None:
    return summary.total_sent_packets if summary.protocol is Protocol.UDP else None


def sent_bytes_tcp(summary: MeasurementSummary) -> int | None:
    return summary.total_sent_bytes if summary.protocol is Protocol.TCP else None


def final_jitter_udp(summary: MeasurementSummary) -> float | None:
    return summary.final_jitter if summary.protocol is Protocol.UDP else None


def _native(value: Any) -> Any:
    """Unwrap numpy scalars and turn NaN into None."""
    if value is None or pd.isna(value):
        return None
    return value.item() if hasattr(value, "item") else value


def align_frame(
    sources: Sequence[NormalizedMeasurement],
    extractor: PointExtractor,
    transform: ValueTransform = identity,
) -> pd.DataFrame:
    """
    Outer-join the sources' reduced series on time.

    Args:
        sources: Normalized measurements in upload order.
        extractor: Pulls one optional value from a point.
        transform: Applied to non-absent values only.

    Returns:
        Frame with a time_seconds column followed by one column per source
        (in input order), sorted by time. Missing values are NaN.
    """
    if not sources:
        return pd.DataFrame({TIME_COLUMN: pd.Series(dtype="int64")})

    columns: dict[str, pd.Series] = {}
    for source in sources:
        values: dict[int, Any] = {}
        for point in source.series:
            raw = extractor(point)
            values[point.time_seconds] = transform(raw) if raw is not None else None
        columns[source.source_id] = pd.Series(values, dtype="object")

    frame = pd.concat(columns, axis=1, join="outer").sort_index()
    frame.index = frame.index.astype("int64")
    frame.index.name = TIME_COLUMN
    frame = frame.reset_index()

    return AlignedSeriesSchema.validate(frame)


def align(
    sources: Sequence[NormalizedMeasurement],
    extractor: PointExtractor,
    transform: ValueTransform = identity,
) -> list[dict[str, Any]]:
    """
    Align a continuous metric across sources.

    Every row holds time_seconds plus exactly one entry per source, None
    where that source has no point (or no value) at that time.

    Args:
        sources: Normalized measurements in upload order.
        extractor: Pulls one optional value from a point.
        transform: Applied to non-absent values only.

    Returns:
        Rows sorted ascending by time.
    """
    frame = align_frame(sources, extractor, transform)
    source_ids = [column for column in frame.columns if column != TIME_COLUMN]

    rows: list[dict[str, Any]] = []
    for record in frame.itertuples(index=False, name=None):
        row: dict[str, Any] = {TIME_COLUMN: int(record[0])}
        for source_id, value in zip(source_ids, record[1:], strict=True):
            row[source_id] = _native(value)
        rows.append(row)

    log.debug("Aligned series", sources=len(source_ids), rows=len(rows))
    return rows


def summarize(
    sources: Sequence[NormalizedMeasurement],
    extractor: SummaryExtractor,
) -> list[dict[str, Any]]:
    """
    Build a single-value-per-source dataset from summary metrics.

    Sources for which the extractor yields None (metric absent or not
    applicable to the protocol) are left out entirely.

    Returns:
        List of {"name": source_id, "value": value} in input order.
    """
    dataset = []
    for source in sources:
        value = extractor(source.summary)
        if value is not None:
            dataset.append({"name": source.source_id, "value": value})
    return dataset


def has_displayable_data(rows: Sequence[dict[str, Any]]) -> bool:
    """True if at least one row has at least one non-null source value."""
    return any(
        value is not None
        for row in rows
        for key, value in row.items()
        if key != TIME_COLUMN
    )
