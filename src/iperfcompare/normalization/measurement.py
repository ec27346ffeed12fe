"""
Record normalization for iperf3 JSON output.

Turns one raw test record into a protocol-aware summary and a reduced,
roughly 2-second-spaced series suitable for charting.
"""

import math
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

import pandas as pd

from iperfcompare.errors import MalformedInputError
from iperfcompare.normalization.lookup import (
    END_MEAN_RTT_PATHS,
    INTERVAL_RETRANSMIT_PATHS,
    INTERVAL_RTT_PATHS,
    as_number,
    first_present,
    get_path,
)
from iperfcompare.schemas.series import ReducedSeriesSchema
from iperfcompare.utils.logging import get_logger

log = get_logger(__name__)

# iperf3 reports RTT in microseconds; charts use milliseconds
RTT_DIVISOR = 1000

# Retained points fall on multiples of this many seconds
BUCKET_SECONDS = 2

SERIES_COLUMNS = ["time_seconds", "throughput", "jitter", "latency", "retransmits"]


class Protocol(str, Enum):
    """Transport protocol of a test run."""

    TCP = "TCP"
    UDP = "UDP"


@dataclass(frozen=True)
class GraphPoint:
    """One retained point of a reduced series."""

    time_seconds: int
    throughput: float
    jitter: float | None = None
    latency: float | None = None
    retransmits: int | None = None


@dataclass(frozen=True)
class MeasurementSummary:
    """
    Headline metrics of one test run.

    UDP runs populate final_jitter and total_sent_packets and never
    final_latency. TCP runs populate final_latency and never final_jitter
    or total_sent_packets. Inapplicable fields are None, never zero.
    """

    source_id: str
    protocol: Protocol
    timestamp: str | None
    duration_seconds: float
    final_throughput: float = 0
    total_lost_or_retransmitted: int | None = None
    final_jitter: float | None = None
    final_latency: float | None = None
    total_sent_packets: int | None = None
    total_sent_bytes: int | None = None


@dataclass(frozen=True)
class NormalizedMeasurement:
    """Summary plus reduced series for one source."""

    summary: MeasurementSummary
    series: tuple[GraphPoint, ...]

    @property
    def source_id(self) -> str:
        """Identifier of the source (usually the uploaded file name)."""
        return self.summary.source_id

    @property
    def protocol(self) -> Protocol:
        """Protocol of the underlying run."""
        return self.summary.protocol

    def point_at(self, time_seconds: int) -> GraphPoint | None:
        """Return the point retained at the given time, if any."""
        for point in self.series:
            if point.time_seconds == time_seconds:
                return point
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize with every field present; absent values stay None."""
        summary = asdict(self.summary)
        summary["protocol"] = self.summary.protocol.value
        return {
            "summary": summary,
            "series": [asdict(point) for point in self.series],
        }

    def to_frame(self) -> pd.DataFrame:
        """
        Return the reduced series as a validated DataFrame.

        Returns:
            DataFrame with one row per point, columns per SERIES_COLUMNS.
        """
        frame = pd.DataFrame(
            [asdict(point) for point in self.series],
            columns=SERIES_COLUMNS,
        )
        return ReducedSeriesSchema.validate(frame)


def _require_mapping(value: Any, source_id: str, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise MalformedInputError(source_id, f"missing or invalid '{what}'")
    return value


def _read_header(
    raw: Any, source_id: str
) -> tuple[Protocol, float, str | None, list[Any], Mapping[str, Any]]:
    """Validate the required top-level shape and pull out its parts."""
    root = _require_mapping(raw, source_id, "record")
    start = _require_mapping(root.get("start"), source_id, "start")
    test_start = _require_mapping(start.get("test_start"), source_id, "start.test_start")

    protocol_tag = test_start.get("protocol")
    try:
        protocol = Protocol(protocol_tag)
    except ValueError:
        raise MalformedInputError(
            source_id, f"unsupported protocol {protocol_tag!r}"
        ) from None

    duration = as_number(test_start.get("duration"))
    if duration is None:
        raise MalformedInputError(source_id, "missing or invalid 'start.test_start.duration'")

    intervals = root.get("intervals")
    if not isinstance(intervals, list):
        raise MalformedInputError(source_id, "missing or invalid 'intervals'")

    end = _require_mapping(root.get("end"), source_id, "end")

    timestamp = get_path(start, ("timestamp", "time"))
    if not isinstance(timestamp, str):
        timestamp = None

    return protocol, duration, timestamp, intervals, end


def _interval_sum(interval: Any, index: int, source_id: str) -> tuple[float, float]:
    """Return (end, bits_per_second) of an interval's aggregate block."""
    block = interval.get("sum") if isinstance(interval, Mapping) else None
    end = as_number(get_path(block, ("end",)))
    bits = as_number(get_path(block, ("bits_per_second",)))
    if end is None or bits is None:
        raise MalformedInputError(
            source_id, f"interval {index} lacks 'sum.end' or 'sum.bits_per_second'"
        )
    return end, bits


def _rtt_to_ms(value: Any) -> float | None:
    rtt = as_number(value)
    return rtt / RTT_DIVISOR if rtt is not None else None


def _graph_point(
    interval: Mapping[str, Any], time_seconds: int, throughput: float, protocol: Protocol
) -> GraphPoint:
    if protocol is Protocol.UDP:
        return GraphPoint(
            time_seconds=time_seconds,
            throughput=throughput,
            jitter=as_number(get_path(interval, ("sum", "jitter_ms"))),
        )
    return GraphPoint(
        time_seconds=time_seconds,
        throughput=throughput,
        latency=_rtt_to_ms(first_present(interval, INTERVAL_RTT_PATHS)),
        retransmits=as_number(first_present(interval, INTERVAL_RETRANSMIT_PATHS)),
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves going up (2.5 -> 3)."""
    return math.floor(value + 0.5)


def reduce_intervals(
    intervals: list[Any],
    protocol: Protocol,
    duration: float,
    source_id: str,
) -> tuple[GraphPoint, ...]:
    """
    Downsample raw intervals to an anchored, even-second series.

    The first interval is always emitted at time 0. Every interval (the
    first included) is then rounded to the nearest second and kept if that
    time is even, positive, within the nominal duration and not yet taken.
    Earlier intervals win ties.

    Args:
        intervals: Raw interval list.
        protocol: Protocol of the run.
        duration: Nominal test duration in seconds.
        source_id: Source identifier, used in error messages.

    Returns:
        Points sorted ascending by time.
    """
    points: list[GraphPoint] = []
    seen: set[int] = set()

    if intervals:
        _, throughput = _interval_sum(intervals[0], 0, source_id)
        points.append(_graph_point(intervals[0], 0, throughput, protocol))
        seen.add(0)

    for index, interval in enumerate(intervals):
        end, throughput = _interval_sum(interval, index, source_id)
        time_seconds = round_half_up(end)
        if (
            time_seconds % BUCKET_SECONDS == 0
            and 0 < time_seconds <= duration
            and time_seconds not in seen
        ):
            points.append(_graph_point(interval, time_seconds, throughput, protocol))
            seen.add(time_seconds)

    points.sort(key=lambda point: point.time_seconds)
    return tuple(points)


def summarize_end(
    end: Mapping[str, Any],
    protocol: Protocol,
    source_id: str,
    timestamp: str | None,
    duration: float,
) -> MeasurementSummary:
    """
    Derive the headline metrics from the terminal block.

    A missing aggregate block leaves the protocol's fields unset and
    final_throughput at 0.
    """
    if protocol is Protocol.UDP:
        block = end.get("sum")
        if not isinstance(block, Mapping):
            block = {}
        return MeasurementSummary(
            source_id=source_id,
            protocol=protocol,
            timestamp=timestamp,
            duration_seconds=duration,
            final_throughput=as_number(block.get("bits_per_second")) or 0,
            total_lost_or_retransmitted=as_number(block.get("lost_packets")),
            final_jitter=as_number(block.get("jitter_ms")),
            total_sent_packets=as_number(block.get("packets")),
            total_sent_bytes=as_number(block.get("bytes")),
        )

    block = end.get("sum_sent")
    if not isinstance(block, Mapping):
        block = {}
    return MeasurementSummary(
        source_id=source_id,
        protocol=protocol,
        timestamp=timestamp,
        duration_seconds=duration,
        final_throughput=as_number(block.get("bits_per_second")) or 0,
        total_lost_or_retransmitted=as_number(block.get("retransmits")),
        final_latency=_rtt_to_ms(first_present(end, END_MEAN_RTT_PATHS)),
        total_sent_bytes=as_number(block.get("bytes")),
    )


def normalize(raw: Any, source_id: str) -> NormalizedMeasurement:
    """
    Normalize one iperf3 JSON record.

    Args:
        raw: Parsed JSON document of a single test run.
        source_id: Identifier of the source (file name).

    Returns:
        NormalizedMeasurement owning freshly built summary and series.

    Raises:
        MalformedInputError: If protocol, duration, intervals or the end
            block are missing or of the wrong type, or an interval lacks
            its aggregate end time or throughput.
    """
    protocol, duration, timestamp, intervals, end = _read_header(raw, source_id)

    series = reduce_intervals(intervals, protocol, duration, source_id)
    summary = summarize_end(end, protocol, source_id, timestamp, duration)

    log.debug(
        "Normalized record",
        source_id=source_id,
        protocol=protocol.value,
        raw_intervals=len(intervals),
        retained_points=len(series),
    )

    return NormalizedMeasurement(summary=summary, series=series)
