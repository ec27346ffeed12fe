"""
Record normalization layer.

Converts heterogeneous iperf3 JSON records (TCP or UDP, any tool version)
into a stable summary plus a reduced series.
"""

from iperfcompare.normalization.measurement import (
    GraphPoint,
    MeasurementSummary,
    NormalizedMeasurement,
    Protocol,
    normalize,
)

__all__ = [
    "GraphPoint",
    "MeasurementSummary",
    "NormalizedMeasurement",
    "Protocol",
    "normalize",
]
