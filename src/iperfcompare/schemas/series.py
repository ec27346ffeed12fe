"""
Pandera schemas for reduced and aligned series frames.
"""

import pandera.pandas as pa
from pandera.typing import Series


class ReducedSeriesSchema(pa.DataFrameModel):
    """
    Schema for one source's reduced series.

    One row per retained time value; times are unique and ascending.
    """

    time_seconds: Series[int] = pa.Field(
        ge=0,
        unique=True,
        description="Rounded interval end time in seconds (0 for the anchor point)",
    )
    throughput: Series[float] = pa.Field(
        ge=0,
        description="Aggregate throughput in bits per second",
    )
    jitter: Series[float] = pa.Field(
        nullable=True,
        description="Interval jitter in milliseconds (UDP only)",
    )
    latency: Series[float] = pa.Field(
        nullable=True,
        description="Round-trip time in milliseconds (TCP only)",
    )
    retransmits: Series[float] = pa.Field(
        nullable=True,
        description="Retransmit count (TCP only)",
    )

    @pa.check("time_seconds", name="ascending")
    def time_ascending(cls, series: Series[int]) -> bool:
        """Rows must be sorted by time."""
        return bool(series.is_monotonic_increasing)

    class Config:
        """Schema configuration."""

        name = "ReducedSeriesSchema"
        strict = True
        coerce = True


class AlignedSeriesSchema(pa.DataFrameModel):
    """
    Schema for a multi-source aligned frame.

    Besides time_seconds there is one nullable column per source.
    """

    time_seconds: Series[int] = pa.Field(
        ge=0,
        unique=True,
        description="Union of all sources' reduced-series times",
    )

    @pa.check("time_seconds", name="ascending")
    def time_ascending(cls, series: Series[int]) -> bool:
        """Rows must be sorted by time."""
        return bool(series.is_monotonic_increasing)

    class Config:
        """Schema configuration."""

        name = "AlignedSeriesSchema"
        strict = False  # Per-source columns are dynamic
        coerce = True
