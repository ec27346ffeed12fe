"""
Schema definitions using Pandera for data validation.

Series frames handed to the alignment layer are validated here.
"""

from iperfcompare.schemas.series import AlignedSeriesSchema, ReducedSeriesSchema

__all__ = [
    "AlignedSeriesSchema",
    "ReducedSeriesSchema",
]
