"""
Ingestion layer for uploaded measurement files.

All file reading happens here so that normalization stays a pure function.
"""

from iperfcompare.ingestion.batch import (
    BatchResult,
    FileFailure,
    UploadedFile,
    process_batch,
)

__all__ = [
    "BatchResult",
    "FileFailure",
    "UploadedFile",
    "process_batch",
]
