"""
Error types raised by the normalization and batch layers.

Missing optional fields are never errors; only a broken top-level shape
(or a batch of the wrong size) is.
"""


class MalformedInputError(ValueError):
    """A single measurement record lacks a required field or has the wrong shape."""

    def __init__(self, source_id: str, reason: str) -> None:
        self.source_id = source_id
        self.reason = reason
        super().__init__(f"{source_id}: {reason}")


class BatchSizeError(ValueError):
    """An upload batch is empty or holds more files than allowed."""

    def __init__(self, count: int, max_files: int) -> None:
        self.count = count
        self.max_files = max_files
        if count == 0:
            msg = "No files were uploaded"
        else:
            msg = f"Select between 1 and {max_files} JSON files (got {count})"
        super().__init__(msg)
