"""
Batch processing of uploaded measurement files.

Each file is read, normalized and deleted on its own; one broken file is
reported as a failure without stopping the others.
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from iperfcompare.alignment.charts import Comparison, build_comparison
from iperfcompare.config.settings import UploadConfig
from iperfcompare.errors import BatchSizeError, MalformedInputError
from iperfcompare.normalization.measurement import NormalizedMeasurement, normalize
from iperfcompare.utils.logging import get_logger, log_context

log = get_logger(__name__)


@dataclass(frozen=True)
class UploadedFile:
    """A file stored on disk under a client-supplied name."""

    name: str
    path: Path


@dataclass(frozen=True)
class FileFailure:
    """Per-file processing failure surfaced to the client."""

    source_id: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"source_id": self.source_id, "message": self.message}


@dataclass
class BatchResult:
    """Outcome of processing one batch, in upload order."""

    measurements: list[NormalizedMeasurement] = field(default_factory=list)
    failures: list[FileFailure] = field(default_factory=list)

    @property
    def source_ids(self) -> list[str]:
        """Identifiers of the successfully normalized sources."""
        return [measurement.source_id for measurement in self.measurements]

    def comparison(self) -> Comparison:
        """Build the comparison over the successful subset."""
        return build_comparison(self.measurements)

    def to_dict(self) -> dict[str, Any]:
        return {
            "all_stats": [m.to_dict() for m in self.measurements],
            "filenames": self.source_ids,
            "failures": [failure.to_dict() for failure in self.failures],
        }


def unique_source_ids(names: Sequence[str]) -> list[str]:
    """
    Disambiguate repeated names with a ' (n)' suffix.

    The first occurrence keeps its name, later ones become 'name (2)',
    'name (3)' and so on.
    """
    seen: dict[str, int] = {}
    taken = set(names)
    result = []
    for name in names:
        count = seen.get(name, 0) + 1
        seen[name] = count
        candidate = name
        if count > 1:
            candidate = f"{name} ({count})"
            while candidate in taken:
                count += 1
                candidate = f"{name} ({count})"
            seen[name] = count
            taken.add(candidate)
        result.append(candidate)
    return result


def read_measurement(path: Path) -> Any:
    """Read and parse one JSON measurement file."""
    with path.open(encoding="utf-8") as f:
        return json.load(f)


def _discard(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        log.warning("Could not delete uploaded file", path=str(path), error=str(e))


def process_batch(
    files: Sequence[UploadedFile],
    config: UploadConfig | None = None,
) -> BatchResult:
    """
    Normalize a batch of uploaded files.

    Args:
        files: Stored files in upload order.
        config: Upload configuration (batch limit, deletion policy).

    Returns:
        BatchResult with the normalized sources and per-file failures.

    Raises:
        BatchSizeError: If the batch is empty or exceeds config.max_files.
    """
    config = config or UploadConfig()
    if not files or len(files) > config.max_files:
        raise BatchSizeError(len(files), config.max_files)

    result = BatchResult()
    source_ids = unique_source_ids([f.name for f in files])

    for uploaded, source_id in zip(files, source_ids, strict=True):
        with log_context(source_id=source_id):
            try:
                raw = read_measurement(uploaded.path)
                result.measurements.append(normalize(raw, source_id))
            except MalformedInputError as e:
                log.warning("Malformed measurement record", reason=e.reason)
                result.failures.append(FileFailure(source_id, f"Malformed record: {e.reason}"))
            except json.JSONDecodeError as e:
                log.warning("Invalid JSON", error=str(e))
                result.failures.append(FileFailure(source_id, f"Invalid JSON: {e.msg}"))
            except (OSError, UnicodeDecodeError) as e:
                log.error("Failed to read file", path=str(uploaded.path), error=str(e))
                result.failures.append(FileFailure(source_id, "Could not read file"))
            finally:
                if config.delete_after_processing:
                    _discard(uploaded.path)

    log.info(
        "Processed batch",
        files=len(files),
        normalized=len(result.measurements),
        failed=len(result.failures),
    )
    return result
