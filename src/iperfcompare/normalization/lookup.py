"""
Ordered fallback lookups into nested iperf3 JSON.

iperf3 moved several fields between versions (per-stream vs. sender
sub-objects). A lookup is a tuple of key paths tried in order; the first
one that resolves to a non-null value wins.
"""

import math
from collections.abc import Mapping, Sequence
from typing import Any

KeyPath = tuple[str | int, ...]

# Interval round-trip time: stream top-level first, then the sender sub-object
INTERVAL_RTT_PATHS: tuple[KeyPath, ...] = (
    ("streams", 0, "rtt"),
    ("streams", 0, "sender", "rtt"),
)

# Interval retransmits: aggregate count first, then per-stream locations
INTERVAL_RETRANSMIT_PATHS: tuple[KeyPath, ...] = (
    ("sum", "retransmits"),
    ("streams", 0, "sender", "retransmits"),
    ("streams", 0, "retransmits"),
)

END_MEAN_RTT_PATHS: tuple[KeyPath, ...] = (("streams", 0, "sender", "mean_rtt"),)


def get_path(data: Any, path: KeyPath) -> Any:
    """
    Follow a key path, returning None as soon as a step cannot be taken.

    String steps index mappings, integer steps index sequences.
    """
    current = data
    for step in path:
        if isinstance(step, int):
            if (
                isinstance(current, Sequence)
                and not isinstance(current, str)
                and -len(current) <= step < len(current)
            ):
                current = current[step]
            else:
                return None
        elif isinstance(current, Mapping):
            current = current.get(step)
        else:
            return None
        if current is None:
            return None
    return current


def first_present(data: Any, paths: Sequence[KeyPath]) -> Any:
    """
    Return the value of the first path that resolves to something non-null.

    Args:
        data: Nested JSON structure.
        paths: Key paths in precedence order.

    Returns:
        First resolved value, or None if every path is absent.
    """
    for path in paths:
        value = get_path(data, path)
        if value is not None:
            return value
    return None


def as_number(value: Any) -> float | int | None:
    """Keep finite ints and floats, treating everything else as absent."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value
