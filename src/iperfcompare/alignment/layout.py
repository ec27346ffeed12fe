"""
Two-column layout helper for chart grids.
"""

from collections.abc import Callable, Sequence
from typing import TypeVar

T = TypeVar("T")
P = TypeVar("P")


def pair_with_placeholders(
    items: Sequence[T],
    make_placeholder: Callable[[T, int], P],
) -> list[T | P]:
    """
    Pad a sequence so it fills two-slot rows.

    Order is kept. If the count is odd, exactly one placeholder, built
    from the unpaired last item and its index, is appended.

    Args:
        items: Displayable entries in display order.
        make_placeholder: Factory for the trailing placeholder.

    Returns:
        List of length len(items) if even, len(items) + 1 otherwise.
    """
    result: list[T | P] = list(items)
    if len(items) % 2 == 1:
        last_index = len(items) - 1
        result.append(make_placeholder(items[last_index], last_index))
    return result


def chart_rows(items: Sequence[T]) -> list[tuple[T, T]]:
    """Group an even-length sequence into consecutive pairs."""
    if len(items) % 2:
        msg = f"Expected an even number of entries, got {len(items)}"
        raise ValueError(msg)
    return [(items[i], items[i + 1]) for i in range(0, len(items), 2)]
