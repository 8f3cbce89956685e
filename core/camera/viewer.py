"""Spin viewer navigation over a run's results."""

import math
from typing import Sequence

from .types import AngleResult

DRAG_PIXELS_PER_STEP = 16


def wrap_index(value: int, length: int) -> int:
    """Wrap an index into ``[0, length)``; returns 0 for an empty list."""
    if not length:
        return 0
    return value % length


def find_nearest_image_index(index: int, results: Sequence[AngleResult]) -> int:
    """
    Find the view to display for a selection.

    Returns ``index`` when that view has an image. Otherwise searches outward
    by increasing offset, checking the right neighbour before the left one and
    wrapping around the list.

    Args:
        index: Selected view index
        results: Current run's results

    Returns:
        Index of the nearest view with an image, or -1 if none has one
    """
    if not results:
        return -1

    if 0 <= index < len(results) and results[index].image:
        return index

    for offset in range(1, len(results)):
        right = wrap_index(index + offset, len(results))
        left = wrap_index(index - offset, len(results))
        if results[right].image:
            return right
        if results[left].image:
            return left

    return -1


def step_selection(index: int, delta: int, length: int) -> int:
    """Move the selection by ``delta`` views (arrow keys), wrapping around."""
    return wrap_index(index + delta, length)


def drag_to_index(
    start_index: int,
    delta_px: float,
    length: int,
    pixels_per_step: int = DRAG_PIXELS_PER_STEP,
) -> int:
    """
    Map a horizontal drag to a view index.

    Dragging right rotates towards lower indices.

    Args:
        start_index: Selection when the drag started
        delta_px: Horizontal pointer movement since the drag started
        length: Number of views
        pixels_per_step: Pointer travel per view step

    Returns:
        New selected index
    """
    step = math.floor(delta_px / pixels_per_step + 0.5)
    return wrap_index(start_index - step, length)
