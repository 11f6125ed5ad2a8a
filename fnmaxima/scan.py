"""
Full-Rescan Local Maxima
========================

Straightforward O(n) evaluation of the local-maximum predicate over a function
laid out in argument order. A point is a local maximum when

    (it has no left neighbour  or  left.value <= point.value)  and
    (it has no right neighbour or right.value <= point.value)

Ties count on both sides, so every point of a plateau bounded by smaller
values is a maximum, and a lone point is always one.

Two flavours are provided:
- ``scan_local_maxima`` works on Points under any value ordering
- ``local_maxima_mask`` is the numpy vectorised version for numeric arrays
  under natural ordering

The incremental engine never uses these on its update path; they back bulk
construction and consistency checks.
"""

from typing import Any, Iterable, List, Sequence

import numpy as np

from .ordering import NATURAL, Ordering, less_equal
from .point import Point


def is_local_maximum(
    values: Sequence[Any], index: int, value_order: Ordering = NATURAL
) -> bool:
    """Check the local-maximum predicate for values[index]."""
    value = values[index]
    if index > 0 and not less_equal(value_order, values[index - 1], value):
        return False
    if index + 1 < len(values) and not less_equal(
        value_order, values[index + 1], value
    ):
        return False
    return True


def scan_local_maxima(
    points: Iterable[Point], value_order: Ordering = NATURAL
) -> List[Point]:
    """
    Return the points that are local maxima, in argument order.

    Args:
        points: Points sorted by argument, with unique arguments
        value_order: Ordering of the values

    Returns:
        The subset of points satisfying the predicate
    """
    points = list(points)
    values = [point.value for point in points]
    return [
        point
        for index, point in enumerate(points)
        if is_local_maximum(values, index, value_order)
    ]


def local_maxima_mask(values: Any) -> np.ndarray:
    """
    Boolean mask of local maxima for a 1-D numeric array in argument order.

    Example:
        >>> local_maxima_mask([1, 3, 3, 2, 5])
        array([False,  True,  True, False,  True])
    """
    values = np.asarray(values)
    if values.ndim != 1:
        raise ValueError(f"expected a 1-D array, got shape {values.shape}")

    n = values.shape[0]
    left_ok = np.ones(n, dtype=bool)
    right_ok = np.ones(n, dtype=bool)
    if n > 1:
        left_ok[1:] = values[:-1] <= values[1:]
        right_ok[:-1] = values[1:] <= values[:-1]
    return left_ok & right_ok
