"""
Sorted Point Indices
====================

Two sorted-list indices over Points, both driven by user-supplied orderings
through ``bisect`` with a ``cmp_to_key`` adapter:

- FunctionIndex: points by increasing argument. Behaves as an ordered
  multiset: ``insert`` places a point after any argument-equivalent ones, so
  an update can hold the old and the new point side by side until it commits.
- MaximaIndex: points by decreasing value, ties broken by increasing argument.

Positions are plain list indices. Lookups (``find``, ``bisect``, ``insert``)
compare; removals by index (``pop``) and by identity (``discard_identical``)
never do, so they are safe to use on rollback paths.
"""

from bisect import bisect_left, bisect_right
from typing import Any, Iterator, List, Optional

from ..ordering import Ordering, sort_key
from ..point import Point


class FunctionIndex:
    """Points ordered by argument."""

    __slots__ = ("_order", "_key", "_points")

    def __init__(self, order: Ordering, points: Optional[List[Point]] = None):
        self._order = order
        self._key = sort_key(order)
        self._points: List[Point] = points if points is not None else []

    def _point_key(self, point: Point):
        return self._key(point.argument)

    def find(self, argument: Any) -> Optional[int]:
        """Index of the point at argument, or None."""
        points = self._points
        index = bisect_left(points, self._key(argument), key=self._point_key)
        if index < len(points) and self._order.compare(
            points[index].argument, argument
        ) == 0:
            return index
        return None

    def insert(self, point: Point) -> int:
        """Insert after any argument-equivalent points and return the index."""
        index = bisect_right(self._points, self._key(point.argument), key=self._point_key)
        self._points.insert(index, point)
        return index

    def pop(self, index: int) -> Point:
        return self._points.pop(index)

    def copy(self) -> "FunctionIndex":
        return FunctionIndex(self._order, self._points.copy())

    @property
    def points(self) -> List[Point]:
        return self._points

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)


class MaximaIndex:
    """
    Points ordered by (value descending, argument ascending).

    Iteration therefore yields the largest maximum first, and among equal
    values the one with the smallest argument.
    """

    __slots__ = ("_argument_order", "_value_order", "_key", "_points")

    def __init__(
        self,
        argument_order: Ordering,
        value_order: Ordering,
        points: Optional[List[Point]] = None,
    ):
        self._argument_order = argument_order
        self._value_order = value_order
        self._key = sort_key(self)
        self._points: List[Point] = points if points is not None else []

    def compare(self, a: Point, b: Point) -> int:
        """Three-way comparison in maxima order."""
        by_value = self._value_order.compare(b.value, a.value)
        if by_value != 0:
            return by_value
        return self._argument_order.compare(a.argument, b.argument)

    @property
    def key(self):
        """``key=`` callable sorting points into maxima order."""
        return self._key

    def bisect(self, point: Point) -> int:
        return bisect_left(self._points, self._key(point), key=self._key)

    def find(self, point: Point) -> Optional[int]:
        """Index of the entry equivalent to point in maxima order, or None."""
        index = self.bisect(point)
        if index < len(self._points) and self.compare(self._points[index], point) == 0:
            return index
        return None

    def insert_at(self, index: int, point: Point) -> None:
        self._points.insert(index, point)

    def pop(self, index: int) -> Point:
        return self._points.pop(index)

    def discard_identical(self, point: Point) -> bool:
        """Remove this exact point object without comparing anything."""
        for index, candidate in enumerate(self._points):
            if candidate is point:
                del self._points[index]
                return True
        return False

    def copy(self) -> "MaximaIndex":
        return MaximaIndex(self._argument_order, self._value_order, self._points.copy())

    @property
    def points(self) -> List[Point]:
        return self._points

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)
