"""
Transactional Maxima Engine
===========================

FunctionMaximaImpl keeps a partial function (argument -> value) together with
the set of its local maxima, and updates the maxima incrementally: a
``set_value`` or ``erase`` re-evaluates at most three points (the edited point
and its two neighbours) instead of rescanning the function.

Every mutation is all-or-nothing. Maxima changes for one edit are staged in a
MaximaTransaction:

1. points that become maxima are inserted straight away (and remembered)
2. points that stop being maxima are only marked for removal
3. removal positions are resolved while failure is still possible
4. commit deletes the marked positions; rollback removes the insertions

Commit and rollback perform no comparisons, so a misbehaving ordering or a
MemoryError anywhere before commit leaves the structure exactly as it was.

Neighbour skipping:
    During ``set_value`` the function briefly holds both the old and the new
    point for the same argument. When a neighbour's maximum status is
    evaluated, the old point is skipped over as if it were already gone.
    ``erase`` uses the same rule with the erased point as the one to skip.
"""

import logging
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from .ordering import Ordering, equivalent, less_equal, sort_key
from .point import PayloadPool, Point
from .scan import scan_local_maxima
from .util.sorted_points import FunctionIndex, MaximaIndex

# ============================================================================
# EXCEPTIONS
# ============================================================================


class InvalidArgument(LookupError):
    """Raised when looking up an argument the function is not defined at."""

    def __init__(self, argument: Any = None):
        super().__init__(argument)
        self.argument = argument

    def __str__(self) -> str:
        return f"invalid argument value: {self.argument!r}"


class ConcurrentModificationError(RuntimeError):
    """Raised when a function is mutated while one of its iterators is live."""

    pass


# ============================================================================
# TRANSACTION
# ============================================================================


class MaximaTransaction:
    """
    Staged changes to a MaximaIndex for a single mutation.

    Usage:
        txn = MaximaTransaction(maxima)
        try:
            txn.insert(point)
            txn.defer_removal(other)
            txn.prepare()
        except BaseException:
            txn.rollback()
            raise
        txn.commit()
    """

    __slots__ = ("_maxima", "_inserted", "_doomed", "_positions")

    def __init__(self, maxima: MaximaIndex):
        self._maxima = maxima
        self._inserted: List[Point] = []
        self._doomed: List[Point] = []
        self._positions: List[int] = []

    def insert(self, point: Point) -> None:
        index = self._maxima.bisect(point)
        # Reserve the bookkeeping slot first so the insertion is always tracked
        self._inserted.append(point)
        try:
            self._maxima.insert_at(index, point)
        except BaseException:
            self._inserted.pop()
            raise

    def defer_removal(self, point: Point) -> None:
        """Remove point from the maxima on commit, if it is indexed by then."""
        self._doomed.append(point)

    def prepare(self) -> None:
        """Resolve removal positions. Last step that may fail."""
        positions = []
        for point in self._doomed:
            index = self._maxima.find(point)
            if index is not None:
                positions.append(index)
        positions.sort(reverse=True)
        self._positions = positions

    def commit(self) -> None:
        for index in self._positions:
            self._maxima.pop(index)

    def rollback(self) -> None:
        for point in reversed(self._inserted):
            self._maxima.discard_identical(point)
        self._inserted.clear()

    @property
    def inserted(self) -> int:
        return len(self._inserted)


# ============================================================================
# IMPLEMENTATION
# ============================================================================


class FunctionMaximaImpl:
    """
    Function store plus maxima index, updated transactionally.

    This is the unshared implementation behind a FunctionMaxima handle. It does
    no copy-on-write of its own; ``clone`` produces an independent instance that
    shares the (immutable) points.

    Attributes:
        argument_order: Ordering of arguments
        value_order: Ordering of values
        pool: PayloadPool used to create argument and value cells
    """

    def __init__(
        self,
        argument_order: Ordering,
        value_order: Ordering,
        pool: Optional[PayloadPool] = None,
    ):
        self.argument_order = argument_order
        self.value_order = value_order
        self.pool = pool if pool is not None else PayloadPool()
        self._function = FunctionIndex(argument_order)
        self._maxima = MaximaIndex(argument_order, value_order)
        self._version = 0

    def clone(self) -> "FunctionMaximaImpl":
        """Independent copy sharing points, orderings and the payload pool."""
        other = FunctionMaximaImpl.__new__(FunctionMaximaImpl)
        other.argument_order = self.argument_order
        other.value_order = self.value_order
        other.pool = self.pool
        other._function = self._function.copy()
        other._maxima = self._maxima.copy()
        other._version = 0
        return other

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find(self, argument: Any) -> Optional[Point]:
        index = self._function.find(argument)
        return self._function[index] if index is not None else None

    def value_at(self, argument: Any) -> Any:
        point = self.find(argument)
        if point is None:
            raise InvalidArgument(argument)
        return point.value

    def is_noop_set(self, argument: Any, value: Any) -> bool:
        """Would ``set_value(argument, value)`` leave everything unchanged?"""
        point = self.find(argument)
        return point is not None and equivalent(self.value_order, point.value, value)

    def size(self) -> int:
        return len(self._function)

    def maxima_count(self) -> int:
        return len(self._maxima)

    @property
    def version(self) -> int:
        return self._version

    def points(self) -> Iterator[Point]:
        """Points by increasing argument."""
        return self._iterate(self._function.points)

    def maxima(self) -> Iterator[Point]:
        """Local maxima by decreasing value, then increasing argument."""
        return self._iterate(self._maxima.points)

    def _iterate(self, points: List[Point]) -> Iterator[Point]:
        # Captured now rather than on first next()
        version = self._version
        return self._walk(points, version)

    def _walk(self, points: List[Point], version: int) -> Iterator[Point]:
        index = 0
        while True:
            if self._version != version:
                raise ConcurrentModificationError(
                    "function was modified during iteration"
                )
            if index >= len(points):
                return
            yield points[index]
            index += 1

    # ------------------------------------------------------------------
    # Maximum predicate with neighbour skipping
    # ------------------------------------------------------------------

    def _next_skipping(self, index: int, ignore: Optional[int]) -> Optional[int]:
        following = index + 1
        if following == ignore:
            following += 1
        return following if following < len(self._function) else None

    def _prev_skipping(self, index: int, ignore: Optional[int]) -> Optional[int]:
        preceding = index - 1
        if preceding == ignore:
            preceding -= 1
        return preceding if preceding >= 0 else None

    def _is_local_maximum(self, index: int, ignore: Optional[int]) -> bool:
        value = self._function[index].value

        left = self._prev_skipping(index, ignore)
        if left is not None and not less_equal(
            self.value_order, self._function[left].value, value
        ):
            return False

        right = self._next_skipping(index, ignore)
        if right is not None and not less_equal(
            self.value_order, self._function[right].value, value
        ):
            return False

        return True

    def _stage(
        self, txn: MaximaTransaction, index: Optional[int], ignore: Optional[int]
    ) -> None:
        """Stage the maxima change for the point at index, if any."""
        if index is None or index == ignore:
            return

        point = self._function[index]
        indexed = self._maxima.find(point) is not None

        if self._is_local_maximum(index, ignore):
            if not indexed:
                txn.insert(point)
        elif indexed:
            txn.defer_removal(point)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_value(self, argument: Any, value: Any) -> bool:
        """
        Define the function at argument to be value.

        Returns:
            True if the function changed, False if the same (equivalent) value
            was already set there.

        Raises:
            Whatever the orderings or the allocator raise; the function is then
            left exactly as it was before the call.
        """
        old = self._function.find(argument)

        if old is not None:
            previous = self._function[old]
            if equivalent(self.value_order, previous.value, value):
                return False
            cells = (self.pool.lookup(value),)
            point = previous.with_value(cells[0])
        else:
            cells = (self.pool.lookup(argument), self.pool.lookup(value))
            point = Point(*cells)

        txn = MaximaTransaction(self._maxima)
        # Lands right after the old point, if there is one
        index = self._function.insert(point)

        try:
            self._stage(txn, self._next_skipping(index, old), old)
            self._stage(txn, index, old)
            self._stage(txn, self._prev_skipping(index, old), old)
            if old is not None:
                txn.defer_removal(self._function[old])
            txn.prepare()
            self.pool.record(*cells)
        except BaseException as e:
            logging.debug(f"set_value({argument!r}) rolled back: {e!r}")
            txn.rollback()
            self._function.pop(index)
            raise

        txn.commit()
        if old is not None:
            self._function.pop(old)
        self._version += 1
        return True

    def erase(self, argument: Any) -> bool:
        """
        Make the function undefined at argument.

        Returns:
            True if a point was removed, False if argument was absent.
        """
        index = self._function.find(argument)
        if index is None:
            return False

        txn = MaximaTransaction(self._maxima)
        try:
            self._stage(txn, self._next_skipping(index, index), index)
            self._stage(txn, self._prev_skipping(index, index), index)
            txn.defer_removal(self._function[index])
            txn.prepare()
        except BaseException as e:
            logging.debug(f"erase({argument!r}) rolled back: {e!r}")
            txn.rollback()
            raise

        txn.commit()
        self._function.pop(index)
        self._version += 1
        return True

    def load(self, items: Iterable[Tuple[Any, Any]]) -> None:
        """
        Replace the whole content from (argument, value) pairs.

        Later pairs win over earlier ones for equivalent arguments. Maxima are
        computed by a single rescan. Nothing changes if this raises.
        """
        points = [Point(self.pool.lookup(a), self.pool.lookup(v)) for a, v in items]
        argument_key = sort_key(self.argument_order)
        # Stable, so equivalent arguments keep insertion order
        points.sort(key=lambda point: argument_key(point.argument))

        unique: List[Point] = []
        for point in points:
            if unique and equivalent(
                self.argument_order, unique[-1].argument, point.argument
            ):
                unique[-1] = point
            else:
                unique.append(point)

        maxima = scan_local_maxima(unique, self.value_order)
        for point in unique:
            self.pool.record(point.argument_cell, point.value_cell)
        self.adopt(unique, maxima)

    def adopt(self, points: List[Point], maxima: List[Point]) -> None:
        """Install precomputed content in one step."""
        function = FunctionIndex(self.argument_order, points)
        maxima_index = MaximaIndex(self.argument_order, self.value_order)
        maxima_index.points.extend(sorted(maxima, key=maxima_index.key))
        self._function = function
        self._maxima = maxima_index
        self._version += 1

    def assign(self, other: "FunctionMaximaImpl") -> None:
        """Take over the content of other (used to publish a batch)."""
        self._function = other._function
        self._maxima = other._maxima
        self._version += 1

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------

    def check_consistency(self) -> List[str]:
        """
        Compare the maxima index against a full rescan.

        Returns:
            Descriptions of every problem found (empty when consistent)
        """
        problems = []
        points = self._function.points

        for left, right in zip(points, points[1:]):
            if self.argument_order.compare(left.argument, right.argument) >= 0:
                problems.append(
                    f"arguments out of order: {left.argument!r}, {right.argument!r}"
                )

        expected = sorted(
            scan_local_maxima(points, self.value_order), key=self._maxima.key
        )
        actual = self._maxima.points
        if len(expected) != len(actual) or any(
            a is not b for a, b in zip(expected, actual)
        ):
            problems.append(
                f"maxima index {[p.as_tuple() for p in actual]} != "
                f"rescan {[p.as_tuple() for p in expected]}"
            )
        return problems
