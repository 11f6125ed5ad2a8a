"""
FunctionMaxima - Copy-on-Write Function with Local Maxima
=========================================================

FunctionMaxima is the public handle. It maps ordered arguments to ordered values
and always knows the function's local maxima.

Copies are cheap: ``copy()`` makes a second handle that shares the same
implementation. The first write through a handle whose implementation is shared
clones the implementation, applies the write to the clone, and only then
switches the handle over. If the write fails the clone is dropped and the
handle keeps pointing at the untouched shared implementation.

Example:
    f = FunctionMaxima()
    for argument, value in [(1, 10), (2, 20), (3, 10), (4, 30), (5, 5)]:
        f.set_value(argument, value)

    [p.as_tuple() for p in f.maxima()]   # [(4, 30), (2, 20)]

    g = f.copy()                          # shares the implementation
    g.erase(4)                            # g clones, f is unchanged
    [p.as_tuple() for p in g.maxima()]   # [(2, 20)]
"""

import logging
import weakref
from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

import numpy as np

from .engine import FunctionMaximaImpl, InvalidArgument
from .ordering import as_ordering
from .point import PayloadPool, Point
from .scan import local_maxima_mask
from .util.shared_impl import Lease, SharedImpl


class FunctionMaxima:
    """
    Mutable partial function with an always-current index of local maxima.

    Features:
    - O(log n) lookup, O(log n) comparisons per update
    - Local maxima maintained incrementally (at most three points re-evaluated)
    - Strong guarantee: a failed update leaves no trace
    - Copy-on-write sharing between handles
    - Shared argument/value payload cells

    Usage:
        f = FunctionMaxima()
        f.set_value(1, 10)
        f[2] = 20
        f.value_at(1)          # 10
        list(f.maxima())       # [Point(argument=2, value=20)]
        f.erase(2)
    """

    def __init__(
        self,
        argument_order: Any = None,
        value_order: Any = None,
        intern_payloads: bool = True,
        pool_size: int = 1024,
    ):
        """
        Initialize an empty function.

        Args:
            argument_order: Ordering of arguments (None for natural ``<``)
            value_order: Ordering of values (None for natural ``<``)
            intern_payloads: Whether payload objects reused across points share a cell
            pool_size: Number of interned cells kept by the payload pool
        """
        pool = PayloadPool(maxsize=pool_size if intern_payloads else 0)
        impl = FunctionMaximaImpl(
            as_ordering(argument_order), as_ordering(value_order), pool
        )
        self._attach(SharedImpl(impl))

    def _attach(self, shared: SharedImpl) -> None:
        self._lease = Lease(shared)
        self._finalizer = weakref.finalize(self, self._lease.release)

        # Statistics
        self._stats = {
            "sets": 0,
            "erases": 0,
            "noops": 0,
            "rollbacks": 0,
            "clones": 0,
        }

    @property
    def _impl(self) -> FunctionMaximaImpl:
        return self._lease.shared.impl

    # ------------------------------------------------------------------
    # Copy-on-write
    # ------------------------------------------------------------------

    def _mutate(self, operation: Callable[..., bool], *args: Any) -> bool:
        """Run operation(impl, *args), cloning first if the impl is shared."""
        shared = self._lease.shared

        if not shared.is_shared:
            try:
                return operation(shared.impl, *args)
            except BaseException:
                self._stats["rollbacks"] += 1
                raise

        logging.debug(
            f"Cloning implementation shared by {shared.owners} handles "
            f"({shared.impl.size()} points)"
        )
        clone = shared.impl.clone()
        try:
            changed = operation(clone, *args)
            fresh = SharedImpl(clone)
        except BaseException as e:
            logging.debug(f"Discarding clone after failed write: {e!r}")
            self._stats["rollbacks"] += 1
            raise

        self._lease.rebind(fresh)
        self._stats["clones"] += 1
        return changed

    @property
    def is_shared(self) -> bool:
        """Whether another handle currently shares this implementation."""
        return self._lease.shared.is_shared

    def copy(self) -> "FunctionMaxima":
        """Cheap copy sharing the implementation until either side writes."""
        other = type(self).__new__(type(self))
        other._attach(self._lease.shared.acquire())
        return other

    def __copy__(self) -> "FunctionMaxima":
        return self.copy()

    def __deepcopy__(self, memo: Dict[int, Any]) -> "FunctionMaxima":
        other = type(self).__new__(type(self))
        other._attach(SharedImpl(self._impl.clone()))
        return other

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set_value(self, argument: Any, value: Any) -> None:
        """
        Define the function at argument to be value.

        Setting a value equivalent to the current one is a no-op and never
        clones a shared implementation.
        """
        if self._impl.is_noop_set(argument, value):
            self._stats["noops"] += 1
            return
        self._mutate(FunctionMaximaImpl.set_value, argument, value)
        self._stats["sets"] += 1

    def erase(self, argument: Any) -> None:
        """Make the function undefined at argument. No-op if it already is."""
        if self._impl.find(argument) is None:
            self._stats["noops"] += 1
            return
        self._mutate(FunctionMaximaImpl.erase, argument)
        self._stats["erases"] += 1

    def update(self, items: Any) -> None:
        """
        Set many values at once.

        The whole batch is applied to a private clone and published only when
        every pair went in, so either all of it lands or none of it does.

        Args:
            items: A mapping, or an iterable of (argument, value) pairs
        """
        if isinstance(items, Mapping):
            items = items.items()

        shared = self._lease.shared
        clone = shared.impl.clone()
        try:
            changed = sum(1 for a, v in items if clone.set_value(a, v))
            fresh = SharedImpl(clone) if shared.is_shared else None
        except BaseException as e:
            logging.debug(f"Batch update rolled back: {e!r}")
            self._stats["rollbacks"] += 1
            raise

        if fresh is not None:
            self._lease.rebind(fresh)
            self._stats["clones"] += 1
        else:
            shared.impl.assign(clone)
        self._stats["sets"] += changed

    def __setitem__(self, argument: Any, value: Any) -> None:
        self.set_value(argument, value)

    def __delitem__(self, argument: Any) -> None:
        """Erase argument, raises InvalidArgument if not present."""
        if argument not in self:
            raise InvalidArgument(argument)
        self.erase(argument)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def value_at(self, argument: Any) -> Any:
        """
        Value at argument.

        Raises:
            InvalidArgument: If the function is not defined at argument
        """
        return self._impl.value_at(argument)

    def get(self, argument: Any, default: Any = None) -> Any:
        point = self._impl.find(argument)
        return point.value if point is not None else default

    def find(self, argument: Any) -> Optional[Point]:
        """The point at argument, or None."""
        return self._impl.find(argument)

    def size(self) -> int:
        """Number of points in the function (not the number of maxima)."""
        return self._impl.size()

    def maxima_count(self) -> int:
        return self._impl.maxima_count()

    def maxima(self) -> Iterator[Point]:
        """Local maxima, largest value first, ties by smallest argument."""
        return self._impl.maxima()

    def items(self) -> Iterator[Tuple[Any, Any]]:
        """(argument, value) pairs by increasing argument."""
        return (point.as_tuple() for point in self._impl.points())

    def __iter__(self) -> Iterator[Point]:
        return self._impl.points()

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, argument: Any) -> bool:
        return self._impl.find(argument) is not None

    def __getitem__(self, argument: Any) -> Any:
        return self.value_at(argument)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FunctionMaxima):
            return NotImplemented
        if self._impl is other._impl:
            return True
        return list(self.items()) == list(other.items())

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self.items())!r})"

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def verify(self) -> bool:
        """Check the maxima index against a full rescan of the function."""
        problems = self._impl.check_consistency()
        for problem in problems:
            logging.warning(f"FunctionMaxima inconsistency: {problem}")
        return not problems

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics about operations through this handle."""
        stats = self._stats.copy()
        stats["size"] = self.size()
        stats["maxima"] = self.maxima_count()
        stats["shared"] = self.is_shared
        stats["owners"] = self._lease.shared.owners
        stats["pool"] = self._impl.pool.get_stats()
        return stats

    # ------------------------------------------------------------------
    # Bulk construction
    # ------------------------------------------------------------------

    @classmethod
    def from_items(cls, items: Any, **config: Any) -> "FunctionMaxima":
        """
        Build a function from a mapping or (argument, value) pairs.

        Later pairs win for equivalent arguments. Maxima come from one rescan
        instead of n incremental updates.
        """
        if isinstance(items, Mapping):
            items = items.items()
        function = cls(**config)
        function._impl.load(items)
        return function

    @classmethod
    def from_arrays(
        cls,
        arguments: Any,
        values: Any,
        intern_payloads: bool = True,
        pool_size: int = 1024,
    ) -> "FunctionMaxima":
        """
        Build a function from two numeric arrays under natural ordering.

        Args:
            arguments: 1-D array-like of arguments
            values: 1-D array-like of values, same length

        Raises:
            ValueError: If the arrays are not 1-D or differ in length
        """
        arguments = np.asarray(arguments)
        values = np.asarray(values)
        if arguments.ndim != 1 or arguments.shape != values.shape:
            raise ValueError(
                f"arguments and values must be 1-D arrays of equal length, "
                f"got shapes {arguments.shape} and {values.shape}"
            )

        order = np.argsort(arguments, kind="stable")
        arguments = arguments[order]
        values = values[order]

        # Keep the last of each run of equal arguments
        keep = np.ones(arguments.shape[0], dtype=bool)
        if arguments.shape[0] > 1:
            keep[:-1] = arguments[1:] != arguments[:-1]
        arguments = arguments[keep]
        values = values[keep]

        function = cls(intern_payloads=intern_payloads, pool_size=pool_size)
        impl = function._impl
        points = [
            Point(impl.pool.cell(a), impl.pool.cell(v))
            for a, v in zip(arguments.tolist(), values.tolist())
        ]
        mask = local_maxima_mask(values).tolist()
        impl.adopt(points, [point for point, is_max in zip(points, mask) if is_max])
        return function


def create_function(
    argument_order: Any = None,
    value_order: Any = None,
    intern_payloads: bool = True,
    pool_size: int = 1024,
) -> FunctionMaxima:
    """
    Create an empty FunctionMaxima with specified settings.

    Args:
        argument_order: Ordering of arguments (None for natural ``<``)
        value_order: Ordering of values (None for natural ``<``)
        intern_payloads: Whether payload objects reused across points share a cell
        pool_size: Number of interned cells kept by the payload pool

    Returns:
        Configured FunctionMaxima instance
    """
    return FunctionMaxima(
        argument_order=argument_order,
        value_order=value_order,
        intern_payloads=intern_payloads,
        pool_size=pool_size,
    )
