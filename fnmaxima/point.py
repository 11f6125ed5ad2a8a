"""
Function Points and Shared Payload Cells
========================================

A Point is an immutable (argument, value) pair. The argument and the value are
each held in a SharedCell, a read-only box that can be aliased by any number of
points and by any number of copy-on-write snapshots of a function.

Sharing happens in two places:
- replacing the value at an existing argument re-uses the old argument cell
- a PayloadPool interns hashable payloads, so one payload object set at several
  arguments (or in different functions built from the same pool) shares one cell

Memory savings example:
- 100,000 points whose values come from a 10-level quantiser
- Traditional: 100,000 value objects
- Pooled: 10 shared cells + 100,000 lightweight points
"""

from dataclasses import dataclass
from typing import Any, Iterator, Tuple

from cachetools import LRUCache


@dataclass(frozen=True, slots=True, eq=False)
class SharedCell:
    """
    Read-only holder for one argument or value payload.

    Cells compare by identity: two cells are the same cell or they are not.
    Payload equality is the Point's business.
    """

    payload: Any


class PayloadPool:
    """
    Interning pool handing out SharedCells for payloads.

    Hashable payloads are looked up in a bounded LRU cache keyed by
    ``(type, payload)``, so ``1``, ``1.0`` and ``True`` never alias each other.
    A cached cell is only handed out for the very object it holds: equal but
    distinct payloads such as ``0.0`` and ``-0.0`` or ``Decimal("1.0")`` and
    ``Decimal("1.00")`` each keep their own cell. Unhashable payloads (lists,
    dicts, arrays) always get a fresh cell.

    ``lookup`` only reads the pool; ``record`` counts and interns a cell once
    it is in use. The engine records after an update can no longer fail, so a
    rolled-back update leaves the pool and its statistics untouched.

    Usage:
        pool = PayloadPool(maxsize=256)
        level = "high"
        a = pool.cell(level)
        b = pool.cell(level)
        assert a is b
    """

    def __init__(self, maxsize: int = 1024):
        """
        Initialize the pool.

        Args:
            maxsize: Number of interned cells kept alive by the pool.
                     ``0`` disables interning.
        """
        self._maxsize = maxsize
        self._cells = LRUCache(maxsize=maxsize) if maxsize > 0 else None
        self._stats = {"requests": 0, "shared": 0}

    def _intern_key(self, payload: Any):
        """Return a cache key for payload, or None if it cannot be interned."""
        try:
            key = (type(payload), payload)
            hash(key)
            return key
        except TypeError:
            return None

    def lookup(self, payload: Any) -> SharedCell:
        """Interned cell holding this exact payload object, else a fresh cell."""
        if self._cells is None:
            return SharedCell(payload)

        key = self._intern_key(payload)
        if key is not None:
            existing = self._cells.get(key)
            # Equal under == is not enough, the caller gets back its own object
            if existing is not None and existing.payload is payload:
                return existing
        return SharedCell(payload)

    def record(self, *cells: SharedCell) -> None:
        """Count cells obtained from ``lookup`` and intern the new ones."""
        for cell in cells:
            self._stats["requests"] += 1
            if self._cells is None:
                continue
            key = self._intern_key(cell.payload)
            if key is None:
                continue
            if self._cells.get(key) is cell:
                self._stats["shared"] += 1
            else:
                self._cells[key] = cell

    def cell(self, payload: Any) -> SharedCell:
        """Return a cell holding payload, re-using an interned one if possible."""
        cell = self.lookup(payload)
        self.record(cell)
        return cell

    def clear(self) -> None:
        """Forget all interned cells. Cells already held by points stay valid."""
        if self._cells is not None:
            self._cells.clear()

    @property
    def maxsize(self) -> int:
        return self._maxsize

    def __len__(self) -> int:
        return len(self._cells) if self._cells is not None else 0

    def get_stats(self):
        """Get statistics about interning."""
        stats = self._stats.copy()
        stats["interned"] = len(self)
        stats["share_rate"] = (
            stats["shared"] / stats["requests"] if stats["requests"] > 0 else 0
        )
        return stats


class Point:
    """
    Immutable (argument, value) pair of a function.

    Points unpack like a 2-tuple::

        for argument, value in function:
            ...

    Two points are equal when their payloads are equal under ``==``; ordering
    of points is the business of the indices that hold them.
    """

    __slots__ = ("_argument", "_value")

    def __init__(self, argument: SharedCell, value: SharedCell):
        self._argument = argument
        self._value = value

    @classmethod
    def of(cls, argument: Any, value: Any) -> "Point":
        """Build a point with private cells."""
        return cls(SharedCell(argument), SharedCell(value))

    @property
    def argument(self) -> Any:
        return self._argument.payload

    @property
    def value(self) -> Any:
        return self._value.payload

    @property
    def argument_cell(self) -> SharedCell:
        return self._argument

    @property
    def value_cell(self) -> SharedCell:
        return self._value

    def with_value(self, value: SharedCell) -> "Point":
        """New point at this point's argument cell with a different value."""
        return Point(self._argument, value)

    def as_tuple(self) -> Tuple[Any, Any]:
        return (self._argument.payload, self._value.payload)

    def __iter__(self) -> Iterator[Any]:
        yield self._argument.payload
        yield self._value.payload

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Point):
            return self.as_tuple() == other.as_tuple()
        if isinstance(other, tuple):
            return self.as_tuple() == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.as_tuple())

    def __repr__(self) -> str:
        return f"Point(argument={self.argument!r}, value={self.value!r})"
