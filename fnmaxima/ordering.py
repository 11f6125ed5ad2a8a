"""
FnMaxima Orderings - Comparator Protocol for Arguments and Values
=================================================================

Both indices of a FunctionMaxima are parameterised by orderings supplied from
outside. An ordering is anything with a three-way ``compare(a, b)`` method:

- negative when ``a`` orders before ``b``
- zero when neither orders before the other (the two are *equivalent*)
- positive when ``b`` orders before ``a``

Orderings may have ties (weak orderings), so equivalence is not the same thing
as ``==``. The only requirement is that an ordering is a valid strict weak
ordering and stays consistent for the lifetime of an instance.

Usage:
    order = as_ordering(None)                  # natural "<" ordering
    order = KeyOrdering(str.lower)              # case-insensitive strings
    order = ReversedOrdering(NaturalOrdering())
    order = LessThanOrdering(lambda a, b: abs(a) < abs(b))
"""

import functools
from typing import Any, Callable, Optional, Protocol, runtime_checkable


@runtime_checkable
class Ordering(Protocol):
    """Three-way comparison used by both point indices."""

    def compare(self, a: Any, b: Any) -> int: ...


class NaturalOrdering:
    """
    Ordering by the objects' own ``<``.

    Only ``__lt__`` is consulted, so types that define a strict weak ordering
    through ``<`` alone behave correctly, ties included.
    """

    __slots__ = ()

    def compare(self, a: Any, b: Any) -> int:
        if a < b:
            return -1
        if b < a:
            return 1
        return 0

    def __repr__(self) -> str:
        return "NaturalOrdering()"


class LessThanOrdering:
    """Ordering built from a strict "less" predicate."""

    __slots__ = ("_less",)

    def __init__(self, less: Callable[[Any, Any], bool]):
        self._less = less

    def compare(self, a: Any, b: Any) -> int:
        if self._less(a, b):
            return -1
        if self._less(b, a):
            return 1
        return 0

    def __repr__(self) -> str:
        return f"LessThanOrdering({self._less!r})"


class FunctionOrdering:
    """Ordering wrapping an old-style ``cmp(a, b)`` function."""

    __slots__ = ("_cmp",)

    def __init__(self, cmp: Callable[[Any, Any], int]):
        self._cmp = cmp

    def compare(self, a: Any, b: Any) -> int:
        return self._cmp(a, b)

    def __repr__(self) -> str:
        return f"FunctionOrdering({self._cmp!r})"


class KeyOrdering:
    """
    Ordering of ``key(x)`` under a base ordering.

    Args:
        key: Projection applied to both operands before comparing
        base: Ordering for the projected keys (default: natural)
    """

    __slots__ = ("_key", "_base")

    def __init__(self, key: Callable[[Any], Any], base: Optional[Ordering] = None):
        self._key = key
        self._base = base if base is not None else NaturalOrdering()

    def compare(self, a: Any, b: Any) -> int:
        return self._base.compare(self._key(a), self._key(b))

    def __repr__(self) -> str:
        return f"KeyOrdering({self._key!r}, {self._base!r})"


class ReversedOrdering:
    """The base ordering, turned around."""

    __slots__ = ("_base",)

    def __init__(self, base: Optional[Ordering] = None):
        self._base = base if base is not None else NaturalOrdering()

    def compare(self, a: Any, b: Any) -> int:
        return self._base.compare(b, a)

    def __repr__(self) -> str:
        return f"ReversedOrdering({self._base!r})"


NATURAL = NaturalOrdering()


def as_ordering(obj: Any) -> Ordering:
    """
    Coerce a user-supplied ordering argument into an Ordering.

    Args:
        obj: ``None`` for the natural ordering, an object with a ``compare``
             method, or a three-way cmp callable

    Returns:
        An object satisfying the Ordering protocol

    Raises:
        TypeError: If obj cannot be used as an ordering
    """
    if obj is None:
        return NATURAL
    if isinstance(obj, Ordering):
        return obj
    if callable(obj):
        return FunctionOrdering(obj)
    raise TypeError(f"{type(obj).__name__!r} object is not a valid ordering")


def equivalent(order: Ordering, a: Any, b: Any) -> bool:
    """Neither operand orders before the other."""
    return order.compare(a, b) == 0


def less_equal(order: Ordering, a: Any, b: Any) -> bool:
    """``a`` orders before ``b`` or is equivalent to it."""
    return order.compare(a, b) <= 0


def sort_key(order: Ordering) -> Callable[[Any], Any]:
    """Adapt an ordering into a ``key=`` callable for sorting and bisect."""
    return functools.cmp_to_key(order.compare)
