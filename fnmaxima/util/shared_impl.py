"""
Shared Implementation Ownership
===============================

This module provides SharedImpl and Lease, the reference-counting pieces behind
copy-on-write FunctionMaxima handles.

- SharedImpl pairs one implementation with the number of handles that own it.
- Lease is a handle's claim on a SharedImpl. It can be rebound to a freshly
  cloned implementation, and it gives up its claim when the handle is
  garbage-collected (via ``weakref.finalize``).

Memory savings example:
- 1000 handles copied from one function with 10,000 points
- Traditional: 1000 x 10,000 point references
- CoW: 1 shared implementation + 1000 leases, until someone writes
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class SharedImpl:
    """Implementation shared by ``owners`` handles."""

    impl: Any
    owners: int = 1

    def acquire(self) -> "SharedImpl":
        self.owners += 1
        return self

    def release(self) -> None:
        self.owners -= 1

    @property
    def is_shared(self) -> bool:
        return self.owners > 1


class Lease:
    """One handle's ownership claim on a SharedImpl."""

    __slots__ = ("_shared",)

    def __init__(self, shared: SharedImpl):
        self._shared: Optional[SharedImpl] = shared

    @property
    def shared(self) -> SharedImpl:
        if self._shared is None:
            raise RuntimeError("Lease has already been released")
        return self._shared

    def rebind(self, shared: SharedImpl) -> None:
        """Switch to another SharedImpl, releasing the current one."""
        previous = self._shared
        self._shared = shared
        if previous is not None:
            previous.release()

    def release(self) -> None:
        if self._shared is not None:
            self._shared.release()
            self._shared = None
