"""
FnMaxima Utils - Storage Building Blocks
========================================

This package contains the containers the FnMaxima engine is built from.

Classes:
- FunctionIndex: Points sorted by argument (ordered multiset semantics)
- MaximaIndex: Points sorted by value descending, argument ascending
- SharedImpl: Implementation paired with its owner count for copy-on-write
- Lease: A handle's releasable claim on a SharedImpl
"""

from .shared_impl import Lease, SharedImpl
from .sorted_points import FunctionIndex, MaximaIndex

__all__ = [
    "FunctionIndex",
    "MaximaIndex",
    "SharedImpl",
    "Lease",
]
