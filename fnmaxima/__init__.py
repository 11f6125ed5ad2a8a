"""
FnMaxima - Functions That Know Their Local Maxima

A mutable, copy-on-write mapping from ordered arguments to ordered values that
keeps the set of its local maxima up to date on every update, touching at most
three points per change and rolling back cleanly on failure.
"""

__version__ = "0.1.0"

# Import the public handle and its factory
from .function_maxima import FunctionMaxima, create_function

# Exceptions and the engine behind the handle
from .engine import (
    ConcurrentModificationError,
    FunctionMaximaImpl,
    InvalidArgument,
    MaximaTransaction,
)

# Orderings for arguments and values
from .ordering import (
    FunctionOrdering,
    KeyOrdering,
    LessThanOrdering,
    NaturalOrdering,
    Ordering,
    ReversedOrdering,
    as_ordering,
)

# Points and shared payload cells
from .point import PayloadPool, Point, SharedCell

# Full-rescan helpers
from .scan import is_local_maximum, local_maxima_mask, scan_local_maxima

__all__ = [
    # Public handle
    "FunctionMaxima",
    "create_function",
    # Engine
    "FunctionMaximaImpl",
    "MaximaTransaction",
    # Exceptions
    "InvalidArgument",
    "ConcurrentModificationError",
    # Orderings
    "Ordering",
    "NaturalOrdering",
    "LessThanOrdering",
    "FunctionOrdering",
    "KeyOrdering",
    "ReversedOrdering",
    "as_ordering",
    # Points
    "Point",
    "SharedCell",
    "PayloadPool",
    # Rescan
    "is_local_maximum",
    "scan_local_maxima",
    "local_maxima_mask",
]
