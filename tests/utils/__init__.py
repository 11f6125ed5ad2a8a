"""
Test utilities for FnMaxima.

This package contains the reference model and failure-injection helpers
shared by the unit and integration tests.
"""

from .failing import FailingOrdering, InjectedFailure, same_snapshot, snapshot
from .oracle import assert_matches_model, oracle_items, oracle_maxima

__all__ = [
    "FailingOrdering",
    "InjectedFailure",
    "snapshot",
    "same_snapshot",
    "oracle_maxima",
    "oracle_items",
    "assert_matches_model",
]
