"""
Shared pytest fixtures and configuration for FnMaxima tests.
"""

import pytest

from fnmaxima import FunctionMaxima

SCENARIO = [(1, 10), (2, 20), (3, 10), (4, 30), (5, 5)]


@pytest.fixture
def function():
    """Provide a fresh, empty FunctionMaxima."""
    return FunctionMaxima()


@pytest.fixture
def scenario():
    """A five-point function with maxima at 4 and 2."""
    f = FunctionMaxima()
    for argument, value in SCENARIO:
        f.set_value(argument, value)
    return f
