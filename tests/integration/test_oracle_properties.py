"""
Randomised checks of FunctionMaxima against a brute-force dict model.

After every single operation the maxima must equal a from-scratch rescan, and
every lookup must agree with the model. Small argument and value ranges force
plenty of ties, plateaus and replacements of existing points.
"""

import random

import pytest

from fnmaxima import FunctionMaxima, InvalidArgument
from tests.utils import assert_matches_model, oracle_maxima


def random_operations(rng, count, arguments=12, values=4):
    for _ in range(count):
        argument = rng.randrange(arguments)
        if rng.random() < 0.7:
            yield ("set", argument, rng.randrange(values))
        else:
            yield ("erase", argument, None)


def apply(function, model, operation):
    kind, argument, value = operation
    if kind == "set":
        function.set_value(argument, value)
        model[argument] = value
    else:
        function.erase(argument)
        model.pop(argument, None)


class TestAgainstOracle:
    @pytest.mark.parametrize("seed", range(20))
    def test_every_step_matches_rescan(self, seed):
        rng = random.Random(seed)
        function = FunctionMaxima()
        model = {}

        for operation in random_operations(rng, 200):
            apply(function, model, operation)
            assert [p.as_tuple() for p in function.maxima()] == oracle_maxima(model)
            assert function.size() == len(model)

        assert_matches_model(function, model)
        assert function.verify()

    @pytest.mark.parametrize("seed", range(5))
    def test_erased_arguments_are_gone(self, seed):
        rng = random.Random(seed)
        function = FunctionMaxima()
        for argument in range(30):
            function.set_value(argument, rng.randrange(5))

        erased = rng.sample(range(30), 10)
        for argument in erased:
            function.erase(argument)

        for argument in erased:
            with pytest.raises(InvalidArgument):
                function.value_at(argument)
        assert function.size() == 20
        assert function.verify()

    def test_set_twice_equals_set_once(self):
        rng = random.Random(11)
        once, twice = FunctionMaxima(), FunctionMaxima()
        for operation in random_operations(rng, 300):
            kind, argument, value = operation
            if kind == "set":
                once.set_value(argument, value)
                twice.set_value(argument, value)
                twice.set_value(argument, value)
            else:
                once.erase(argument)
                twice.erase(argument)
        assert once == twice
        assert [p.as_tuple() for p in once.maxima()] == [
            p.as_tuple() for p in twice.maxima()
        ]

    def test_float_values_with_wide_range(self):
        rng = random.Random(5)
        function = FunctionMaxima()
        model = {}
        for _ in range(500):
            argument = rng.uniform(-1, 1)
            value = rng.choice([0.0, 0.5, rng.random()])
            apply(function, model, ("set", argument, value))
        assert_matches_model(function, model)


class TestCopyOnWriteAgainstOracle:
    @pytest.mark.parametrize("seed", range(10))
    def test_handles_never_observe_each_other(self, seed):
        rng = random.Random(seed)
        handles = [FunctionMaxima()]
        models = [{}]

        for operation in random_operations(rng, 300):
            roll = rng.random()
            if roll < 0.1:
                # Fork a new handle from a random existing one
                source = rng.randrange(len(handles))
                handles.append(handles[source].copy())
                models.append(dict(models[source]))
            elif roll < 0.15 and len(handles) > 1:
                victim = rng.randrange(len(handles))
                del handles[victim]
                del models[victim]
            else:
                target = rng.randrange(len(handles))
                apply(handles[target], models[target], operation)

            for handle, model in zip(handles, models):
                assert [p.as_tuple() for p in handle.maxima()] == oracle_maxima(model)

        for handle, model in zip(handles, models):
            assert_matches_model(handle, model)
