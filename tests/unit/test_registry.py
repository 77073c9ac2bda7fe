"""
Tests for the component registry.
"""

import pytest

from sparse_sgd import (
    AdagradOptimizer, L2Penalty, LogisticRegression, SGDOptimizer,
    create_from_config, get_registry, list_registered, register,
)
from sparse_sgd.api.registry import unregister


class TestRegistry:
    def test_defaults_registered(self):
        registered = list_registered()
        assert {"logistic", "least_squares", "hinge"} <= set(registered["family"])
        assert {"sgd", "adagrad"} <= set(registered["optimizer"])
        assert {"constant", "inverse", "inverse_sqrt", "exponential"} <= set(registered["schedule"])
        assert {"none", "l2"} <= set(registered["penalty"])

    def test_get_registry(self):
        assert get_registry("family", "logistic") is LogisticRegression
        assert get_registry("optimizer", "adagrad") is AdagradOptimizer

    def test_unknown_name_and_kind(self):
        with pytest.raises(KeyError):
            get_registry("family", "poisson")
        with pytest.raises(ValueError):
            get_registry("solver", "fista")
        with pytest.raises(ValueError):
            list_registered("solver")

    def test_create_fresh_instances(self):
        first = create_from_config({"kind": "optimizer", "name": "sgd", "params": {"initial_learning_rate": 0.3}})
        second = create_from_config({"kind": "optimizer", "name": "sgd", "params": {"initial_learning_rate": 0.7}})
        assert isinstance(first, SGDOptimizer)
        assert first is not second
        assert (first.initial_learning_rate, second.initial_learning_rate) == (0.3, 0.7)

    def test_create_penalty(self):
        penalty = create_from_config({"kind": "penalty", "name": "l2", "params": {"lam": 0.2}})
        assert isinstance(penalty, L2Penalty)
        assert penalty.lam == 0.2

    def test_create_errors(self):
        with pytest.raises(ValueError):
            create_from_config({"name": "sgd"})
        with pytest.raises(TypeError):
            create_from_config({"kind": "optimizer", "name": "sgd", "params": {"momentum": 0.9}})
        with pytest.raises(TypeError):
            create_from_config({"kind": "schedule", "name": "inverse", "params": {"x": 1}})

    def test_function_components_returned_as_is(self):
        schedule = create_from_config({"kind": "schedule", "name": "constant"})
        assert schedule(10, 0.5, 100) == 0.5

    def test_custom_registration(self):
        @register("family", "test_custom")
        class Custom(LogisticRegression):
            name = "test_custom"

        class Replacement(LogisticRegression):
            name = "test_custom"

        try:
            assert get_registry("family", "test_custom") is Custom
            assert Custom._sparse_sgd_registry["name"] == "test_custom"
            with pytest.warns(UserWarning, match="Overriding"):
                register("family", "test_custom")(Replacement)
            assert get_registry("family", "test_custom") is Replacement
            register("family", "test_custom", override=True)(Custom)
            assert get_registry("family", "test_custom") is Custom
        finally:
            assert unregister("family", "test_custom")
        assert not unregister("family", "test_custom")

    def test_incomplete_component_warns(self):
        with pytest.warns(UserWarning):
            @register("optimizer", "test_incomplete")
            class Incomplete:
                def learning_rate_at(self, epoch):
                    return 0.1
        unregister("optimizer", "test_incomplete")
