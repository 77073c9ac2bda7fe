"""
Test configuration and fixtures for sparse_sgd tests.

Provides common fixtures, a stub model family with a fixed loss slope, and
a synthetic sparse classification stream.
"""

import numpy as np
import pytest

from sparse_sgd import LabeledInstance, LinearModel, SGDOptimizer


class FixedSlopeFamily:
    """
    Model family whose loss derivative w.r.t. the score is a constant.

    ``gradient = slope * x``; ``slope=0`` gives empty gradients, which turns
    ``update`` into a pure clock/truncation/epoch step.
    """

    name = "fixed_slope"

    def __init__(self, slope: float = -1.0):
        self.slope = slope

    def gradient(self, instance, params):
        if self.slope == 0.0:
            return {}
        return {key: value * self.slope for key, value in instance.features.items()}

    def predict(self, features, params):
        return params.dot(features)

    def loss(self, instance, params):
        return self.slope * params.dot(instance.features)


class CountingPenalty:
    """No-op penalty that records how often it is asked for a decay factor."""

    def __init__(self):
        self.calls = 0

    def decay(self, ticks):
        self.calls += 1
        return np.ones(np.shape(ticks)) if np.ndim(ticks) else 1.0

    def value(self, weights):
        return 0.0


def make_model(family=None, param=None, learning_rate=0.1, **kwargs):
    """Linear model with its own constant-rate SGD optimizer."""
    optimizer = SGDOptimizer(schedule="constant", initial_learning_rate=learning_rate)
    return LinearModel(family if family is not None else FixedSlopeFamily(), optimizer,
                       param=param, **kwargs)


@pytest.fixture
def random_seed():
    """Fixed random seed for reproducible tests."""
    return 42


@pytest.fixture
def fixed_slope_family():
    return FixedSlopeFamily(-1.0)


@pytest.fixture
def zero_gradient_family():
    return FixedSlopeFamily(0.0)


@pytest.fixture
def synthetic_stream(random_seed):
    """
    Linearly separable sparse binary stream.

    A hidden weight vector over 30 features labels instances with 2-5 active
    features each; labels are in {0, 1}.
    """
    rng = np.random.default_rng(random_seed)
    n_features = 30
    true_weights = rng.normal(size=n_features)
    instances = []
    for _ in range(600):
        n_active = rng.integers(2, 6)
        active = rng.choice(n_features, size=n_active, replace=False)
        values = rng.uniform(0.5, 1.5, size=n_active)
        score = float(np.dot(true_weights[active], values))
        features = {f"f{i}": float(v) for i, v in zip(active, values)}
        instances.append(LabeledInstance(1.0 if score > 0 else 0.0, features))
    return instances


def assert_store_matches(store, expected, tol=1e-9):
    """Assert a parameter store holds exactly the ``expected`` key/value pairs."""
    actual = store.to_dict() if hasattr(store, "to_dict") else dict(store.items())
    assert set(actual) == set(expected), f"keys differ: {sorted(actual)} vs {sorted(expected)}"
    for key, value in expected.items():
        assert actual[key] == pytest.approx(value, abs=tol), f"{key}: {actual[key]} != {value}"
