"""
Tests for lazily applied penalties: closed-form decay factors must compose.
"""

import numpy as np
import pytest

from sparse_sgd import NoPenalty, L2Penalty


class TestNoPenalty:
    def test_identity_decay(self):
        penalty = NoPenalty()
        assert penalty.decay(0) == 1.0
        assert penalty.decay(1000) == 1.0
        np.testing.assert_array_equal(penalty.decay(np.array([0, 3, 7])), np.ones(3))
        assert penalty.value(np.array([1.0, -2.0])) == 0.0


class TestL2Penalty:
    def test_single_tick_is_prox_shrinkage(self):
        penalty = L2Penalty(lam=0.2, t=0.5)
        assert penalty.decay(1) == pytest.approx(1.0 / 1.1)
        assert penalty.decay(0) == 1.0

    @pytest.mark.parametrize("a,b", [(0, 5), (1, 1), (3, 17), (100, 250)])
    def test_decay_composes(self, a, b):
        penalty = L2Penalty(lam=0.01, t=1.0)
        assert penalty.decay(a) * penalty.decay(b) == pytest.approx(penalty.decay(a + b))

    def test_vectorized_matches_scalar(self):
        penalty = L2Penalty(lam=0.3, t=0.1)
        ticks = np.array([0, 1, 2, 10])
        expected = [penalty.decay(int(k)) for k in ticks]
        np.testing.assert_allclose(penalty.decay(ticks), expected)

    def test_decay_in_unit_interval(self):
        factors = L2Penalty(lam=5.0, t=2.0).decay(np.arange(50))
        assert np.all(factors > 0)
        assert np.all(factors <= 1)
        assert np.all(np.diff(factors) <= 0)

    def test_value(self):
        penalty = L2Penalty(lam=0.5)
        assert penalty.value(np.array([1.0, -2.0])) == pytest.approx(1.25)

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            L2Penalty(lam=-0.1)
        with pytest.raises(ValueError):
            L2Penalty(lam=0.1, t=0.0)
