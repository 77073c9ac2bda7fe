"""
Lazily applied penalty implementations for the parameter store.

Each penalty exposes ``decay(ticks)``: the closed-form multiplicative factor
equivalent to applying its per-tick proximal step ``ticks`` times.
"""

import numpy as np

from ..api.registry import register
from .interfaces import ArrayLike


@register("penalty", "none")
class NoPenalty:
    """No regularization; coordinates never decay."""

    def decay(self, ticks: ArrayLike) -> ArrayLike:
        if np.ndim(ticks) == 0:
            return 1.0
        return np.ones(np.shape(ticks))

    def value(self, weights: np.ndarray) -> float:
        return 0.0


@register("penalty", "l2")
class L2Penalty:
    """
    L2 penalty (Ridge regularization), applied lazily.

    One tick applies the L2 proximal operator with step ``t``::

        prox(w) = w / (1 + lam * t)

    so a coordinate that missed ``k`` ticks is caught up with
    ``(1 + lam * t) ** -k``.

    Parameters
    ----------
    lam : float, default=1e-4
        Regularization strength
    t : float, default=1.0
        Proximal step per tick
    """

    def __init__(self, lam: float = 1e-4, t: float = 1.0):
        if lam < 0:
            raise ValueError(f"lam must be non-negative, got {lam}")
        if t <= 0:
            raise ValueError(f"t must be positive, got {t}")
        self.lam = lam
        self.t = t
        self._base = 1.0 + lam * t

    def decay(self, ticks: ArrayLike) -> ArrayLike:
        if np.ndim(ticks) == 0:
            return float(self._base ** -float(ticks))
        return np.power(self._base, -np.asarray(ticks, dtype=float))

    def value(self, weights: np.ndarray) -> float:
        """Compute L2 penalty value."""
        weights = np.asarray(weights, dtype=float)
        return float(0.5 * self.lam * np.sum(weights * weights))

    def __repr__(self):
        return f"L2Penalty(lam={self.lam}, t={self.t})"
