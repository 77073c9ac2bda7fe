"""
AdaGrad: per-coordinate adaptive step sizes.

References:
    Duchi, Hazan & Singer (2011). Adaptive Subgradient Methods for Online
    Learning and Stochastic Optimization. JMLR 12, 2121-2159.
"""

import math
from typing import Dict, Optional

from ..api.registry import register
from .sgd import SGDOptimizer


@register("optimizer", "adagrad")
class AdagradOptimizer(SGDOptimizer):
    """
    AdaGrad update ``eta0 * g_k / sqrt(epsilon + G_k)``.

    ``G_k`` accumulates squared gradients per coordinate. The base schedule
    still drives ``learning_rate_at``, which truncation uses for its step.
    The accumulator is released by ``teardown()``.
    """

    def __init__(
        self,
        initial_learning_rate: float = 0.1,
        epsilon: float = 1e-8,
        schedule="inverse",
        examples_per_epoch: float = 10000,
        exponential_base: float = 0.99,
        n_jobs: int = 1,
    ):
        super().__init__(
            schedule=schedule,
            initial_learning_rate=initial_learning_rate,
            examples_per_epoch=examples_per_epoch,
            exponential_base=exponential_base,
            n_jobs=n_jobs,
        )
        if epsilon <= 0:
            raise ValueError(f"epsilon must be positive, got {epsilon}")
        self.epsilon = epsilon
        self._sum_squares: Optional[Dict[str, float]] = {}

    def _step(self, gradient: Dict[str, float], epoch: int) -> Dict[str, float]:
        update = {}
        for key, g in gradient.items():
            accumulated = self._sum_squares.get(key, 0.0) + g * g
            self._sum_squares[key] = accumulated
            update[key] = self.initial_learning_rate * g / math.sqrt(self.epsilon + accumulated)
        return update

    def accumulated(self, key: str) -> float:
        """Sum of squared gradients seen for ``key``."""
        self._check_alive()
        return self._sum_squares.get(key, 0.0)

    def teardown(self) -> None:
        self._sum_squares = None
        super().teardown()
