"""
Truncated-gradient sparsification.

Every ``period`` epochs, weights of the triggering instance whose magnitude
is inside ``(0, threshold)`` are pulled toward zero by ``step`` and clamped
at zero; coordinates that land exactly on zero are pruned.

References:
    Langford, Li & Zhang (2009). Sparse Online Learning via Truncated
    Gradient. JMLR 10, 777-801.
"""

import warnings
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from .parameter_store import ParameterStore


def check_period(period) -> int:
    if isinstance(period, bool) or int(period) != period:
        raise ValueError(f"period must be an integer, given: {period}")
    if period < 0:
        raise ValueError(f"period must be non-negative, given: {period}")
    return int(period)


def check_non_negative(name: str, value: float) -> float:
    if not value >= 0:
        raise ValueError(f"{name} must be non-negative, given: {value}")
    return float(value)


@dataclass
class TruncationPolicy:
    """
    Configuration and rule for periodic truncation.

    Attributes
    ----------
    period : int, default=0
        Truncate every ``period`` epochs; 0 disables truncation
    threshold : float, default=0.0
        Only weights with ``|w| < threshold`` are shrunk
    update_rate : float, default=0.1
        Shrink step per truncation, scaled by the learning rate
    """
    period: int = 0
    threshold: float = 0.0
    update_rate: float = 0.1

    def __post_init__(self):
        self.validate()

    def validate(self):
        self.period = check_period(self.period)
        self.threshold = check_non_negative("threshold", self.threshold)
        self.update_rate = check_non_negative("update_rate", self.update_rate)
        if self.period > 0 and self.threshold == 0:
            warnings.warn("Truncation enabled with threshold=0; no weight will ever be shrunk")

    @property
    def enabled(self) -> bool:
        return self.period > 0

    def should_truncate(self, epoch: int) -> bool:
        return self.period > 0 and epoch > 0 and epoch % self.period == 0

    def shrink(self, values: np.ndarray, step: float) -> np.ndarray:
        """
        Shrink in-band values toward zero without crossing it.

        Values outside ``(-threshold, threshold)`` and exact zeros are
        returned unchanged.
        """
        values = np.asarray(values, dtype=float)
        threshold = self.threshold
        positive = (values > 0) & (values < threshold)
        negative = (values < 0) & (values > -threshold)
        out = values.copy()
        out[positive] = np.maximum(0.0, values[positive] - step)
        out[negative] = np.minimum(0.0, values[negative] + step)
        return out

    def apply(self, store: ParameterStore, keys: Iterable[str], step: float) -> int:
        """
        Shrink the given coordinates of ``store`` and prune the ones that hit zero.

        Returns:
            Number of coordinates pruned
        """
        keys = list(keys)
        store.transform(lambda v: self.shrink(v, step), keys=keys)
        return store.remove_zero_coordinates(keys=keys)
