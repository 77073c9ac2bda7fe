"""
Learning-rate schedules.

All schedules are deterministic, non-increasing functions of the epoch
(number of single-instance updates seen so far)::

    constant:      eta0
    inverse:       eta0 / (1 + t / n)
    inverse_sqrt:  eta0 / sqrt(1 + t / n)
    exponential:   eta0 * base ** (t / n)

where ``n`` is ``examples_per_epoch``.
"""

import math

from ..api.registry import register


@register("schedule", "constant")
def constant(epoch: int, initial_learning_rate: float, examples_per_epoch: float, base: float = 1.0) -> float:
    return initial_learning_rate


@register("schedule", "inverse")
def inverse(epoch: int, initial_learning_rate: float, examples_per_epoch: float, base: float = 1.0) -> float:
    return initial_learning_rate / (1.0 + epoch / examples_per_epoch)


@register("schedule", "inverse_sqrt")
def inverse_sqrt(epoch: int, initial_learning_rate: float, examples_per_epoch: float, base: float = 1.0) -> float:
    return initial_learning_rate / math.sqrt(1.0 + epoch / examples_per_epoch)


@register("schedule", "exponential")
def exponential(epoch: int, initial_learning_rate: float, examples_per_epoch: float, base: float = 0.99) -> float:
    return initial_learning_rate * base ** (epoch / examples_per_epoch)
