"""
Gradient optimizers and learning-rate schedules.
"""

from . import schedules
from .sgd import SGDOptimizer
from .adagrad import AdagradOptimizer

__all__ = ['schedules', 'SGDOptimizer', 'AdagradOptimizer']
