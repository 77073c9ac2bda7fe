"""
Model families and the updateable linear model.
"""

from .families import LogisticRegression, LeastSquaresRegression, HingeClassifier, sigmoid
from .linear_model import LinearModel

__all__ = [
    'LogisticRegression', 'LeastSquaresRegression', 'HingeClassifier', 'sigmoid',
    'LinearModel',
]
