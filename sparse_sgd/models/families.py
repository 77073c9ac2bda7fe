"""
Model families for linear scoring.

A family turns the linear score ``w . x`` into a prediction, a loss and a
sparse gradient. All three families share the form
``gradient = dloss/dscore * x``, restricted to the instance's features, so
an instance with no features yields an empty gradient.
"""

import math
from typing import Dict

import numpy as np

from ..api.registry import register
from ..core.instance import LabeledInstance
from ..core.interfaces import FeatureVector, ParameterView


def _scaled(features: FeatureVector, scale: float) -> Dict[str, float]:
    if scale == 0.0:
        return {}
    return {key: value * scale for key, value in features.items()}


def sigmoid(score: float) -> float:
    """Numerically stable logistic function."""
    if score >= 0:
        z = math.exp(-score)
        return 1.0 / (1.0 + z)
    z = math.exp(score)
    return z / (1.0 + z)


@register("family", "logistic")
class LogisticRegression:
    """
    Binary logistic regression; labels in {0, 1}, predictions are probabilities.
    """

    name = "logistic"

    def gradient(self, instance: LabeledInstance, params: ParameterView) -> Dict[str, float]:
        p = sigmoid(params.dot(instance.features))
        return _scaled(instance.features, p - instance.label)

    def predict(self, features: FeatureVector, params: ParameterView) -> float:
        return sigmoid(params.dot(features))

    def loss(self, instance: LabeledInstance, params: ParameterView) -> float:
        score = params.dot(instance.features)
        # log(1 + exp(-y' * score)) with y' in {-1, +1}
        signed = score if instance.label > 0.5 else -score
        return float(np.logaddexp(0.0, -signed))


@register("family", "least_squares")
class LeastSquaresRegression:
    """Linear regression with squared loss ``0.5 * (w.x - y)^2``."""

    name = "least_squares"

    def gradient(self, instance: LabeledInstance, params: ParameterView) -> Dict[str, float]:
        residual = params.dot(instance.features) - instance.label
        return _scaled(instance.features, residual)

    def predict(self, features: FeatureVector, params: ParameterView) -> float:
        return params.dot(features)

    def loss(self, instance: LabeledInstance, params: ParameterView) -> float:
        residual = params.dot(instance.features) - instance.label
        return 0.5 * residual * residual


@register("family", "hinge")
class HingeClassifier:
    """
    Linear SVM with hinge loss ``max(0, 1 - y * w.x)``.

    Labels may be given as {-1, +1} or {0, 1}; predictions are -1.0 or +1.0.
    """

    name = "hinge"

    @staticmethod
    def _sign(label: float) -> float:
        return 1.0 if label > 0 else -1.0

    def gradient(self, instance: LabeledInstance, params: ParameterView) -> Dict[str, float]:
        y = self._sign(instance.label)
        if y * params.dot(instance.features) >= 1.0:
            return {}
        return _scaled(instance.features, -y)

    def predict(self, features: FeatureVector, params: ParameterView) -> float:
        return 1.0 if params.dot(features) >= 0 else -1.0

    def loss(self, instance: LabeledInstance, params: ParameterView) -> float:
        y = self._sign(instance.label)
        return max(0.0, 1.0 - y * params.dot(instance.features))
