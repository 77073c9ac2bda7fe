"""
Updateable linear model: the orchestrator of one online training run.

Each single-instance update runs, strictly in this order:

1. advance the lazy clock (except before the very first update),
2. ask the optimizer for the raw update against the current parameters,
3. subtract it from the parameters,
4. truncate the instance's coordinates if the schedule says so,
5. increment the epoch.

Minibatch updates tick the clock once, add the optimizer's aggregated
(already negated) delta and leave the epoch untouched, so truncation
scheduling only counts single-instance updates.

The model performs no locking. Parallel training runs independent models
on separate shards and combines them with ``merge``.
"""

import logging
import warnings
from typing import Iterable, List, Mapping, Optional, Tuple

import numpy as np

from .. import jsonlog
from ..core.instance import LabeledInstance
from ..core.interfaces import FeatureVector, ModelFamily, Optimizer, Penalty
from ..core.parameter_store import ParameterStore, ReadOnlyParameters
from ..core.truncation import TruncationPolicy, check_non_negative, check_period
from ..exceptions import TornDownError


class LinearModel:
    """
    Online linear model with lazy regularization and truncated gradient.

    Parameters
    ----------
    family : ModelFamily
        Loss/gradient/prediction math (logistic, least squares, hinge, ...)
    optimizer : Optimizer
        Computes parameter deltas; owned by this model from now on
    param : mapping, optional
        Warm-start weights
    truncation : TruncationPolicy, optional
        Truncation schedule; disabled by default
    penalty : Penalty, optional
        Lazy regularizer for the parameter store
    freeze_key_set : bool, default=False
        Disallow parameter keys not present in ``param``

    Examples
    --------
    >>> from sparse_sgd import LinearModel, LogisticRegression, SGDOptimizer, LabeledInstance
    >>> model = LinearModel(LogisticRegression(), SGDOptimizer())
    >>> model.update(LabeledInstance(1.0, {"a": 1.0, "b": 2.0}))
    >>> model.epoch
    1
    """

    def __init__(
        self,
        family: ModelFamily,
        optimizer: Optimizer,
        param: Optional[Mapping[str, float]] = None,
        truncation: Optional[TruncationPolicy] = None,
        penalty: Optional[Penalty] = None,
        freeze_key_set: bool = False,
    ):
        self.family = family
        self.optimizer = optimizer
        self._param = ParameterStore(param, penalty=penalty, freeze_key_set=freeze_key_set)
        self._view = self._param.view()
        self.truncation = truncation if truncation is not None else TruncationPolicy()
        self._epoch = 0
        self._arg_string = "NOT SET"
        self._torn_down = False

    # ------------------------------------------------------------------
    # Lifecycle

    def _check_alive(self) -> None:
        if self._torn_down:
            raise TornDownError("model has been torn down; no further updates are allowed")

    def teardown(self) -> None:
        """Release the optimizer and forbid further updates. Safe to call twice."""
        if self._torn_down:
            return
        self.optimizer.teardown()
        self._torn_down = True
        jsonlog.log("teardown", level=logging.INFO, model_type=self.model_type,
                    epoch=self._epoch, n_keys=len(self._param))

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    # ------------------------------------------------------------------
    # Updates

    def update(self, instance: LabeledInstance) -> None:
        """Single gradient update."""
        self._check_alive()
        if self._epoch > 0:
            self._param.increment_iteration()
        delta = self.optimizer.compute_update(instance, self.family, self._view, self._epoch)
        self._param.add_scaled(delta, -1.0)
        self.truncate(instance)
        self._epoch += 1
        jsonlog.log("update", epoch=self._epoch, n_features=len(instance.features),
                    n_keys=len(self._param))

    def update_batch(self, instances: Iterable[LabeledInstance]) -> None:
        """Minibatch gradient update; does not advance the epoch."""
        self._check_alive()
        instances = list(instances)
        if self._epoch > 0:
            self._param.increment_iteration()
        delta = self.optimizer.compute_batch_update(instances, self.family, self._view, self._epoch)
        self._param.add(delta)
        jsonlog.log("update_batch", epoch=self._epoch, batch_size=len(instances),
                    n_keys=len(self._param))

    def fit(self, instances: Iterable[LabeledInstance], batch_size: Optional[int] = None) -> "LinearModel":
        """
        Consume a stream of instances.

        Args:
            instances: Training stream
            batch_size: Use minibatch updates of this size; single-instance
                updates when None

        Returns:
            Self (for chaining)
        """
        if batch_size is None:
            for instance in instances:
                self.update(instance)
            return self

        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        batch: List[LabeledInstance] = []
        for instance in instances:
            batch.append(instance)
            if len(batch) == batch_size:
                self.update_batch(batch)
                batch = []
        if batch:
            self.update_batch(batch)
        return self

    # ------------------------------------------------------------------
    # Truncation

    def truncate(self, instance: LabeledInstance) -> bool:
        """Truncate ``instance``'s coordinates if the epoch schedule says so."""
        self._check_alive()
        if self.truncation.should_truncate(self._epoch):
            self.apply_truncation(instance.features)
            return True
        return False

    def apply_truncation(self, features: FeatureVector) -> int:
        """
        Shrink the weights of ``features`` toward zero and prune the zeros.

        Returns:
            Number of coordinates pruned
        """
        self._check_alive()
        step = self.optimizer.learning_rate_at(self._epoch) * self.truncation.update_rate
        pruned = self.truncation.apply(self._param, features.keys(), step)
        jsonlog.log("truncation", epoch=self._epoch, step=step, pruned=pruned,
                    n_keys=len(self._param))
        return pruned

    def set_truncation_period(self, period: int) -> "LinearModel":
        self.truncation.period = check_period(period)
        return self

    def set_truncation_threshold(self, threshold: float) -> "LinearModel":
        self.truncation.threshold = check_non_negative("threshold", threshold)
        return self

    def set_truncation_update(self, update: float) -> "LinearModel":
        self.truncation.update_rate = check_non_negative("update", update)
        return self

    # ------------------------------------------------------------------
    # Whole-model operations

    def merge(self, other: "LinearModel", scaling: float = 1.0) -> None:
        """
        ``param += other.param * scaling``; ``epoch += other.epoch``.

        No normalization is applied; averaging ``k`` shards needs
        ``scaling=1/k`` on each merge into a zeroed model.
        """
        self._check_alive()
        if other.model_type != self.model_type:
            warnings.warn(f"Merging a {other.model_type} model into a {self.model_type} model")
        self._param.add_scaled(other._param, scaling)
        self._epoch += other._epoch
        jsonlog.log("merge", level=logging.INFO, scaling=scaling, epoch=self._epoch,
                    n_keys=len(self._param))

    def rescale(self, scale: float) -> None:
        self._param.mul(scale)

    def threshold_parameters(self, t: float) -> int:
        """
        Drop every coordinate with ``|w| < t``.

        Returns:
            Number of coordinates removed
        """
        removed = self._param.retain(lambda values: np.abs(values) >= t)
        jsonlog.log("threshold", level=logging.INFO, t=t, removed=removed,
                    n_keys=len(self._param))
        return removed

    def compare_to(self, other: "LinearModel") -> int:
        """
        ``sign(||other||_2 - ||self||_2)``: larger-norm models sort first.
        """
        return int(np.sign(other._param.norm(2) - self._param.norm(2)))

    def __lt__(self, other: "LinearModel") -> bool:
        return self.compare_to(other) < 0

    # ------------------------------------------------------------------
    # Scoring and inspection

    def predict(self, features: FeatureVector) -> float:
        return self.family.predict(features, self._view)

    def loss(self, instance: LabeledInstance) -> float:
        return self.family.loss(instance, self._view)

    def regularized_loss(self, instance: LabeledInstance) -> float:
        """Loss plus the penalty over all current weights."""
        weights = np.fromiter((w for _, w in self._param.iterate()), dtype=float)
        return self.loss(instance) + self._param.penalty.value(weights)

    def dot_with_param(self, x: FeatureVector) -> float:
        return self._param.dot(x)

    def explain_prediction(self, x: FeatureVector, top_n: int = -1) -> List[Tuple[str, float, float]]:
        """
        Rank the features of ``x`` by contribution ``|x[k] * w[k]|``.

        Args:
            x: Feature vector
            top_n: Number of entries to return; -1 for all

        Returns:
            ``(feature, feature_value, weight)`` triples, largest contribution first
        """
        if top_n < -1:
            raise ValueError(f"top_n must be -1 or non-negative, got {top_n}")
        contributions = {}
        for key, value in x.items():
            weight = self._param.get_coordinate(key)
            if weight != 0.0:
                contributions[key] = abs(value * weight)
        ranked = sorted(contributions, key=contributions.get, reverse=True)
        if top_n != -1:
            ranked = ranked[:top_n]
        return [(key, float(x[key]), self._param.get_coordinate(key)) for key in ranked]

    def format_explanation(self, x: FeatureVector, top_n: int = -1) -> str:
        """Human-readable explanation, e.g. ``"price:2.00->0.75 "``."""
        return "".join(f"{key}:{value:.2f}->{weight:.2f} "
                       for key, value, weight in self.explain_prediction(x, top_n))

    # ------------------------------------------------------------------
    # Parameter access

    def get_param(self) -> ReadOnlyParameters:
        return self._view

    def decompose(self) -> List[Tuple[str, float]]:
        """Active ``(key, weight)`` pairs in slot order, for external serialization."""
        return list(self._param.iterate())

    def set_parameter(self, name: str, value: float) -> None:
        self._param.set_coordinate(name, value)

    def set_freeze_feature_set(self, freeze: bool) -> None:
        self._param.set_freeze_key_set(freeze)

    @property
    def epoch(self) -> int:
        return self._epoch

    @epoch.setter
    def epoch(self, value: int) -> None:
        if value < 0:
            raise ValueError(f"epoch must be non-negative, got {value}")
        self._epoch = int(value)

    @property
    def arg_string(self) -> str:
        """Opaque metadata slot, e.g. the configuration used to build the model."""
        return self._arg_string

    @arg_string.setter
    def arg_string(self, value: str) -> None:
        self._arg_string = value

    @property
    def model_type(self) -> str:
        return getattr(self.family, "name", type(self.family).__name__)

    def __len__(self) -> int:
        return len(self._param)

    def __repr__(self):
        return (f"LinearModel(model_type={self.model_type!r}, epoch={self._epoch}, "
                f"n_keys={len(self._param)}, truncation={self.truncation})")
