"""
Protocol interfaces for clean separation of concerns.

Defines contracts for: Penalty, ParameterView, ModelFamily, Optimizer.
The orchestrator in ``sparse_sgd.models`` is generic over these, so new
model families and optimizers plug in without touching the update loop.
"""

from typing import Protocol, Iterable, Mapping, Dict, Any, Union

import numpy as np

FeatureVector = Mapping[str, float]
ArrayLike = Union[float, np.ndarray]


class Penalty(Protocol):
    """
    Lazily applied regularizer.

    The parameter store never decays all coordinates on every tick. Instead
    it asks the penalty for the closed-form multiplicative factor covering
    the ticks a coordinate has missed. The factor must compose
    multiplicatively (``decay(a) * decay(b) == decay(a + b)``) so catch-up
    at uneven intervals and global rescaling stay exact.
    """

    def decay(self, ticks: ArrayLike) -> ArrayLike:
        """
        Multiplicative catch-up factor for ``ticks`` missed iterations.

        Args:
            ticks: Non-negative tick count(s)

        Returns:
            Factor(s) in (0, 1]
        """
        raise NotImplementedError("Subclasses must implement decay()")

    def value(self, weights: np.ndarray) -> float:
        """Penalty value over a weight array."""
        raise NotImplementedError("Subclasses must implement value()")


class ParameterView(Protocol):
    """Read-only access to the current model parameters."""

    def dot(self, x: FeatureVector) -> float:
        ...

    def get_coordinate(self, key: str) -> float:
        ...

    def norm(self, p: float = 2.0) -> float:
        ...

    def catch_up(self, keys: Iterable[str]) -> None:
        """Bring ``keys`` current so later reads are write-free."""
        ...

    def __contains__(self, key: object) -> bool:
        ...

    def __len__(self) -> int:
        ...


class ModelFamily(Protocol):
    """
    Family-specific math for a linear model (logistic, least squares, ...).

    Every method receives the parameters explicitly; families are stateless
    and may be shared between models.
    """

    name: str

    def gradient(self, instance: Any, params: ParameterView) -> Dict[str, float]:
        """
        Gradient of the loss w.r.t. every parameter touched by ``instance``.

        Args:
            instance: Labeled instance
            params: Current parameters

        Returns:
            Sparse gradient keyed like the instance features
        """
        raise NotImplementedError("Subclasses must implement gradient()")

    def predict(self, features: FeatureVector, params: ParameterView) -> float:
        """Prediction for an unlabeled feature vector."""
        raise NotImplementedError("Subclasses must implement predict()")

    def loss(self, instance: Any, params: ParameterView) -> float:
        """Loss of the current parameters on ``instance``."""
        raise NotImplementedError("Subclasses must implement loss()")


class Optimizer(Protocol):
    """
    Gradient optimizer computing parameter deltas.

    Optimizers hold no reference to the model they serve; the orchestrator
    hands them the family, a read-only parameter view and the current epoch
    on every call.
    """

    def learning_rate_at(self, epoch: int) -> float:
        """Deterministic, non-increasing learning rate for ``epoch``."""
        raise NotImplementedError("Subclasses must implement learning_rate_at()")

    def compute_update(self, instance: Any, family: ModelFamily,
                       params: ParameterView, epoch: int) -> Dict[str, float]:
        """
        Raw update for a single instance.

        Returns:
            Update to be *subtracted* from the parameters
        """
        raise NotImplementedError("Subclasses must implement compute_update()")

    def compute_batch_update(self, instances: Iterable[Any], family: ModelFamily,
                             params: ParameterView, epoch: int) -> Dict[str, float]:
        """
        Aggregated update for a minibatch.

        Returns:
            Update to be *added* to the parameters
        """
        raise NotImplementedError("Subclasses must implement compute_batch_update()")

    def teardown(self) -> None:
        """Release optimizer state; further updates become invalid."""
        raise NotImplementedError("Subclasses must implement teardown()")
