"""
Stochastic gradient descent with a decreasing learning-rate schedule.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Union

from .. import jsonlog
from ..api.registry import register, get_registry
from ..core.interfaces import ModelFamily, ParameterView
from ..exceptions import TornDownError


@register("optimizer", "sgd")
class SGDOptimizer:
    """
    Plain SGD: ``update = learning_rate_at(epoch) * gradient``.

    Parameters
    ----------
    schedule : str or callable, default="inverse"
        Registered schedule name or ``fn(epoch, eta0, examples_per_epoch, base)``
    initial_learning_rate : float, default=0.1
        Learning rate at epoch 0
    examples_per_epoch : float, default=10000
        Time constant of the schedule, in instances
    exponential_base : float, default=0.99
        Decay base for the ``exponential`` schedule, in (0, 1]
    n_jobs : int, default=1
        Threads used to compute per-instance gradients of a minibatch

    Examples
    --------
    >>> opt = SGDOptimizer(schedule="constant", initial_learning_rate=0.1)
    >>> opt.learning_rate_at(1000)
    0.1
    """

    def __init__(
        self,
        schedule: Union[str, Callable[..., float]] = "inverse",
        initial_learning_rate: float = 0.1,
        examples_per_epoch: float = 10000,
        exponential_base: float = 0.99,
        n_jobs: int = 1,
    ):
        if initial_learning_rate <= 0:
            raise ValueError(f"initial_learning_rate must be positive, got {initial_learning_rate}")
        if examples_per_epoch <= 0:
            raise ValueError(f"examples_per_epoch must be positive, got {examples_per_epoch}")
        if not 0 < exponential_base <= 1:
            raise ValueError(f"exponential_base must be in (0, 1], got {exponential_base}")
        if n_jobs < 1:
            raise ValueError(f"n_jobs must be at least 1, got {n_jobs}")

        self.schedule = schedule
        self._schedule = get_registry("schedule", schedule) if isinstance(schedule, str) else schedule
        self.initial_learning_rate = initial_learning_rate
        self.examples_per_epoch = examples_per_epoch
        self.exponential_base = exponential_base
        self.n_jobs = n_jobs
        self._torn_down = False

    def learning_rate_at(self, epoch: int) -> float:
        return float(self._schedule(epoch, self.initial_learning_rate,
                                    self.examples_per_epoch, self.exponential_base))

    def _check_alive(self) -> None:
        if self._torn_down:
            raise TornDownError(f"{type(self).__name__} has been torn down")

    def _step(self, gradient: Dict[str, float], epoch: int) -> Dict[str, float]:
        """Turn a gradient into a raw update (to be subtracted)."""
        rate = self.learning_rate_at(epoch)
        return {key: value * rate for key, value in gradient.items()}

    def _gradients(self, instances: List[Any], family: ModelFamily,
                   params: ParameterView) -> List[Dict[str, float]]:
        if self.n_jobs == 1 or len(instances) == 1:
            return [family.gradient(instance, params) for instance in instances]

        # Workers only read: every key is caught up before the pool starts.
        params.catch_up({key for instance in instances for key in instance.features})
        with ThreadPoolExecutor(max_workers=self.n_jobs) as executor:
            return list(executor.map(lambda instance: family.gradient(instance, params), instances))

    def compute_update(self, instance: Any, family: ModelFamily,
                       params: ParameterView, epoch: int) -> Dict[str, float]:
        """
        Raw update for one instance, to be subtracted from the parameters.
        """
        self._check_alive()
        return self._step(family.gradient(instance, params), epoch)

    def compute_batch_update(self, instances: Iterable[Any], family: ModelFamily,
                             params: ParameterView, epoch: int) -> Dict[str, float]:
        """
        Negated mean of the per-instance raw updates, to be added to the parameters.

        Gradients are all computed against the same parameters (optionally on
        a thread pool); steps are then taken and summed in input order.
        """
        self._check_alive()
        instances = list(instances)
        if not instances:
            return {}

        total: Dict[str, float] = {}
        for gradient in self._gradients(instances, family, params):
            for key, value in self._step(gradient, epoch).items():
                total[key] = total.get(key, 0.0) + value

        scale = -1.0 / len(instances)
        return {key: value * scale for key, value in total.items()}

    def teardown(self) -> None:
        if self._torn_down:
            return
        self._torn_down = True
        jsonlog.log("optimizer_teardown", optimizer=type(self).__name__)

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def __repr__(self):
        return (f"{type(self).__name__}(schedule={self.schedule!r}, "
                f"initial_learning_rate={self.initial_learning_rate}, "
                f"examples_per_epoch={self.examples_per_epoch})")
