"""Labeled training instances."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class LabeledInstance:
    """
    A label plus a sparse feature vector.

    The feature mapping is copied and wrapped read-only on construction, so
    an instance never changes under the model that trains on it.

    Examples
    --------
    >>> inst = LabeledInstance(1.0, {"color:red": 1.0, "price": 0.25})
    >>> sorted(inst.features)
    ['color:red', 'price']
    """
    label: float
    features: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(
            self, "features",
            MappingProxyType({str(k): float(v) for k, v in self.features.items()}),
        )

    def __len__(self) -> int:
        return len(self.features)
