from .__about__ import __version__

from .exceptions import TornDownError

from .core import (
    LabeledInstance, ParameterStore, ReadOnlyParameters,
    NoPenalty, L2Penalty, TruncationPolicy,
    Penalty, ParameterView, ModelFamily, Optimizer,
)

from .optimizers import SGDOptimizer, AdagradOptimizer

from .models import (
    LinearModel, LogisticRegression, LeastSquaresRegression, HingeClassifier,
)

from .api import (
    register, get_registry, create_from_config, list_registered,
    validate_config, load_config, save_config, create_default_config, build_model,
)

__all__ = [
    "__version__",
    "TornDownError",

    # Core data structures
    "LabeledInstance", "ParameterStore", "ReadOnlyParameters",
    "NoPenalty", "L2Penalty", "TruncationPolicy",
    "Penalty", "ParameterView", "ModelFamily", "Optimizer",

    # Optimizers
    "SGDOptimizer", "AdagradOptimizer",

    # Models
    "LinearModel", "LogisticRegression", "LeastSquaresRegression", "HingeClassifier",

    # Registry and configuration
    "register", "get_registry", "create_from_config", "list_registered",
    "validate_config", "load_config", "save_config", "create_default_config", "build_model",
]
