"""
Plugin registry for model families, optimizers, schedules and penalties.

Enables registration and discovery of components without import
dependencies. Supports decorator registration and config-driven creation.
"""

from typing import Dict, Any, Type, Callable, Union, Optional, List
import inspect
import warnings

# Global registry storage
_REGISTRY: Dict[str, Dict[str, Any]] = {
    "family": {},
    "optimizer": {},
    "schedule": {},
    "penalty": {},
}

VALID_KINDS = set(_REGISTRY)


def _check_kind(kind: str) -> None:
    if kind not in VALID_KINDS:
        raise ValueError(f"Invalid kind '{kind}'. Must be one of: {sorted(VALID_KINDS)}")


def register(kind: str, name: str, *, override: bool = False):
    """
    Register a component in the plugin system.

    Args:
        kind: Component type ('family', 'optimizer', 'schedule', 'penalty')
        name: Unique name within the kind
        override: Whether to silently replace an existing registration

    Returns:
        Decorator returning the original class/function

    Examples:
        @register("family", "logistic")
        class LogisticRegression: ...

        @register("schedule", "inverse")
        def inverse(epoch, initial_learning_rate, examples_per_epoch): ...
    """
    _check_kind(kind)

    def decorator(cls_or_fn: Union[Type, Callable]) -> Union[Type, Callable]:
        if name in _REGISTRY[kind] and not override:
            existing = _REGISTRY[kind][name]
            if existing is not cls_or_fn:
                warnings.warn(
                    f"Overriding existing {kind} '{name}': {existing} -> {cls_or_fn}. "
                    f"Use override=True to suppress this warning."
                )

        _validate_component(cls_or_fn, kind)

        if hasattr(cls_or_fn, '__dict__'):
            cls_or_fn._sparse_sgd_registry = {
                'kind': kind,
                'name': name,
                'module': cls_or_fn.__module__,
                'qualname': getattr(cls_or_fn, '__qualname__', str(cls_or_fn)),
            }

        _REGISTRY[kind][name] = cls_or_fn
        return cls_or_fn

    return decorator


def get_registry(kind: str, name: str) -> Any:
    """
    Get registered component by kind and name.

    Raises:
        KeyError: If component not found
        ValueError: If kind invalid
    """
    _check_kind(kind)
    if name not in _REGISTRY[kind]:
        available = sorted(_REGISTRY[kind])
        raise KeyError(f"No {kind} named '{name}' found. Available: {available}")
    return _REGISTRY[kind][name]


def list_registered(kind: Optional[str] = None) -> Union[Dict[str, List[str]], List[str]]:
    """
    List registered component names, for one kind or all of them.
    """
    if kind is None:
        return {k: sorted(v) for k, v in _REGISTRY.items()}
    _check_kind(kind)
    return sorted(_REGISTRY[kind])


def create_from_config(config: Dict[str, Any]) -> Any:
    """
    Create component instance from configuration.

    Args:
        config: Configuration dict with 'kind', 'name', and optional 'params'

    Returns:
        Instantiated component; registered functions are returned as-is

    Example:
        config = {
            'kind': 'optimizer',
            'name': 'sgd',
            'params': {'initial_learning_rate': 0.05}
        }
        optimizer = create_from_config(config)
    """
    required_keys = {'kind', 'name'}
    if not required_keys.issubset(config.keys()):
        missing = required_keys - config.keys()
        raise ValueError(f"Config missing required keys: {missing}")

    kind = config['kind']
    name = config['name']
    params = config.get('params') or {}

    component = get_registry(kind, name)
    if not inspect.isclass(component):
        if params:
            raise TypeError(f"{kind} '{name}' is a function and takes no construction params")
        return component

    try:
        return component(**params)
    except TypeError as e:
        raise TypeError(
            f"Failed to instantiate {kind} '{name}' with params {params}: {e}"
        ) from e


def unregister(kind: str, name: str) -> bool:
    """Remove component from registry; returns False if it was not registered."""
    _check_kind(kind)
    return _REGISTRY[kind].pop(name, None) is not None


def _validate_component(component: Any, kind: str) -> None:
    """Warn when a registered class lacks methods its protocol requires."""
    from ..core.interfaces import Penalty, ModelFamily, Optimizer

    protocol_map = {
        'penalty': Penalty,
        'family': ModelFamily,
        'optimizer': Optimizer,
    }
    if kind not in protocol_map or not inspect.isclass(component):
        return

    protocol = protocol_map[kind]
    required_methods = [
        name for name, obj in inspect.getmembers(protocol)
        if not name.startswith('_') and callable(obj)
    ]
    missing_methods = [m for m in required_methods if not hasattr(component, m)]
    if missing_methods:
        warnings.warn(
            f"{kind.title()} '{component}' may not implement required methods: {missing_methods}. "
            f"This may cause runtime errors."
        )


# Convenience aliases
get = get_registry
create = create_from_config
