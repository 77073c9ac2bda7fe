"""
Configuration management for online linear models.

Provides validation, loading, saving and model construction from
configuration dictionaries, with JSON and YAML file support.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Union

import jsonschema
import yaml

from .registry import create_from_config, list_registered

_COMPONENT = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "params": {"type": "object"},
    },
    "required": ["name"],
    "additionalProperties": False,
}

# Configuration schema for validation
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "family": _COMPONENT,
        "optimizer": _COMPONENT,
        "penalty": _COMPONENT,
        "truncation": {
            "type": "object",
            "properties": {
                "period": {"type": "integer", "minimum": 0},
                "threshold": {"type": "number", "minimum": 0},
                "update_rate": {"type": "number", "minimum": 0},
            },
            "additionalProperties": False,
        },
        "freeze_key_set": {"type": "boolean"},
        "meta": {
            "type": "object",
            "properties": {
                "version": {"type": "string"},
                "created": {"type": "string"},
                "description": {"type": "string"},
            },
            "additionalProperties": True,
        },
    },
    "required": ["family", "optimizer"],
    "additionalProperties": False,
}

_COMPONENT_SECTIONS = ("family", "optimizer", "penalty")


def validate_config(config: Dict[str, Any], strict: bool = True) -> Dict[str, List[str]]:
    """
    Validate configuration against schema and the component registry.

    Args:
        config: Configuration to validate
        strict: Whether to raise on validation errors

    Returns:
        Dict with validation errors by section

    Raises:
        ValueError: If strict=True and validation fails
    """
    errors: Dict[str, List[str]] = {}

    try:
        jsonschema.validate(config, CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        path_parts = list(e.absolute_path)
        section = path_parts[0] if path_parts else "root"
        errors.setdefault(section, []).append(e.message)
        if strict:
            raise ValueError(f"Config validation failed: {e.message}") from e
        return errors

    _validate_component_references(config, errors, strict)
    return errors


def _validate_component_references(config: Dict[str, Any], errors: Dict[str, List[str]], strict: bool):
    """Validate that referenced components exist in registry."""
    available = list_registered()

    for section in _COMPONENT_SECTIONS:
        if section not in config:
            continue
        name = config[section].get("name")
        if name not in available[section]:
            error_msg = f"Unknown {section}: '{name}'. Available: {available[section]}"
            errors.setdefault(section, []).append(error_msg)
            if strict:
                raise ValueError(error_msg)


def load_config(path: Union[str, Path], validate: bool = True) -> Dict[str, Any]:
    """
    Load configuration from a ``.json``, ``.yaml`` or ``.yml`` file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If parsing or validation fails
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    suffix = path.suffix.lower()
    try:
        with open(path, 'r') as f:
            if suffix == '.json':
                config = json.load(f)
            elif suffix in ('.yaml', '.yml'):
                config = yaml.safe_load(f)
            else:
                raise ValueError(f"Unknown config format: {suffix}")
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ValueError(f"Failed to load config from {path}: {e}") from e

    if validate:
        validate_config(config, strict=True)
    return config


def save_config(config: Dict[str, Any], path: Union[str, Path], format: str = 'auto') -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save
        path: Output file path
        format: 'json', 'yaml', or 'auto' to infer from extension (JSON otherwise)
    """
    path = Path(path)

    if format == 'auto':
        format = 'yaml' if path.suffix.lower() in ('.yaml', '.yml') else 'json'
    if format not in ('json', 'yaml'):
        raise ValueError(f"Unknown format: {format}")

    validate_config(config, strict=True)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w') as f:
        if format == 'json':
            json.dump(config, f, indent=2, sort_keys=True)
        else:
            yaml.safe_dump(config, f, default_flow_style=False, sort_keys=True)


def create_default_config() -> Dict[str, Any]:
    """
    Create default configuration: logistic regression, inverse-decay SGD,
    no regularization, truncation disabled.
    """
    from ..__about__ import __version__

    return {
        "family": {"name": "logistic", "params": {}},
        "optimizer": {
            "name": "sgd",
            "params": {"schedule": "inverse", "initial_learning_rate": 0.1, "examples_per_epoch": 10000},
        },
        "penalty": {"name": "none", "params": {}},
        "truncation": {"period": 0, "threshold": 0.0, "update_rate": 0.1},
        "freeze_key_set": False,
        "meta": {
            "version": __version__,
            "created": datetime.now().isoformat(),
            "description": "Default online linear model configuration",
        },
    }


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge configurations section by section, later ones taking precedence.

    A component section whose ``name`` changes is replaced wholesale so the
    previous component's ``params`` do not leak into it.
    """
    result: Dict[str, Any] = {}

    for config in configs:
        for section, values in config.items():
            previous = result.get(section)
            if (
                isinstance(values, dict)
                and isinstance(previous, dict)
                and not (section in _COMPONENT_SECTIONS and values.get("name") != previous.get("name"))
            ):
                result[section] = {**previous, **values}
            else:
                result[section] = values

    return result


def build_model(config: Dict[str, Any], validate: bool = True):
    """
    Construct a ``LinearModel`` from configuration.

    Missing sections fall back to ``create_default_config()``. The effective
    configuration is recorded as JSON in the model's ``arg_string``.

    Example:
        model = build_model({
            "family": {"name": "least_squares"},
            "optimizer": {"name": "adagrad", "params": {"initial_learning_rate": 0.5}},
            "truncation": {"period": 10, "threshold": 0.05, "update_rate": 0.01},
        })
    """
    from ..core.truncation import TruncationPolicy
    from ..models.linear_model import LinearModel

    if validate:
        validate_config(config, strict=True)
    effective = merge_configs(create_default_config(), config)

    family = create_from_config({"kind": "family", **effective["family"]})
    optimizer = create_from_config({"kind": "optimizer", **effective["optimizer"]})
    penalty = create_from_config({"kind": "penalty", **effective["penalty"]})

    model = LinearModel(
        family,
        optimizer,
        truncation=TruncationPolicy(**effective["truncation"]),
        penalty=penalty,
        freeze_key_set=effective["freeze_key_set"],
    )
    model.arg_string = json.dumps(effective, sort_keys=True)
    return model
