"""
Public API and plugin system.

Provides the registry for model families, optimizers, schedules and
penalties, and configuration-driven model construction.
"""

from .registry import register, get_registry, create_from_config, list_registered
from .config import validate_config, load_config, save_config, create_default_config, build_model

__all__ = [
    'register', 'get_registry', 'create_from_config', 'list_registered',
    'validate_config', 'load_config', 'save_config', 'create_default_config', 'build_model',
]
