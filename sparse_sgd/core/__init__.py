"""
Core data structures: parameter store, lazy penalties, truncation, interfaces.
"""

from .interfaces import Penalty, ParameterView, ModelFamily, Optimizer, FeatureVector
from .instance import LabeledInstance
from .penalties import NoPenalty, L2Penalty
from .parameter_store import ParameterStore, ReadOnlyParameters
from .truncation import TruncationPolicy

__all__ = [
    'Penalty', 'ParameterView', 'ModelFamily', 'Optimizer', 'FeatureVector',
    'LabeledInstance',
    'NoPenalty', 'L2Penalty',
    'ParameterStore', 'ReadOnlyParameters',
    'TruncationPolicy',
]
