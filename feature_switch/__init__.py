# feature_switch/__init__.py
"""
Runtime feature switches with pluggable policy, plus a build-time tool that
strips disabled feature blocks out of source files.
"""
from .flags import FeatureStore, as_features, is_features, is_features_strict, is_true
from .policy import PolicyContext, create_context
from .execution import EventLoopNotifier, ListenerNotifier, ThreadPoolNotifier
from .strip import DEFAULT_OPTIONS, strip
from .errors import ErrorCode, FeatureSwitchError

__all__ = [
    'FeatureStore',
    'PolicyContext',
    'create_context',
    'ListenerNotifier',
    'ThreadPoolNotifier',
    'EventLoopNotifier',
    'strip',
    'DEFAULT_OPTIONS',
    'as_features',
    'is_features',
    'is_features_strict',
    'is_true',
    'ErrorCode',
    'FeatureSwitchError',
]

__version__ = "1.0.0"
