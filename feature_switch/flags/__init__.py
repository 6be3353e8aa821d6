# feature_switch/flags/__init__.py
"""Feature store and truthiness helpers."""
from .truth import as_features, is_boolean, is_false, is_features, is_features_strict, is_true
from .store import FeatureStore

__all__ = [
    'FeatureStore',
    'as_features',
    'is_boolean',
    'is_false',
    'is_features',
    'is_features_strict',
    'is_true'
]
