# feature_switch/policy/__init__.py
"""Policy context consulted by the feature store."""
from .context import PolicyContext, create_context

__all__ = [
    'PolicyContext',
    'create_context'
]
