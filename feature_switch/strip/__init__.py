# feature_switch/strip/__init__.py
"""Build-time stripping of disabled feature blocks."""
from .options import DEFAULT_OPTIONS, DIALECTS, merge_options
from .stripper import strip

__all__ = [
    'DEFAULT_OPTIONS',
    'DIALECTS',
    'merge_options',
    'strip'
]
