# feature_switch/flags/truth.py
"""
Truthiness rules shared by the feature store, the policy context
and the stripping tool.
"""
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional


def is_true(value: Any) -> bool:
    """True for the boolean True or any casing of the string "true"."""
    return value is True or str(value).lower() == "true"


def is_false(value: Any) -> bool:
    """True for the boolean False or any casing of the string "false"."""
    return value is False or str(value).lower() == "false"


def is_boolean(value: Any) -> bool:
    return is_true(value) or is_false(value)


def is_features(value: Any) -> bool:
    """Check that a value can be used as a feature set (a mapping)."""
    return isinstance(value, Mapping)


def is_features_strict(value: Any) -> bool:
    """Check that a value is a feature set whose values all look boolean."""
    return is_features(value) and all(is_boolean(v) for v in value.values())


def as_features(
    value: Any,
    decider: Optional[Callable[[Any], Any]] = None
) -> Dict[str, bool]:
    """
    Build a strict feature set from arbitrary input.

    Args:
        value: Candidate mapping of feature name -> value
        decider: Truthiness rule applied to each value (defaults to is_true)

    Returns:
        New dict of feature name -> bool; empty when value is not a mapping
    """
    if not is_features(value):
        return {}

    fn = decider if callable(decider) else is_true
    return {name: is_true(fn(raw)) for name, raw in value.items()}
