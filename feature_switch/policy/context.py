# feature_switch/policy/context.py
"""
Policy context for the feature store.

Every decision the store makes (truthiness, permission checks, how callbacks
are executed, what happens when a change listener fails) goes through one of
seven slots. Callers override any subset; the rest fall back to defaults.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence

import structlog

from feature_switch.flags.truth import is_true


def _execute(fn: Optional[Callable], args: Optional[Sequence[Any]] = None) -> Any:
    if fn is None:
        return None
    return fn(*(args or ()))


def _always(*_args, **_kwargs) -> bool:
    return True


def _make_is_enabled(features: Dict[str, bool]) -> Callable[..., bool]:
    def is_enabled(name: str, snapshot: Optional[Dict[str, bool]] = None) -> bool:
        source = features if snapshot is None else snapshot
        return is_true(source.get(name))
    return is_enabled


def _make_on_listener_error(logger) -> Callable[..., None]:
    def on_listener_error(error, listener, name=None, value=None, snapshot=None) -> None:
        try:
            logger.warning(
                "Uncaught error during listener invocation",
                error=repr(error),
                listener=getattr(listener, "__qualname__", repr(listener)),
                feature=name,
                value=value,
            )
        except Exception:
            # Diagnostic failures are dropped
            pass
    return on_listener_error


@dataclass(frozen=True)
class PolicyContext:
    """Resolved policy slots consulted by a FeatureStore."""
    execute: Callable[..., Any]
    is_true: Callable[[Any], Any]
    is_enabled: Callable[..., Any]
    can_set: Callable[[str, Any], Any]
    can_add_features: Callable[[], Any]
    can_remove_features: Callable[[], Any]
    on_listener_error: Callable[..., None]

    SLOTS = (
        "execute",
        "is_true",
        "is_enabled",
        "can_set",
        "can_add_features",
        "can_remove_features",
        "on_listener_error",
    )


def get_override(overrides: Any, slot: str) -> Optional[Callable]:
    """
    Look up a callable override for a slot.

    Overrides may be a mapping keyed by slot name or any object exposing the
    slot as an attribute. Non-callable values are ignored.
    """
    if overrides is None:
        return None
    if isinstance(overrides, Mapping):
        candidate = overrides.get(slot)
    else:
        candidate = getattr(overrides, slot, None)
    return candidate if callable(candidate) else None


def create_context(
    features: Optional[Dict[str, bool]] = None,
    overrides: Any = None,
    logger=None
) -> PolicyContext:
    """
    Create a policy context, substituting defaults for missing overrides.

    Args:
        features: Live feature mapping, read only by the default is_enabled
        overrides: Mapping or object with any of the PolicyContext.SLOTS
        logger: Diagnostic sink for the default listener error handler

    Returns:
        PolicyContext with all seven slots populated
    """
    live = features if features is not None else {}
    sink = logger if logger is not None else structlog.get_logger("feature_switch.policy")

    defaults = {
        "execute": _execute,
        "is_true": is_true,
        "is_enabled": _make_is_enabled(live),
        "can_set": _always,
        "can_add_features": _always,
        "can_remove_features": _always,
        "on_listener_error": _make_on_listener_error(sink),
    }

    resolved = {
        slot: get_override(overrides, slot) or default
        for slot, default in defaults.items()
    }
    return PolicyContext(**resolved)
