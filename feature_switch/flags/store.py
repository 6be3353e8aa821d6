# feature_switch/flags/store.py
"""
Feature store: runtime feature switches with pluggable policy.

Every query and mutation is mediated by a PolicyContext, and every committed
mutation is broadcast to change listeners asynchronously through a notifier.
"""
import functools
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

import structlog
from opentelemetry import trace

from feature_switch.config import PathLike, load_features
from feature_switch.execution.notifier import (
    ListenerNotifier,
    ThreadPoolNotifier,
    deliver_change,
)
from feature_switch.flags.truth import as_features, is_true
from feature_switch.policy.context import PolicyContext, create_context, get_override

logger = structlog.get_logger(__name__)
tracer = trace.get_tracer(__name__)

ChangeListener = Callable[[Dict[str, bool], str, Optional[bool]], Any]


class _Registration:
    """One add_change_listener call; unsubscribing removes this object only."""
    __slots__ = ("listener",)

    def __init__(self, listener: Any):
        self.listener = listener


def _as_names(names: Any) -> List[str]:
    if names is None or isinstance(names, (str, bytes)):
        return []
    try:
        return list(names)
    except TypeError:
        return []


def _as_args(args: Optional[Sequence[Any]]) -> tuple:
    # The execute slot always receives a spreadable sequence
    return () if args is None else tuple(args)


class FeatureStore:
    """
    Owns the canonical mapping of feature name -> bool.

    Policy denials and unknown features never raise: mutations become no-ops
    and queries return False.

    Example:
        store = FeatureStore({"new-dashboard": True})
        unsubscribe = store.add_change_listener(
            lambda features, name, value: print(name, value)
        )
        store.toggle("new-dashboard")
    """

    def __init__(
        self,
        features: Any = None,
        context: Any = None,
        notifier: Optional[ListenerNotifier] = None
    ):
        # Normalize with the caller's truthiness rule before the context exists
        self._features: Dict[str, bool] = as_features(features, get_override(context, "is_true"))
        self.context: PolicyContext = create_context(self._features, context)
        self.notifier: ListenerNotifier = notifier or ThreadPoolNotifier()
        self._registrations: List[_Registration] = []
        self._lock = threading.RLock()

    @classmethod
    def from_file(
        cls,
        path: PathLike,
        context: Any = None,
        notifier: Optional[ListenerNotifier] = None
    ) -> "FeatureStore":
        """Build a store from a YAML or JSON feature file."""
        return cls(load_features(path), context=context, notifier=notifier)

    # ============================================================
    # QUERIES
    # ============================================================

    def _snapshot(self) -> Dict[str, bool]:
        # Values are immutable bools, so a shallow copy is a full copy
        with self._lock:
            return dict(self._features)

    def _normalize(self, value: Any) -> bool:
        return is_true(self.context.is_true(value))

    def has_feature(self, name: str) -> bool:
        with self._lock:
            return name in self._features

    def is_enabled(self, name: str) -> bool:
        """
        Check whether a known feature is enabled.

        The policy's is_enabled result is coerced with is_true, so only True
        or a "true" string counts as enabled; a policy returning 1 or another
        truthy non-boolean reads as disabled. Unknown features are False.
        """
        if not self.has_feature(name):
            return False
        return is_true(self.context.is_enabled(name, self._snapshot()))

    def is_disabled(self, name: str) -> bool:
        # Unknown features count as disabled
        return not self.is_enabled(name)

    def get_features(self) -> Dict[str, bool]:
        return self._snapshot()

    def can_add_features(self) -> bool:
        return bool(self.context.can_add_features())

    def can_remove_features(self) -> bool:
        return bool(self.context.can_remove_features())

    def can_set_feature(self, name: str, value: Any) -> bool:
        """Check whether a known feature may be set to value (passed to the policy raw)."""
        if not self.has_feature(name):
            return False
        return bool(self.context.can_set(name, value))

    def can_enable(self, name: str) -> bool:
        return self.can_set_feature(name, True)

    def can_disable(self, name: str) -> bool:
        return self.can_set_feature(name, False)

    def can_toggle(self, name: str) -> bool:
        return self.can_disable(name) if self.is_enabled(name) else self.can_enable(name)

    def _pluck(self, names: Any) -> List[bool]:
        return [self.is_enabled(name) for name in _as_names(names)]

    def is_any_enabled(self, names: Iterable[str]) -> bool:
        return any(self._pluck(names))

    def is_all_enabled(self, names: Iterable[str]) -> bool:
        return all(self._pluck(names))

    def is_any_disabled(self, names: Iterable[str]) -> bool:
        return any(not enabled for enabled in self._pluck(names))

    def is_all_disabled(self, names: Iterable[str]) -> bool:
        return all(not enabled for enabled in self._pluck(names))

    # ============================================================
    # MUTATIONS
    # ============================================================

    @tracer.start_as_current_span("feature.mutate")
    def _commit(self, name: str, value: Optional[bool]) -> None:
        """Store (or delete, when value is None) a feature and notify listeners."""
        span = trace.get_current_span()
        span.set_attributes({
            "feature.name": name,
            "feature.value": "removed" if value is None else str(value),
        })

        with self._lock:
            if value is None:
                self._features.pop(name, None)
            else:
                self._features[name] = value
            snapshot = dict(self._features)
            registrations = list(self._registrations)

        logger.debug("Feature changed", feature=name, value=value, listeners=len(registrations))
        self._fire_event(registrations, snapshot, name, value)

    def _fire_event(
        self,
        registrations: List[_Registration],
        snapshot: Dict[str, bool],
        name: str,
        value: Optional[bool]
    ) -> None:
        on_error = self.context.on_listener_error
        for registration in registrations:
            # Each delivery gets its own copy of the post-mutation snapshot
            delivery = functools.partial(
                deliver_change,
                registration.listener,
                dict(snapshot),
                name,
                value,
                on_error,
            )
            try:
                self.notifier.schedule(delivery)
            except Exception as error:
                logger.error(
                    "Failed to schedule change listener",
                    feature=name,
                    value=value,
                    error=repr(error),
                )

    def add_feature(self, name: str, value: Any) -> None:
        if not self.can_add_features():
            logger.debug("Policy denied adding feature", feature=name)
            return
        self._commit(name, self._normalize(value))

    def remove_feature(self, name: str) -> None:
        if not (self.has_feature(name) and self.can_remove_features()):
            return
        self._commit(name, None)

    def set_enabled(self, name: str, value: Any) -> None:
        normalized = self._normalize(value)
        if not (self.has_feature(name) and self.can_set_feature(name, normalized)):
            return
        self._commit(name, normalized)

    def enable(self, name: str) -> None:
        if self.can_enable(name):
            self.set_enabled(name, True)

    def disable(self, name: str) -> None:
        if self.can_disable(name):
            self.set_enabled(name, False)

    def toggle(self, name: str) -> None:
        if not self.can_toggle(name):
            return
        if self.is_enabled(name):
            self.disable(name)
        else:
            self.enable(name)

    # ============================================================
    # CONDITIONAL EXECUTION
    # ============================================================

    def if_enabled(self, name: str, fn: Optional[Callable], args: Optional[Sequence[Any]] = None) -> Any:
        if self.is_enabled(name):
            return self.context.execute(fn, _as_args(args))
        return None

    def if_disabled(self, name: str, fn: Optional[Callable], args: Optional[Sequence[Any]] = None) -> Any:
        if self.has_feature(name) and self.is_disabled(name):
            return self.context.execute(fn, _as_args(args))
        return None

    def decide(
        self,
        name: str,
        enabled_fn: Optional[Callable],
        disabled_fn: Optional[Callable],
        enabled_args: Optional[Sequence[Any]] = None,
        disabled_args: Optional[Sequence[Any]] = None
    ) -> Any:
        """
        Run exactly one branch for a known feature and return its result.

        Unknown features run neither branch and return None.
        """
        if not self.has_feature(name):
            return None
        if self.is_enabled(name):
            return self.context.execute(enabled_fn, _as_args(enabled_args))
        return self.context.execute(disabled_fn, _as_args(disabled_args))

    def if_else_function(
        self,
        name: str,
        fn_if: Optional[Callable],
        fn_else: Optional[Callable]
    ) -> Callable[..., Any]:
        """
        Wrap two callables behind the feature's state at call time.

        The returned function checks the feature on every call, then forwards
        its positional arguments to fn_if when enabled or to fn_else when the
        feature is known and disabled. A missing branch returns None.
        """
        def switched(*args):
            if self.is_enabled(name):
                branch = fn_if
            elif self.has_feature(name):
                branch = fn_else
            else:
                branch = None
            if branch is None:
                return None
            return self.context.execute(branch, args)

        return switched

    def if_function(self, name: str, fn: Optional[Callable]) -> Callable[..., Any]:
        return self.if_else_function(name, fn, None)

    def else_function(self, name: str, fn: Optional[Callable]) -> Callable[..., Any]:
        return self.if_else_function(name, None, fn)

    # ============================================================
    # LISTENERS
    # ============================================================

    def add_change_listener(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register a listener called as listener(features, name, value).

        Returns a function removing this registration. Calling it more than
        once has no further effect. A delivery already scheduled when it is
        called may still run.
        """
        registration = _Registration(listener)
        with self._lock:
            self._registrations.append(registration)

        def unsubscribe() -> None:
            with self._lock:
                for i, existing in enumerate(self._registrations):
                    if existing is registration:
                        del self._registrations[i]
                        return

        return unsubscribe

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for scheduled listener deliveries; False if the timeout expired."""
        return self.notifier.flush(timeout)
