# feature_switch/execution/notifier.py
"""
Change notification scheduling.

A mutation on the feature store never calls listeners inline. Each listener
delivery is handed to a notifier which runs it later, on a worker thread or
on an asyncio event loop, and isolates any failure to that one delivery.
"""
import asyncio
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, Optional, Set

import structlog

logger = structlog.get_logger(__name__)


def deliver_change(
    listener: Any,
    snapshot: Dict[str, bool],
    name: str,
    value: Optional[bool],
    on_error: Optional[Callable[..., None]] = None
) -> None:
    """
    Invoke one change listener with error isolation.

    Errors raised by the listener are routed to on_error with
    (error, listener, name, value, snapshot). Errors raised by on_error
    itself are logged and dropped.
    """
    if not callable(listener):
        return

    try:
        listener(snapshot, name, value)
    except Exception as error:
        if not callable(on_error):
            logger.warning("Listener raised an exception", feature=name, error=repr(error))
            return
        try:
            on_error(error, listener, name, value, snapshot)
        except Exception as handler_error:
            logger.error(
                "Listener error handler failed",
                feature=name,
                error=repr(error),
                handler_error=repr(handler_error),
            )


class ListenerNotifier(ABC):
    """Base class for notification schedulers."""

    @abstractmethod
    def schedule(self, callback: Callable[[], None]) -> None:
        """Arrange for callback to run later, never inline."""
        pass

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for scheduled callbacks; True when nothing is left pending."""
        return True


class ThreadPoolNotifier(ListenerNotifier):
    """
    Runs deliveries on a thread pool.

    With the default single worker, deliveries run in the order they were
    scheduled.
    """

    def __init__(self, max_workers: int = 1, thread_name_prefix: str = "feature-listener"):
        self.thread_pool = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix=thread_name_prefix,
            initializer=self._register_worker
        )
        self._pending: Set[Future] = set()
        self._workers: Set[int] = set()
        self._lock = threading.Lock()

    def _register_worker(self) -> None:
        with self._lock:
            self._workers.add(threading.get_ident())

    def in_worker(self) -> bool:
        """True when called from one of this notifier's worker threads."""
        with self._lock:
            return threading.get_ident() in self._workers

    def schedule(self, callback: Callable[[], None]) -> None:
        future = self.thread_pool.submit(callback)
        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._discard)

    def _discard(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until every scheduled delivery has run.

        Called from inside a delivery, the running delivery itself is still
        pending, so this returns False immediately instead of waiting on it.
        """
        if self.in_worker():
            logger.warning("flush() called from a listener thread; not waiting")
            return False

        # Deliveries may schedule further deliveries, so keep waiting until
        # the pending set stays empty
        deadline = None if timeout is None else time.monotonic() + timeout
        while True:
            with self._lock:
                pending = {f for f in self._pending if not f.done()}
            if not pending:
                return True
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            _, not_done = wait(pending, timeout=remaining)
            if not_done:
                return False

    def shutdown(self, wait_for_pending: bool = True) -> None:
        self.thread_pool.shutdown(wait=wait_for_pending)


class EventLoopNotifier(ListenerNotifier):
    """
    Runs deliveries on an asyncio event loop, one loop iteration later.

    The loop defaults to the running loop at construction time.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.loop = loop or asyncio.get_running_loop()
        self._pending = 0
        self._lock = threading.Lock()

    def schedule(self, callback: Callable[[], None]) -> None:
        with self._lock:
            self._pending += 1
        try:
            self.loop.call_soon_threadsafe(self._run, callback)
        except Exception:
            # Never scheduled, so never pending
            with self._lock:
                self._pending -= 1
            raise

    def _run(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        finally:
            with self._lock:
                self._pending -= 1

    @property
    def pending(self) -> int:
        return self._pending

    def flush(self, timeout: Optional[float] = None) -> bool:
        # Cannot block the loop that has to run the callbacks; use drain()
        return self._pending == 0

    async def drain(self) -> None:
        """Yield to the loop until every scheduled delivery has run."""
        while self._pending:
            await asyncio.sleep(0)
