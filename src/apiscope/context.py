"""Contexts carrying abort signals and resolvable APIs down a call chain.

A context is meant to be passed as a ``ctx`` argument through the layers of
an application. Each layer can derive a new context from the one it was
given: one that aborts on its own schedule, or one that can resolve more
APIs. Derivation never changes the parent context.
"""

import logging
import threading
from datetime import timedelta
from typing import Callable, Iterable, Optional, TypeVar, Union

from apiscope.domain import AnyApiFactory, ApiFactory, ApiRef
from apiscope.resolver import ApiResolver

__all__ = ["AbortSignal", "AbortController", "RootContext"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AbortSignal:
    """A one-shot signal that operations can poll, wait on or subscribe to."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._listeners: list[Callable[[], None]] = []

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Call ``listener`` once when the signal aborts.

        If the signal has already aborted, the listener is called immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._listeners.append(listener)
                return
        listener()

    def remove_listener(self, listener: Callable[[], None]) -> None:
        """Stop ``listener`` from being called. Unknown listeners are ignored."""
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the signal aborts or ``timeout`` seconds pass.

        Returns:
            True if the signal aborted.
        """
        return self._event.wait(timeout)

    def _abort(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            listeners, self._listeners = self._listeners, []
        # A failing listener must not keep the others from aborting.
        for listener in listeners:
            try:
                listener()
            except Exception:
                logger.exception("Abort listener %r failed", listener)


class AbortController:
    """Owns an :class:`AbortSignal` and the right to trigger it."""

    def __init__(self):
        self.signal = AbortSignal()

    def abort(self) -> None:
        self.signal._abort()


class RootContext:
    """
    A context that is meant to be passed as a ctx variable down the call chain,
    to pass along scoped APIs and abort signals.
    """

    def __init__(self, abort_signal: AbortSignal, api_resolver: ApiResolver):
        self._abort_signal = abort_signal
        self._api_resolver = api_resolver

    @classmethod
    def create(cls, apis: Optional[ApiResolver] = None) -> "RootContext":
        """Create a root context.

        This should normally only be called near the root of an application.
        The created context is meant to be passed down into deeper levels,
        which may or may not derive contexts from it.
        """
        return cls(AbortController().signal, apis if apis is not None else ApiResolver.empty())

    @property
    def abort_signal(self) -> AbortSignal:
        """Signal that triggers when this context or any of its parents aborts."""
        return self._abort_signal

    def wait_for_abort(self, timeout: Optional[float] = None) -> bool:
        return self._abort_signal.wait(timeout)

    def with_abort(self) -> tuple["RootContext", Callable[[], None]]:
        """Create a derived context that aborts when this one does, or when the
        returned abort function is called.
        """
        parent_signal = self._abort_signal
        controller = AbortController()

        def abort():
            parent_signal.remove_listener(controller.abort)
            controller.abort()

        parent_signal.add_listener(controller.abort)
        return RootContext(controller.signal, self._api_resolver), abort

    def with_timeout(self, timeout: timedelta) -> "RootContext":
        """Create a derived context that aborts when this one does, or when
        ``timeout`` has passed.

        Raises:
            ValueError: If the timeout is negative.
        """
        seconds = timeout.total_seconds()
        if seconds < 0:
            raise ValueError(f"Timeout must not be negative, got {timeout}")

        parent_signal = self._abort_signal
        controller = AbortController()

        def on_timeout():
            logger.debug("Context timed out after %s", timeout)
            parent_signal.remove_listener(on_parent_abort)
            controller.abort()

        timer = threading.Timer(seconds, on_timeout)
        timer.daemon = True

        def on_parent_abort():
            timer.cancel()
            controller.abort()

        # Registered before the timer starts, so on_timeout always finds it.
        parent_signal.add_listener(on_parent_abort)
        if not parent_signal.aborted:
            timer.start()
        return RootContext(controller.signal, self._api_resolver)

    def with_api(
        self, factory: Union[AnyApiFactory, Iterable[AnyApiFactory]]
    ) -> "RootContext":
        """Create a derived context that can also resolve the APIs the given
        factory or factories produce. The abort signal is shared with this context.
        """
        factories = [factory] if isinstance(factory, ApiFactory) else list(factory)
        return RootContext(self._abort_signal, self._api_resolver.with_factories(factories))

    def resolve_api(self, ref: ApiRef[T]) -> Optional[T]:
        return self._api_resolver.resolve(ref)
