"""Synchronous publish/subscribe channel used for list-state change events.

One ``EventNotifier`` exists per kind of change.  Emission is synchronous
and runs every handler even when an earlier one raises; failures are
logged per handler and never reach the emitter.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from domain.exceptions import NotifierCompletedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Handler = Callable[[T], Any]
Unsubscribe = Callable[[], None]


def _noop() -> None:
    return None


class EventNotifier(Generic[T]):
    """Typed event channel with isolated handler failures.

    Parameters
    ----------
    name:
        Label used in log lines.
    debug:
        Log subscribe / unsubscribe / emit / complete lifecycle events.
    max_subscribers:
        Leak threshold.  Reaching it logs an error but the subscriber is
        still registered.
    """

    def __init__(
        self,
        name: str = "",
        *,
        debug: bool = False,
        max_subscribers: Optional[int] = None,
    ) -> None:
        self.name = name
        self._debug = debug
        self._max_subscribers = max_subscribers
        # dict keys act as an insertion-ordered set
        self._handlers: dict[Handler, None] = {}
        self._pending: set[asyncio.Future[T]] = set()
        self._closed = False
        self._emission_count = 0

    # -- subscription -----------------------------------------------------

    def subscribe(self, handler: Handler) -> Unsubscribe:
        """Register *handler* and return a callable that removes it."""
        if self._closed:
            if self._debug:
                logger.warning("Cannot subscribe to completed notifier %s", self.name)
            return _noop

        if self._max_subscribers and len(self._handlers) >= self._max_subscribers:
            logger.error(
                "Notifier %s: maximum subscribers (%d) reached, possible leak. Current: %d",
                self.name,
                self._max_subscribers,
                len(self._handlers),
            )

        self._handlers[handler] = None
        if self._debug:
            logger.debug("Notifier %s: subscriber added. Total: %d", self.name, len(self._handlers))

        def unsubscribe() -> None:
            if handler not in self._handlers:
                return
            del self._handlers[handler]
            if self._debug:
                logger.debug(
                    "Notifier %s: subscriber removed. Total: %d", self.name, len(self._handlers)
                )

        return unsubscribe

    def subscribe_once(self, handler: Handler) -> Unsubscribe:
        """Register *handler* for the next emission only."""
        fired = False

        def wrapper(value: T) -> None:
            nonlocal fired
            if fired:
                return
            fired = True
            unsubscribe()
            handler(value)

        unsubscribe = self.subscribe(wrapper)
        return unsubscribe

    def subscribe_if(self, predicate: Callable[[], bool], handler: Handler) -> Unsubscribe:
        """Register *handler*, invoked only while ``predicate()`` is true."""

        def wrapper(value: T) -> None:
            if predicate():
                handler(value)

        return self.subscribe(wrapper)

    # -- emission ---------------------------------------------------------

    def emit(self, value: T) -> None:
        if self._closed:
            if self._debug:
                logger.warning("Cannot emit on completed notifier %s", self.name)
            return

        self._emission_count += 1
        if self._debug:
            logger.debug(
                "Notifier %s: emit #%d %r to %d subscriber(s)",
                self.name,
                self._emission_count,
                value,
                len(self._handlers),
            )

        for handler in list(self._handlers):
            # removed by an earlier handler during this emission
            if handler not in self._handlers:
                continue
            try:
                handler(value)
            except Exception:
                logger.exception("Error in notifier %s handler", self.name)

    def complete(self) -> None:
        """Release every subscriber; no emissions or subscriptions afterwards."""
        if self._closed:
            return

        if self._debug:
            logger.debug(
                "Notifier %s: completed after %d emission(s), releasing %d subscriber(s)",
                self.name,
                self._emission_count,
                len(self._handlers),
            )

        self._handlers.clear()
        self._closed = True
        for future in list(self._pending):
            if not future.done():
                future.cancel()
        self._pending.clear()

    # -- async adapter ----------------------------------------------------

    def to_future(self) -> asyncio.Future[T]:
        """Return a future resolved by the next emission.

        Must be called from a running event loop.  On a completed notifier
        the future already carries :class:`NotifierCompletedError`.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()

        if self._closed:
            future.set_exception(NotifierCompletedError(self.name))
            return future

        def resolve(value: T) -> None:
            self._pending.discard(future)
            if not future.done():
                future.set_result(value)

        self._pending.add(future)
        self.subscribe_once(resolve)
        return future

    # -- introspection ----------------------------------------------------

    @property
    def has_subscribers(self) -> bool:
        return len(self._handlers) > 0

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def emission_count(self) -> int:
        return self._emission_count

    def __repr__(self) -> str:
        return (
            f"EventNotifier(name={self.name!r}, subscribers={len(self._handlers)}, "
            f"closed={self._closed})"
        )
