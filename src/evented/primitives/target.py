"""Single-channel event bus with DOM-style listener registration.

CONTENTS:
- ListenerOptions: capture/once/passive flags for a registration
- ListenerRegistration: A callback registered for one event type
- EventTarget: Register, unregister and deliver events

A listener is identified by ``(type, callback, capture)``; registering the
same triple twice is a no-op. Delivery snapshots the listener list, so
listeners added during a delivery only see later events, and listeners
removed during a delivery are skipped if they have not run yet.

THREAD SAFETY: EventTarget is NOT thread-safe. Use it from the thread (or
event loop) that owns it.
"""

from __future__ import annotations

import asyncio
import collections
import functools
import inspect
import logging
from dataclasses import dataclass
from typing import Any

from ..errors import InvalidListenerError, InvalidStateError
from ..types import EventListenerOrEventListenerObject
from .event import Event, validate_event_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ListenerOptions:
    """Options for ``add_event_listener``.

    Attributes:
        capture: Register for the capture phase. On a single target capture
            listeners simply run before non-capture listeners.
        once: Remove the listener before its first invocation.
        passive: ``prevent_default()`` is ignored inside this listener.
    """

    capture: bool = False
    once: bool = False
    passive: bool = False

    @classmethod
    def coerce(cls, options: ListenerOptions | bool | None) -> ListenerOptions:
        """Accept ``None``, a bare ``capture`` bool, or an options instance."""
        if options is None:
            return cls()
        if isinstance(options, bool):
            return cls(capture=options)
        if isinstance(options, ListenerOptions):
            return options
        raise TypeError(f"Invalid listener options: {options!r}")


@dataclass(slots=True)
class ListenerRegistration:
    """A callback registered for one event type on an ``EventTarget``."""

    type: str
    callback: EventListenerOrEventListenerObject
    capture: bool = False
    once: bool = False
    passive: bool = False
    removed: bool = False
    """Set when the registration is dropped, so in-flight deliveries skip it."""

    def matches(self, callback: Any, capture: bool) -> bool:
        if self.capture != capture:
            return False
        if self.callback is callback:
            return True
        # unhashable listener objects are matched by identity only
        return type(self.callback).__hash__ is not None and self.callback == callback


def _resolve_callable(callback: Any):
    handle_event = getattr(callback, "handle_event", None)
    if callable(handle_event) and not inspect.isroutine(callback):
        return handle_event
    if callable(callback):
        return callback
    raise InvalidListenerError(
        f"Listener must be callable or expose handle_event(), got {callback!r}"
    )


class EventTarget:
    """Per-type listener registry and synchronous event delivery."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[ListenerRegistration]] = (
            collections.defaultdict(list)
        )
        self._tasks: set[asyncio.Future] = set()

    def add_event_listener(
        self,
        type: str,
        callback: EventListenerOrEventListenerObject | None,
        options: ListenerOptions | bool | None = None,
    ) -> None:
        validate_event_type(type)
        if callback is None:
            return
        _resolve_callable(callback)
        opts = ListenerOptions.coerce(options)
        registrations = self._listeners[type]
        for registration in registrations:
            if registration.matches(callback, opts.capture):
                return
        registrations.append(
            ListenerRegistration(
                type=type,
                callback=callback,
                capture=opts.capture,
                once=opts.once,
                passive=opts.passive,
            )
        )

    def remove_event_listener(
        self,
        type: str,
        callback: EventListenerOrEventListenerObject | None,
        options: ListenerOptions | bool | None = None,
    ) -> None:
        if callback is None or type not in self._listeners:
            return
        capture = ListenerOptions.coerce(options).capture
        registrations = self._listeners[type]
        for index, registration in enumerate(registrations):
            if registration.matches(callback, capture):
                registration.removed = True
                del registrations[index]
                break
        if not registrations:
            del self._listeners[type]

    def listener_count(self, type: str | None = None) -> int:
        """Number of registrations for ``type``, or across all types."""
        if type is not None:
            return len(self._listeners.get(type, ()))
        return sum(len(registrations) for registrations in self._listeners.values())

    def dispatch_event(self, event: Event) -> bool:
        """Deliver ``event`` to the listeners registered for ``event.type``.

        Listener exceptions propagate to the caller and abort the delivery.

        Returns:
            False if the event is cancelable and a listener called
            ``prevent_default()``, True otherwise.

        Raises:
            InvalidStateError: If ``event`` is already being dispatched.
        """
        if not isinstance(event, Event):
            raise TypeError(f"dispatch_event() expects an Event, got {event!r}")
        if event.dispatching:
            raise InvalidStateError(
                f"{event!r} is already being dispatched; dispatch a clone() instead"
            )

        registrations = self._listeners.get(event.type, [])
        # capture listeners fire first at the target
        snapshot = [r for r in registrations if r.capture] + [
            r for r in registrations if not r.capture
        ]

        event._begin_dispatch(self)
        try:
            for registration in snapshot:
                if registration.removed:
                    continue
                if registration.once:
                    self.remove_event_listener(
                        registration.type, registration.callback, registration.capture
                    )
                event._in_passive_listener = registration.passive
                try:
                    result = _resolve_callable(registration.callback)(event)
                finally:
                    event._in_passive_listener = False
                if inspect.isawaitable(result):
                    self._schedule(result, event)
                if event._stop_immediate_propagation:
                    break
        finally:
            event._end_dispatch()

        return not event.default_prevented

    def _schedule(self, result: Any, event: Event) -> None:
        """Hand an awaitable listener result to the running loop without awaiting it."""
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                f"Async listener for {event.type!r} called without a running event loop; "
                "its coroutine was discarded"
            )
            if inspect.iscoroutine(result):
                result.close()
            return
        task = asyncio.ensure_future(result)
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._task_done, event.type))

    def _task_done(self, event_type: str, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Async listener for {event_type!r} failed: {exc!r}", exc_info=exc)

    async def join(self, timeout: float = 5.0) -> None:
        """Wait for scheduled async listeners to finish.

        Listener failures are logged when they happen and are not re-raised
        here. Tasks still running after ``timeout`` seconds are left running.
        """
        if not self._tasks:
            return
        _, pending = await asyncio.wait(list(self._tasks), timeout=timeout)
        if pending:
            logger.warning(f"Timeout waiting for {len(pending)} async listener(s)")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(listeners={self.listener_count()})"


__all__ = ["EventTarget", "ListenerOptions", "ListenerRegistration"]
