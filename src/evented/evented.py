"""Evented dispatch component.

This module turns any object into a publish/subscribe node layered on a
single ``EventTarget`` bus.

CONTENTS:
- Evented: The dispatch component (bus, handler map, handled set)
- EventedMixin: Host base class delegating to an owned ``Evented``
- evented: Class decorator that mixes ``EventedMixin`` into a class

DISPATCH PROTOCOL (``dispatch_event``), in order:
1. Exact type: ``target``/``current_target`` are pinned to the host and the
   event is delivered to listeners registered for ``event.type``.
2. Default: if nothing canceled it and no listener registered through
   ``add_event_listener`` ran, an ``EventDefault`` wrapping the event is
   delivered.
3. All: if still not canceled, an ``EventAll`` wrapping the event is
   delivered, followed by an ``EventAny`` for listeners registered without a
   type.

The return value is the status of the last delivery: False as soon as a
cancelable event (or wrapper) has ``prevent_default()`` called on it.

LISTENER IDENTITY:
Callers add and remove listeners by their own callback. The bus only ever
sees a wrapper that marks the event as handled after the callback returns.
The mapping callback -> ``{(type, capture): wrapper}`` is kept in a
``WeakKeyDictionary`` so it never extends a callback's lifetime. Callbacks
that cannot be hashed are tracked by identity instead.

ERRORS:
Listener exceptions propagate out of ``dispatch_event`` and abort the
remaining listeners and phases.

THREAD SAFETY: NOT thread-safe. An evented object must be used from the
thread (or event loop) that owns it. Re-entrant dispatch of a different
event from inside a listener is supported.
"""

from __future__ import annotations

import inspect
import logging
import time
import weakref
from collections.abc import Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, ClassVar, TypeVar, overload

from .config import DEFAULT_CONFIG, EventedConfig
from .errors import InvalidListenerError
from .events.wrappers import EventAll, EventAny, EventDefault, _WrapperEvent
from .primitives.event import Event
from .primitives.target import EventTarget, ListenerOptions
from .tracing import DispatchPhase, DispatchTracer
from .types import EventListener, EventListenerOrEventListenerObject, F
from .utils import EVENT_HANDLED, EVENT_HANDLERS, EVENT_TARGET, Marker

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)

HandlerKey = tuple[str, bool]
"""(event type, capture) identifying one registration of a callback."""

ANY_TYPE = EventAny.type_name


def _is_hashable(obj: Any) -> bool:
    try:
        hash(obj)
    except TypeError:
        return False
    return True


class HandlerMapView(Mapping[Any, Mapping[HandlerKey, EventListener]]):
    """Read-only snapshot of callback -> {(type, capture): wrapper}.

    Callbacks are matched by identity, then by equality for hashable ones,
    so listener objects that cannot be hashed are still reachable.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[tuple[Any, dict[HandlerKey, EventListener]]]):
        self._items = tuple(
            (callback, MappingProxyType(dict(entries))) for callback, entries in items
        )

    def __getitem__(self, callback: Any) -> Mapping[HandlerKey, EventListener]:
        for stored, entries in self._items:
            if stored is callback:
                return entries
        if _is_hashable(callback):
            for stored, entries in self._items:
                if _is_hashable(stored) and stored == callback:
                    return entries
        raise KeyError(callback)

    def __iter__(self) -> Iterator[Any]:
        return (callback for callback, _ in self._items)

    def __len__(self) -> int:
        return len(self._items)


def _describe(callback: Any) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)


def _split_listener_args(
    type_or_callback: Any, callback: Any, options: Any
) -> tuple[str, Any, ListenerOptions | bool | None]:
    """Normalize the two call forms to ``(type, callback, options)``.

    ``(type, callback, options)`` is used as is. ``(callback, options)``
    targets the catch-all ``EventAny`` channel.
    """
    if isinstance(type_or_callback, str):
        return type_or_callback, callback, options
    if isinstance(callback, (bool, ListenerOptions)):
        if options is not None:
            raise TypeError("Options given twice for a catch-all listener")
        return ANY_TYPE, type_or_callback, callback
    if callback is not None:
        raise TypeError(
            "Catch-all listeners take (callback, options); "
            f"got a second callback {callback!r}"
        )
    return ANY_TYPE, type_or_callback, options


class Evented:
    """Event dispatch component owned by a host object.

    PURPOSE: Give a host object ``add_event_listener``/``remove_event_listener``/
    ``dispatch_event`` with listener removal by caller identity and three-phase
    delivery (exact type, default, all).

    TYPICAL USAGE:
    ```python
    class Uploader:
        def __init__(self) -> None:
            self.events = Evented(self)

        def finish(self, path: str) -> None:
            self.events.dispatch_event(Uploaded(detail=path))


    uploader = Uploader()
    uploader.events.add_event_listener("Uploaded", lambda e: print(e.detail))
    uploader.events.add_event_listener(
        "EventDefault", lambda e: print("unhandled", e.detail.type)
    )
    uploader.events.add_event_listener(lambda e: audit(e.detail))  # catch-all
    ```

    Without a host the component itself is the dispatch target.

    STATE:
    - bus: the ``EventTarget`` all wrappers are registered on
    - handler map: caller callback -> {(type, capture): wrapper}
    - handled set: events an exact-type listener received during the
      current dispatch
    """

    def __init__(self, host: Any = None, config: EventedConfig | None = None):
        self._host = host
        self._config = config if config is not None else DEFAULT_CONFIG
        self._debug = self._config.debug
        self._event_target = EventTarget()
        self._event_handlers: weakref.WeakKeyDictionary[Any, dict[HandlerKey, EventListener]] = (
            weakref.WeakKeyDictionary()
        )
        # callbacks that cannot be weakly referenced (builtins, bound builtin methods)
        self._strong_event_handlers: dict[Any, dict[HandlerKey, EventListener]] = {}
        # unhashable callbacks (dataclasses, mutable pydantic models), keyed by id()
        self._identity_event_handlers: dict[
            int, tuple[Any, dict[HandlerKey, EventListener]]
        ] = {}
        self._event_handled: weakref.WeakSet[Event] = weakref.WeakSet()
        self._tracer = DispatchTracer(
            enabled=self._config.trace,
            verbosity=self._config.trace_verbosity,
            use_rich=self._config.trace_use_rich,
        )

    @property
    def target(self) -> Any:
        """The object stamped as ``target``/``current_target`` on dispatch."""
        return self if self._host is None else self._host

    @property
    def config(self) -> EventedConfig:
        return self._config

    @property
    def event_trace_enabled(self) -> bool:
        return self._tracer.enabled

    def set_event_trace(
        self, enabled: bool, verbosity: int = 1, use_rich: bool = True
    ) -> None:
        """Enable or disable dispatch tracing.

        Args:
            enabled: Whether to trace deliveries
            verbosity: Level of detail (0=minimal, 1=normal, 2=verbose)
            use_rich: Whether to use Rich formatting for output

        Raises:
            pydantic.ValidationError: If ``verbosity`` is outside 0-2.
        """
        self._config = EventedConfig.model_validate(
            {
                **self._config.model_dump(),
                "trace": enabled,
                "trace_verbosity": verbosity,
                "trace_use_rich": use_rich,
            }
        )
        self._tracer.configure(
            enabled, verbosity, use_rich, owner=type(self.target).__name__
        )

    def __evented_component__(self) -> Evented:
        return self

    def lookup(self, marker: Marker) -> Any:
        """Read-only access to internal state; see ``evented.utils``."""
        if marker is EVENT_TARGET:
            return self._event_target
        if marker is EVENT_HANDLERS:
            return HandlerMapView(
                [
                    *self._event_handlers.items(),
                    *self._strong_event_handlers.items(),
                    *self._identity_event_handlers.values(),
                ]
            )
        if marker is EVENT_HANDLED:
            return frozenset(self._event_handled)
        raise KeyError(marker)

    # Handler map

    def _handler_map(self, callback: Any) -> dict[Any, dict[HandlerKey, EventListener]]:
        try:
            weakref.ref(callback)
        except TypeError:
            return self._strong_event_handlers
        return self._event_handlers

    def _registered(
        self, callback: Any
    ) -> tuple[Any, dict[HandlerKey, EventListener] | None]:
        """Return the stored callback equal to ``callback`` and its wrappers.

        Bound methods are recreated on every attribute access, so the stored
        key may be a different (but equal) object than ``callback``. Callbacks
        that cannot be hashed are only ever matched by identity.
        """
        if not _is_hashable(callback):
            return self._identity_event_handlers.get(id(callback), (callback, None))
        handlers = self._handler_map(callback)
        entries = handlers.get(callback)
        if entries is None:
            return callback, None
        stored = next((key for key in handlers.keys() if key == callback), callback)
        return stored, entries

    def _store(self, callback: Any) -> dict[HandlerKey, EventListener]:
        entries: dict[HandlerKey, EventListener] = {}
        if _is_hashable(callback):
            self._handler_map(callback)[callback] = entries
        else:
            self._identity_event_handlers[id(callback)] = (callback, entries)
        return entries

    def _forget(self, callback: Any, key: HandlerKey) -> EventListener | None:
        stored, entries = self._registered(callback)
        if not entries:
            return None
        handler = entries.pop(key, None)
        if not entries:
            if _is_hashable(stored):
                self._handler_map(stored).pop(stored, None)
            else:
                self._identity_event_handlers.pop(id(stored), None)
        return handler

    def _wrap_listener(
        self, callback: EventListenerOrEventListenerObject, key: HandlerKey, once: bool
    ) -> EventListener:
        handled = self._event_handled

        if callable(getattr(callback, "handle_event", None)) and not inspect.isroutine(
            callback
        ):

            def handler(event: Event) -> Any:
                if once:
                    self._forget(callback, key)
                # looked up per call so the object can swap its handler
                result = callback.handle_event(event)
                handled.add(event)
                return result

        elif callable(callback):

            def handler(event: Event) -> Any:
                if once:
                    self._forget(callback, key)
                result = callback(event)
                handled.add(event)
                return result

        else:
            raise InvalidListenerError(
                f"Listener must be callable or expose handle_event(), got {callback!r}"
            )

        handler.__qualname__ = f"evented({_describe(callback)})"
        return handler

    # Public API

    @overload
    def add_event_listener(
        self,
        type_or_callback: str,
        callback: EventListenerOrEventListenerObject | None,
        options: ListenerOptions | bool | None = None,
    ) -> None: ...

    @overload
    def add_event_listener(
        self,
        type_or_callback: EventListenerOrEventListenerObject | None,
        callback: ListenerOptions | bool | None = None,
    ) -> None: ...

    def add_event_listener(self, type_or_callback, callback=None, options=None) -> None:
        """Register a listener.

        ``add_event_listener(type, callback, options=None)`` fires ``callback``
        for events whose type equals ``type``.
        ``add_event_listener(callback, options=None)`` fires ``callback`` with
        an ``EventAny`` wrapper for every dispatched event.

        ``callback`` is a callable or an object with a ``handle_event``
        method. Registering the same callback for the same type and capture
        flag again is a no-op; ``None`` is ignored.
        """
        type, callback, options = _split_listener_args(type_or_callback, callback, options)
        if callback is None:
            return
        opts = ListenerOptions.coerce(options)
        key = (type, opts.capture)

        callback, entries = self._registered(callback)
        if entries is not None and key in entries:
            return
        handler = self._wrap_listener(callback, key, opts.once)
        if entries is None:
            entries = self._store(callback)
        entries[key] = handler
        self._event_target.add_event_listener(type, handler, opts)

        if self._debug:
            logger.debug(f"Registered {_describe(callback)} for {type!r}")

    @overload
    def remove_event_listener(
        self,
        type_or_callback: str,
        callback: EventListenerOrEventListenerObject | None,
        options: ListenerOptions | bool | None = None,
    ) -> None: ...

    @overload
    def remove_event_listener(
        self,
        type_or_callback: EventListenerOrEventListenerObject | None,
        callback: ListenerOptions | bool | None = None,
    ) -> None: ...

    def remove_event_listener(self, type_or_callback, callback=None, options=None) -> None:
        """Remove a listener added with the same arguments.

        Only the registration for this type and capture flag is removed; the
        same callback registered for other types keeps firing. Removing a
        callback that is not registered is a no-op.
        """
        type, callback, options = _split_listener_args(type_or_callback, callback, options)
        if callback is None:
            return
        capture = ListenerOptions.coerce(options).capture
        handler = self._forget(callback, (type, capture))
        if handler is None:
            return
        self._event_target.remove_event_listener(type, handler, capture)

        if self._debug:
            logger.debug(f"Removed {_describe(callback)} from {type!r}")

    def on(
        self,
        type: str | None = None,
        options: ListenerOptions | bool | None = None,
    ) -> Callable[[F], F]:
        """Decorator form of ``add_event_listener``.

        ```python
        @host.on("saved")
        def log_save(event: Event) -> None: ...


        @host.on()  # catch-all
        def audit(event: EventAny) -> None: ...
        ```
        """

        def decorator(fn: F) -> F:
            if type is None:
                self.add_event_listener(fn, options)
            else:
                self.add_event_listener(type, fn, options)
            return fn

        return decorator

    def dispatch_event(self, event: Event) -> bool:
        """Dispatch ``event`` through the exact-type, default and all phases.

        Returns:
            False if a listener canceled the event or one of its wrappers,
            True otherwise.

        Raises:
            EventRetargetError: If ``event`` was already dispatched by another
                object; dispatch a ``clone()`` instead.
            InvalidStateError: If ``event`` is currently being dispatched.
        """
        target = self.target
        event.pin_target(target)
        handled = self._event_handled
        handled.discard(event)
        try:
            status = self._deliver(DispatchPhase.EXACT, event)
            if status and event not in handled:
                status = self._deliver_wrapper(DispatchPhase.DEFAULT, EventDefault, event)
            if status:
                status = self._deliver_wrapper(DispatchPhase.ALL, EventAll, event)
            if status:
                status = self._deliver_wrapper(DispatchPhase.ANY, EventAny, event)
        finally:
            handled.discard(event)
        return status

    async def join(self, timeout: float = 5.0) -> None:
        """Wait for async listeners started by earlier dispatches."""
        await self._event_target.join(timeout)

    def _deliver_wrapper(
        self, phase: DispatchPhase, wrapper_cls: type[_WrapperEvent], event: Event
    ) -> bool:
        wrapper = wrapper_cls.wrap(event)
        wrapper.pin_target(self.target)
        return self._deliver(phase, wrapper)

    def _deliver(self, phase: DispatchPhase, event: Event) -> bool:
        bus = self._event_target
        handler_count = bus.listener_count(event.type)
        if self._debug:
            logger.debug(
                f"Dispatching {event!r} in {phase.value} phase to {handler_count} listener(s)"
            )
        start = time.perf_counter() if self._tracer.enabled else None
        try:
            status = bus.dispatch_event(event)
        except Exception as e:
            if self._debug:
                logger.debug(
                    f"Listener for {event.type!r} raised during {phase.value} phase: {e!r}"
                )
            raise
        if start is not None:
            duration_ms = (time.perf_counter() - start) * 1000
            self._tracer.record(phase, event, handler_count, status, duration_ms)
        return status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(target={type(self.target).__name__}, bus={self._event_target!r})"


class EventedMixin:
    """Host base class that owns an ``Evented`` component.

    ``add_event_listener``, ``remove_event_listener``, ``dispatch_event``,
    ``on``, ``set_event_trace`` and ``join`` delegate to the component, with
    the host itself as the dispatch target. The component is stored under a
    name-mangled attribute so it cannot clash with the host's own fields.
    Internal state is reachable through ``host[EVENT_TARGET]`` and the other
    markers in ``evented.utils``.
    """

    evented_config: ClassVar[EventedConfig | None] = None

    def __init__(self, *args: Any, **kwargs: Any):
        self.__evented = Evented(self, config=type(self).evented_config)
        super().__init__(*args, **kwargs)

    def __evented_component__(self) -> Evented:
        try:
            return self.__evented
        except AttributeError:
            # subclass skipped EventedMixin.__init__
            self.__evented = component = Evented(self, config=type(self).evented_config)
            return component

    def __getitem__(self, key: Any) -> Any:
        if isinstance(key, Marker):
            return self.__evented_component__().lookup(key)
        getitem = getattr(super(), "__getitem__", None)
        if getitem is None:
            raise TypeError(f"{type(self).__name__!r} object is not subscriptable")
        return getitem(key)

    def add_event_listener(self, type_or_callback, callback=None, options=None) -> None:
        self.__evented_component__().add_event_listener(type_or_callback, callback, options)

    def remove_event_listener(self, type_or_callback, callback=None, options=None) -> None:
        self.__evented_component__().remove_event_listener(
            type_or_callback, callback, options
        )

    def dispatch_event(self, event: Event) -> bool:
        return self.__evented_component__().dispatch_event(event)

    def on(
        self,
        type: str | None = None,
        options: ListenerOptions | bool | None = None,
    ) -> Callable[[F], F]:
        return self.__evented_component__().on(type, options)

    async def join(self, timeout: float = 5.0) -> None:
        await self.__evented_component__().join(timeout)

    def set_event_trace(
        self, enabled: bool, verbosity: int = 1, use_rich: bool = True
    ) -> None:
        self.__evented_component__().set_event_trace(enabled, verbosity, use_rich)


def evented(config: EventedConfig | None = None) -> Callable[[C], C]:
    """Class decorator that makes instances of the class evented.

    Returns a subclass with ``EventedMixin`` mixed in that keeps the
    original name, qualname, module and docstring, so ``isinstance`` checks
    against the original class still hold.

    ```python
    @evented()
    class Downloader:
        def finish(self) -> None:
            self.dispatch_event(Downloaded())
    ```
    """

    def decorator(cls: C) -> C:
        if issubclass(cls, EventedMixin):
            if config is not None:
                cls.evented_config = config
            return cls
        namespace: dict[str, Any] = {
            "__module__": cls.__module__,
            "__qualname__": cls.__qualname__,
            "__doc__": cls.__doc__,
        }
        if config is not None:
            namespace["evented_config"] = config
        return type(cls)(cls.__name__, (EventedMixin, cls), namespace)

    return decorator


__all__ = ["Evented", "EventedMixin", "HandlerMapView", "evented"]
