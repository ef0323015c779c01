"""Listener type aliases shared by the primitives and the dispatch component."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from .primitives.event import Event

E_contra = TypeVar("E_contra", bound="Event", contravariant=True)


@runtime_checkable
class EventListenerObject(Protocol[E_contra]):
    """An object listener; ``handle_event`` is called with the event."""

    def handle_event(self, event: E_contra) -> Any: ...


EventListener: TypeAlias = Callable[["Event"], Any]
"""A plain callable listener."""

EventListenerOrEventListenerObject: TypeAlias = (
    EventListener | EventListenerObject[Any]
)
"""Anything accepted by ``add_event_listener``."""

F = TypeVar("F", bound=Callable[..., Any])


__all__ = [
    "EventListener",
    "EventListenerObject",
    "EventListenerOrEventListenerObject",
    "F",
]
