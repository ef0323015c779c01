"""DOM-style event primitives: ``Event``, ``CustomEvent`` and ``EventTarget``."""

from __future__ import annotations

from .event import CustomEvent, Event, EventPhase
from .target import EventTarget, ListenerOptions, ListenerRegistration

__all__ = [
    "Event",
    "CustomEvent",
    "EventPhase",
    "EventTarget",
    "ListenerOptions",
    "ListenerRegistration",
]
