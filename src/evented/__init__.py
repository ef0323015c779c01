"""evented - typed, cloneable events and three-phase dispatch for any object.

Attach an ``Evented`` component to an object (or mix in ``EventedMixin``, or
decorate the class with ``@evented()``) and dispatch ``AbstractEvent``
subclasses from it. Every dispatch is observable by exact type, through
``EventDefault`` when nobody handled it, and through ``EventAll`` and the
catch-all ``EventAny`` channel.
"""

import logging

from .config import EventedConfig
from .errors import (
    EventedError,
    EventRetargetError,
    InvalidEventTypeError,
    InvalidListenerError,
    InvalidStateError,
    NonCloneableEventError,
)
from .evented import Evented, EventedMixin, evented
from .events import (
    AbstractEvent,
    ConstructorArguments,
    EventAll,
    EventAny,
    EventDefault,
    EventError,
)
from .primitives import CustomEvent, Event, EventPhase, EventTarget, ListenerOptions
from . import types, utils

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Dispatch
    "Evented",
    "EventedMixin",
    "evented",
    "EventedConfig",
    # Events
    "AbstractEvent",
    "ConstructorArguments",
    "EventDefault",
    "EventAll",
    "EventAny",
    "EventError",
    # Primitives
    "Event",
    "CustomEvent",
    "EventPhase",
    "EventTarget",
    "ListenerOptions",
    # Errors
    "EventedError",
    "NonCloneableEventError",
    "InvalidStateError",
    "EventRetargetError",
    "InvalidListenerError",
    "InvalidEventTypeError",
    # Modules
    "types",
    "utils",
]
