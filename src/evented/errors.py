"""Exception hierarchy for evented.

All errors raised by the package derive from ``EventedError`` so callers can
catch them as a group, while each one also subclasses the builtin that best
describes it (``TypeError``, ``ValueError``, ``RuntimeError``).
"""

from __future__ import annotations


class EventedError(Exception):
    """Base class for all evented errors."""


class NonCloneableEventError(EventedError, TypeError):
    """Raised by ``AbstractEvent.clone()`` when the recorded constructor
    arguments no longer fit the concrete event class.

    This happens when a subclass calls ``super().__init__()`` without
    forwarding its own arguments.
    """

    def __init__(self, event_class: type, reason: str | None = None):
        self.event_class = event_class
        message = (
            f"Cloning {event_class.__name__} requires the original constructor "
            "arguments to be passed into super"
        )
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidStateError(EventedError, RuntimeError):
    """Raised when an event is dispatched while already being dispatched."""


class EventRetargetError(InvalidStateError):
    """Raised when an event pinned to one host is dispatched on another.

    Use ``clone()`` to re-emit an equivalent event from a different object.
    """


class InvalidListenerError(EventedError, TypeError):
    """Raised when a listener is neither callable nor has ``handle_event``."""


class InvalidEventTypeError(EventedError, ValueError):
    """Raised when an event type is not a non-empty string."""


__all__ = [
    "EventedError",
    "NonCloneableEventError",
    "InvalidStateError",
    "EventRetargetError",
    "InvalidListenerError",
    "InvalidEventTypeError",
]
