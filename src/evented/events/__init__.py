"""Event envelopes: the cloneable base class and its built-in subclasses."""

from __future__ import annotations

from .abstract import AbstractEvent, ConstructorArguments
from .error import EventError
from .wrappers import EventAll, EventAny, EventDefault

__all__ = [
    "AbstractEvent",
    "ConstructorArguments",
    "EventAll",
    "EventAny",
    "EventDefault",
    "EventError",
]
