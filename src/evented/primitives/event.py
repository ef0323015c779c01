"""Primitive event objects consumed by the dispatch component.

CONTENTS:
- EventPhase: Phase constants (only NONE and AT_TARGET occur on a single target)
- Event: Typed event with bubbles/cancelable/composed flags and cancellation
- CustomEvent: Event carrying a ``detail`` payload

These mirror the DOM ``Event``/``CustomEvent`` contract closely enough for
``EventTarget`` to deliver them. There is no node tree, so ``bubbles`` and
``composed`` are carried as data only.
"""

from __future__ import annotations

import enum
import time
from typing import Any, Generic, TypeVar

from ..errors import EventRetargetError, InvalidEventTypeError

T = TypeVar("T")


class EventPhase(enum.IntEnum):
    NONE = 0
    CAPTURING_PHASE = 1
    AT_TARGET = 2
    BUBBLING_PHASE = 3


def validate_event_type(type: Any) -> str:
    if not isinstance(type, str) or not type:
        raise InvalidEventTypeError(
            f"Event type must be a non-empty string, got {type!r}"
        )
    return type


class Event:
    """A typed event delivered by ``EventTarget``.

    ``type`` is fixed at construction. ``target`` and ``current_target`` are
    read-only; they are set by the bus during delivery, or pinned by the
    dispatch component so they keep pointing at the host object.
    """

    NONE = EventPhase.NONE
    CAPTURING_PHASE = EventPhase.CAPTURING_PHASE
    AT_TARGET = EventPhase.AT_TARGET
    BUBBLING_PHASE = EventPhase.BUBBLING_PHASE

    def __init__(
        self,
        type: str,
        *,
        bubbles: bool = False,
        cancelable: bool = False,
        composed: bool = False,
    ):
        self._type = validate_event_type(type)
        self._bubbles = bool(bubbles)
        self._cancelable = bool(cancelable)
        self._composed = bool(composed)
        self._time_stamp = time.monotonic() * 1000
        self._target: Any = None
        self._current_target: Any = None
        self._pinned = False
        self._event_phase = EventPhase.NONE
        self._dispatching = False
        self._canceled = False
        self._in_passive_listener = False
        self._stop_propagation = False
        self._stop_immediate_propagation = False

    @property
    def type(self) -> str:
        return self._type

    @property
    def bubbles(self) -> bool:
        return self._bubbles

    @property
    def cancelable(self) -> bool:
        return self._cancelable

    @property
    def composed(self) -> bool:
        return self._composed

    @property
    def time_stamp(self) -> float:
        return self._time_stamp

    @property
    def is_trusted(self) -> bool:
        return False

    @property
    def target(self) -> Any:
        return self._target

    @property
    def current_target(self) -> Any:
        return self._current_target

    @property
    def event_phase(self) -> EventPhase:
        return self._event_phase

    @property
    def default_prevented(self) -> bool:
        return self._canceled

    @property
    def dispatching(self) -> bool:
        """True while a bus is delivering this event."""
        return self._dispatching

    def prevent_default(self) -> None:
        """Cancel the event if it is cancelable and the listener is not passive."""
        if self._cancelable and not self._in_passive_listener:
            self._canceled = True

    def stop_propagation(self) -> None:
        self._stop_propagation = True

    def stop_immediate_propagation(self) -> None:
        """Skip the remaining listeners of the current delivery."""
        self._stop_propagation = True
        self._stop_immediate_propagation = True

    def cancel(self) -> None:
        """Prevent the default and stop delivery to later listeners."""
        self.prevent_default()
        self.stop_immediate_propagation()

    def pin_target(self, target: Any) -> None:
        """Fix ``target`` and ``current_target`` to ``target``.

        Pinning again to the same object is allowed; pinning to another
        object raises ``EventRetargetError``.
        """
        if self._pinned:
            if self._target is not target:
                raise EventRetargetError(
                    f"{type(self).__name__}({self._type!r}) is already bound to "
                    f"{self._target!r}; dispatch a clone() instead"
                )
            return
        self._target = target
        self._current_target = target
        self._pinned = True

    def _begin_dispatch(self, target: Any) -> None:
        self._dispatching = True
        self._event_phase = EventPhase.AT_TARGET
        if not self._pinned:
            self._target = target
            self._current_target = target

    def _end_dispatch(self) -> None:
        self._dispatching = False
        self._event_phase = EventPhase.NONE
        self._in_passive_listener = False
        self._stop_propagation = False
        self._stop_immediate_propagation = False
        if not self._pinned:
            self._current_target = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self._type!r})"


class CustomEvent(Event, Generic[T]):
    """Event with an arbitrary ``detail`` payload."""

    def __init__(
        self,
        type: str,
        *,
        detail: T | None = None,
        bubbles: bool = False,
        cancelable: bool = False,
        composed: bool = False,
    ):
        super().__init__(
            type, bubbles=bubbles, cancelable=cancelable, composed=composed
        )
        self._detail = detail

    @property
    def detail(self) -> T | None:
        return self._detail

    def __repr__(self) -> str:
        return f"{type(self).__name__}(type={self.type!r}, detail={self._detail!r})"


__all__ = ["Event", "CustomEvent", "EventPhase", "validate_event_type"]
