"""Wrapper events synthesized by ``Evented.dispatch_event``.

Each wrapper carries the original event as ``detail`` and copies its
``bubbles``/``cancelable``/``composed`` flags (see ``wrap()``).

- EventDefault: wraps an event that no exact-type listener handled
- EventAll: wraps every dispatched event, handled or not
- EventAny: delivered to listeners registered without a type
"""

from __future__ import annotations

from typing import Any, ClassVar, Self, TypeVar

from ..primitives.event import Event
from .abstract import AbstractEvent, ConstructorArguments

E = TypeVar("E", bound=Event)

PACKAGE_NAME = __name__.split(".")[0]


class _WrapperEvent(AbstractEvent[E]):
    type_name: ClassVar[str]

    def __init__(
        self,
        *,
        detail: E,
        bubbles: bool = False,
        cancelable: bool = False,
        composed: bool = False,
    ):
        super().__init__(
            self.type_name,
            detail=detail,
            bubbles=bubbles,
            cancelable=cancelable,
            composed=composed,
            arguments=ConstructorArguments.of(
                detail=detail,
                bubbles=bubbles,
                cancelable=cancelable,
                composed=composed,
            ),
        )

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "type_name" not in cls.__dict__:
            cls.type_name = cls.__name__

    @classmethod
    def wrap(cls, event: E) -> Self:
        """Build a wrapper around ``event`` that copies its flags."""
        return cls(
            detail=event,
            bubbles=event.bubbles,
            cancelable=event.cancelable,
            composed=event.composed,
        )

    @property
    def detail(self) -> E:
        return self._detail


class EventDefault(_WrapperEvent[E]):
    """EventDefault wraps dispatched events that were not handled."""


class EventAll(_WrapperEvent[E]):
    """EventAll wraps all dispatched events including already handled events."""


class EventAny(_WrapperEvent[E]):
    """EventAny is what listeners registered without a type receive.

    Its type is namespaced with the package name so it cannot collide with
    a caller's own event types.
    """

    type_name = f"{PACKAGE_NAME}/EventAny"


__all__ = ["EventDefault", "EventAll", "EventAny", "PACKAGE_NAME"]
