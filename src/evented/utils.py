"""Process-wide markers for looking up an evented object's internal state.

The markers are unique objects created once at import time. They cannot be
recreated from a name, so only code that imports them can use them:

    bus = lookup(host, EVENT_TARGET)
    bus = host[EVENT_TARGET]          # same thing on EventedMixin hosts

Lookups are read-only:

- EVENT_TARGET returns the internal ``EventTarget`` (for forwarding it to
  another delivery system)
- EVENT_HANDLERS returns a read-only mapping of caller callback to the
  wrappers registered on the bus
- EVENT_HANDLED returns a frozen snapshot of the handled set
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from .primitives.target import EventTarget


class Marker:
    """Unique, identity-compared lookup key."""

    __slots__ = ("_name",)

    def __init__(self, name: str):
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"<Marker {self._name}>"

    def __reduce__(self):
        raise TypeError(f"{self!r} cannot be pickled or copied")

    def __copy__(self) -> Marker:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Marker:
        return self


EVENT_TARGET: Final = Marker("event_target")
EVENT_HANDLERS: Final = Marker("event_handlers")
EVENT_HANDLED: Final = Marker("event_handled")

MARKERS: Final = frozenset({EVENT_TARGET, EVENT_HANDLERS, EVENT_HANDLED})


def lookup(host: Any, marker: Marker) -> Any:
    """Return the read-only view of ``host``'s state named by ``marker``.

    Raises:
        TypeError: If ``host`` is not an evented object.
        KeyError: If ``marker`` is not one of the module's markers.
    """
    resolve = getattr(host, "__evented_component__", None)
    if resolve is None:
        raise TypeError(f"{type(host).__name__} is not evented")
    return resolve().lookup(marker)


def get_event_target(host: Any) -> EventTarget:
    return lookup(host, EVENT_TARGET)


__all__ = [
    "Marker",
    "EVENT_TARGET",
    "EVENT_HANDLERS",
    "EVENT_HANDLED",
    "MARKERS",
    "lookup",
    "get_event_target",
]
