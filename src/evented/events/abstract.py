"""Cloneable event envelope.

A dispatched event instance is pinned to the object that dispatched it, so
the same instance cannot be re-emitted from another object. ``clone()`` is the
sanctioned way to re-emit an equivalent event: it rebuilds the instance from
the arguments its constructor was called with.

Subclasses with their own ``__init__`` signature must forward those arguments
to ``AbstractEvent.__init__`` via ``arguments=ConstructorArguments.of(...)``.
A subclass that does not will fail to clone with ``NonCloneableEventError``
instead of producing a wrong copy.

Example:
    ```python
    class Saved(AbstractEvent[str]):
        def __init__(self, path: str, *, cancelable: bool = False):
            super().__init__(
                detail=path,
                cancelable=cancelable,
                arguments=ConstructorArguments.of(path, cancelable=cancelable),
            )
    ```
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Generic, Self, TypeVar

from ..errors import NonCloneableEventError
from ..primitives.event import CustomEvent

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class ConstructorArguments:
    """Positional and keyword arguments recorded for ``clone()``."""

    args: tuple[Any, ...] = ()
    kwargs: MappingProxyType[str, Any] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def of(cls, *args: Any, **kwargs: Any) -> ConstructorArguments:
        return cls(args=args, kwargs=MappingProxyType(dict(kwargs)))


class AbstractEvent(CustomEvent[T], Generic[T]):
    """Typed, cloneable event with a ``detail`` payload.

    Two construction paths:

    - ``AbstractEvent(type, detail=..., ...)`` or ``with_type(type, ...)``
      uses an explicit type string.
    - ``AbstractEvent(detail=..., ...)`` or ``default_typed(...)`` uses the
      concrete class name as the type.

    ``detail`` defaults to ``None``.
    """

    def __init__(
        self,
        type: str | None = None,
        *,
        detail: T | None = None,
        bubbles: bool = False,
        cancelable: bool = False,
        composed: bool = False,
        arguments: ConstructorArguments | None = None,
    ):
        if arguments is None and self.__class__.__init__ is AbstractEvent.__init__:
            kwargs: dict[str, Any] = {
                "detail": detail,
                "bubbles": bubbles,
                "cancelable": cancelable,
                "composed": composed,
            }
            arguments = ConstructorArguments.of(
                *(() if type is None else (type,)), **kwargs
            )
        # stays None when an overriding __init__ did not forward its arguments
        super().__init__(
            self.__class__.__name__ if type is None else type,
            detail=detail,
            bubbles=bubbles,
            cancelable=cancelable,
            composed=composed,
        )
        self._constructor_arguments = arguments

    @classmethod
    def with_type(cls, type: str, **options: Any) -> Self:
        """Construct with an explicit event type."""
        return cls(type, **options)

    @classmethod
    def default_typed(cls, **options: Any) -> Self:
        """Construct using the class name as the event type."""
        return cls(**options)

    @property
    def constructor_arguments(self) -> ConstructorArguments | None:
        """Arguments ``clone()`` rebuilds from; None if they were not forwarded."""
        return self._constructor_arguments

    def clone(self) -> Self:
        """Return a new instance built from the recorded constructor arguments.

        Raises:
            NonCloneableEventError: If a subclass did not forward its
                constructor arguments, or they no longer fit its signature.
        """
        cls = self.__class__
        recorded = self._constructor_arguments
        if recorded is None:
            raise NonCloneableEventError(cls)
        try:
            inspect.signature(cls).bind(*recorded.args, **recorded.kwargs)
        except TypeError as e:
            raise NonCloneableEventError(cls, str(e)) from e
        return cls(*recorded.args, **recorded.kwargs)


__all__ = ["AbstractEvent", "ConstructorArguments"]
