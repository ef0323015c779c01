from __future__ import annotations

from .abstract import AbstractEvent, ConstructorArguments


class EventError(AbstractEvent[BaseException]):
    """Reports an exception raised inside an evented object.

    Objects that encapsulate other evented objects typically listen for the
    inner object's ``EventError`` and re-emit one of their own, with the
    inner exception chained as ``__cause__``.
    """

    def __init__(
        self,
        *,
        detail: BaseException,
        bubbles: bool = False,
        cancelable: bool = False,
        composed: bool = False,
    ):
        super().__init__(
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

    @property
    def detail(self) -> BaseException:
        return self._detail
