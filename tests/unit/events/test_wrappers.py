from __future__ import annotations

import pytest

from evented import Event, EventAll, EventAny, EventDefault, EventError


@pytest.mark.parametrize(
    ("wrapper_cls", "expected_type"),
    [
        (EventDefault, "EventDefault"),
        (EventAll, "EventAll"),
        (EventAny, "evented/EventAny"),
    ],
)
def test_wrapper_type_and_flags(wrapper_cls, expected_type: str) -> None:
    original = Event("saved", bubbles=True, cancelable=True, composed=False)

    wrapper = wrapper_cls.wrap(original)

    assert wrapper.type == expected_type
    assert wrapper.detail is original
    assert wrapper.bubbles is True
    assert wrapper.cancelable is True
    assert wrapper.composed is False


def test_catch_all_type_is_namespaced() -> None:
    assert EventAny.type_name.startswith("evented/")
    assert EventAny.type_name != EventAny.__name__


def test_wrapper_clone_keeps_original_event() -> None:
    original = Event("saved")
    wrapper = EventAll.wrap(original)

    clone = wrapper.clone()

    assert isinstance(clone, EventAll)
    assert clone.detail is original
    assert clone.type == "EventAll"


def test_wrapper_subclass_uses_its_own_name() -> None:
    class AuditEvent(EventAll):
        pass

    assert AuditEvent.wrap(Event("x")).type == "AuditEvent"


def test_event_error_carries_exception() -> None:
    error = RuntimeError("disk full")

    event = EventError(detail=error)
    clone = event.clone()

    assert event.type == "EventError"
    assert event.detail is error
    assert clone.detail is error


def test_event_error_subclass_type() -> None:
    class UploadError(EventError):
        pass

    event = UploadError(detail=ValueError("bad"), cancelable=True)

    assert event.type == "UploadError"
    assert event.clone().cancelable is True
