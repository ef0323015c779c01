from __future__ import annotations

import asyncio
import logging

import pytest

from evented import CustomEvent, Event, EventTarget, ListenerOptions
from evented.errors import (
    EventRetargetError,
    InvalidEventTypeError,
    InvalidListenerError,
    InvalidStateError,
)
from evented.primitives import EventPhase


@pytest.fixture()
def bus() -> EventTarget:
    return EventTarget()


def test_event_rejects_empty_type() -> None:
    with pytest.raises(InvalidEventTypeError):
        Event("")
    with pytest.raises(InvalidEventTypeError):
        Event(None)  # type: ignore[arg-type]


def test_custom_event_detail_defaults_to_none() -> None:
    assert CustomEvent("a").detail is None
    assert CustomEvent("a", detail=3).detail == 3


def test_listener_receives_event_at_target(bus: EventTarget) -> None:
    seen: list[tuple[Event, object, EventPhase]] = []
    bus.add_event_listener(
        "a", lambda e: seen.append((e, e.current_target, e.event_phase))
    )

    event = Event("a")
    assert bus.dispatch_event(event) is True

    assert seen == [(event, bus, EventPhase.AT_TARGET)]
    assert event.target is bus
    assert event.current_target is None
    assert event.event_phase is EventPhase.NONE


def test_listeners_only_receive_their_type(bus: EventTarget) -> None:
    seen: list[str] = []
    bus.add_event_listener("a", lambda e: seen.append("a"))
    bus.add_event_listener("b", lambda e: seen.append("b"))

    bus.dispatch_event(Event("b"))

    assert seen == ["b"]


def test_duplicate_registration_is_ignored(bus: EventTarget) -> None:
    calls: list[Event] = []
    listener = calls.append

    bus.add_event_listener("a", listener)
    bus.add_event_listener("a", listener)
    bus.dispatch_event(Event("a"))

    assert len(calls) == 1
    assert bus.listener_count("a") == 1


def test_capture_flag_is_part_of_listener_identity(bus: EventTarget) -> None:
    order: list[str] = []

    def listener(e: Event) -> None:
        order.append("capture" if len(order) == 0 else "bubble")

    bus.add_event_listener("a", lambda e: order.append("plain"))
    bus.add_event_listener("a", listener, True)
    bus.add_event_listener("a", listener, ListenerOptions(capture=False))

    bus.dispatch_event(Event("a"))

    # capture listeners run first
    assert order == ["capture", "plain", "bubble"]
    assert bus.listener_count("a") == 3

    bus.remove_event_listener("a", listener, True)
    assert bus.listener_count("a") == 2


def test_remove_unknown_listener_is_noop(bus: EventTarget) -> None:
    bus.remove_event_listener("a", lambda e: None)
    bus.add_event_listener("a", print)
    bus.remove_event_listener("a", lambda e: None)
    bus.remove_event_listener("a", None)

    assert bus.listener_count() == 1


def test_once_listener_runs_a_single_time(bus: EventTarget) -> None:
    calls: list[Event] = []
    bus.add_event_listener("a", calls.append, ListenerOptions(once=True))

    bus.dispatch_event(Event("a"))
    bus.dispatch_event(Event("a"))

    assert len(calls) == 1
    assert bus.listener_count("a") == 0


def test_prevent_default_only_applies_to_cancelable_events(bus: EventTarget) -> None:
    bus.add_event_listener("a", lambda e: e.prevent_default())

    assert bus.dispatch_event(Event("a")) is True

    cancelable = Event("a", cancelable=True)
    assert bus.dispatch_event(cancelable) is False
    assert cancelable.default_prevented is True


def test_passive_listener_cannot_prevent_default(bus: EventTarget) -> None:
    bus.add_event_listener(
        "a", lambda e: e.prevent_default(), ListenerOptions(passive=True)
    )

    event = Event("a", cancelable=True)

    assert bus.dispatch_event(event) is True
    assert event.default_prevented is False


def test_stop_immediate_propagation_skips_remaining_listeners(bus: EventTarget) -> None:
    order: list[str] = []

    def first(e: Event) -> None:
        order.append("first")
        e.stop_immediate_propagation()

    bus.add_event_listener("a", first)
    bus.add_event_listener("a", lambda e: order.append("second"))

    bus.dispatch_event(Event("a"))

    assert order == ["first"]


def test_stop_propagation_keeps_listeners_on_same_target(bus: EventTarget) -> None:
    order: list[str] = []

    def first(e: Event) -> None:
        order.append("first")
        e.stop_propagation()

    bus.add_event_listener("a", first)
    bus.add_event_listener("a", lambda e: order.append("second"))

    bus.dispatch_event(Event("a"))

    assert order == ["first", "second"]


def test_cancel_prevents_default_and_stops_delivery(bus: EventTarget) -> None:
    order: list[str] = []

    def first(e: Event) -> None:
        order.append("first")
        e.cancel()

    bus.add_event_listener("a", first)
    bus.add_event_listener("a", lambda e: order.append("second"))

    assert bus.dispatch_event(Event("a", cancelable=True)) is False
    assert order == ["first"]


def test_handle_event_objects_are_supported(bus: EventTarget) -> None:
    class Listener:
        def __init__(self) -> None:
            self.events: list[Event] = []

        def handle_event(self, event: Event) -> None:
            self.events.append(event)

    listener = Listener()
    bus.add_event_listener("a", listener)
    event = Event("a")
    bus.dispatch_event(event)

    assert listener.events == [event]


def test_invalid_listener_is_rejected(bus: EventTarget) -> None:
    with pytest.raises(InvalidListenerError):
        bus.add_event_listener("a", object())  # type: ignore[arg-type]
    with pytest.raises(InvalidEventTypeError):
        bus.add_event_listener("", print)


def test_listener_added_during_dispatch_waits_for_next_event(bus: EventTarget) -> None:
    calls: list[str] = []

    def late(e: Event) -> None:
        calls.append("late")

    def adder(e: Event) -> None:
        calls.append("adder")
        bus.add_event_listener("a", late)

    bus.add_event_listener("a", adder)

    bus.dispatch_event(Event("a"))
    assert calls == ["adder"]

    bus.dispatch_event(Event("a"))
    assert calls == ["adder", "adder", "late"]


def test_listener_removed_during_dispatch_does_not_run(bus: EventTarget) -> None:
    calls: list[str] = []

    def victim(e: Event) -> None:
        calls.append("victim")

    def remover(e: Event) -> None:
        calls.append("remover")
        bus.remove_event_listener("a", victim)

    bus.add_event_listener("a", remover)
    bus.add_event_listener("a", victim)

    bus.dispatch_event(Event("a"))

    assert calls == ["remover"]


def test_redispatch_while_dispatching_is_rejected(bus: EventTarget) -> None:
    errors: list[BaseException] = []

    def listener(e: Event) -> None:
        try:
            bus.dispatch_event(e)
        except InvalidStateError as exc:
            errors.append(exc)

    bus.add_event_listener("a", listener)
    event = Event("a")
    bus.dispatch_event(event)

    assert len(errors) == 1
    # once finished, the same instance may be dispatched again
    assert event.dispatching is False
    bus.dispatch_event(event)
    assert len(errors) == 2


def test_listener_exception_propagates_and_resets_state(bus: EventTarget) -> None:
    calls: list[str] = []

    def boom(e: Event) -> None:
        raise ValueError("boom")

    bus.add_event_listener("a", boom)
    bus.add_event_listener("a", lambda e: calls.append("after"))

    event = Event("a")
    with pytest.raises(ValueError, match="boom"):
        bus.dispatch_event(event)

    assert calls == []
    assert event.dispatching is False


def test_dispatch_requires_event_instance(bus: EventTarget) -> None:
    with pytest.raises(TypeError):
        bus.dispatch_event("a")  # type: ignore[arg-type]


def test_pinned_target_survives_bus_delivery(bus: EventTarget) -> None:
    host = object()
    seen: list[object] = []
    bus.add_event_listener("a", lambda e: seen.append(e.current_target))

    event = Event("a")
    event.pin_target(host)
    bus.dispatch_event(event)

    assert seen == [host]
    assert event.target is host
    assert event.current_target is host

    event.pin_target(host)
    with pytest.raises(EventRetargetError):
        event.pin_target(object())


@pytest.mark.asyncio()
async def test_async_listener_is_scheduled_not_awaited(bus: EventTarget, sleep) -> None:
    done: list[str] = []

    async def listener(e: Event) -> None:
        await asyncio.sleep(0.005)
        done.append(e.type)

    bus.add_event_listener("a", listener)

    assert bus.dispatch_event(Event("a")) is True
    assert done == []

    await sleep(50)
    assert done == ["a"]


def test_async_listener_without_loop_is_discarded(
    bus: EventTarget, caplog: pytest.LogCaptureFixture
) -> None:
    ran: list[str] = []

    async def listener(e: Event) -> None:
        ran.append("ran")

    bus.add_event_listener("a", listener)

    with caplog.at_level(logging.WARNING, logger="evented.primitives.target"):
        bus.dispatch_event(Event("a"))

    assert ran == []
    assert "without a running event loop" in caplog.text


@pytest.mark.asyncio()
async def test_failed_async_listener_is_logged(
    bus: EventTarget, caplog: pytest.LogCaptureFixture
) -> None:
    async def listener(e: Event) -> None:
        raise RuntimeError("async boom")

    bus.add_event_listener("a", listener)

    with caplog.at_level(logging.ERROR, logger="evented.primitives.target"):
        assert bus.dispatch_event(Event("a")) is True
        await bus.join()

    assert "Async listener for 'a' failed" in caplog.text
    assert "async boom" in caplog.text


@pytest.mark.asyncio()
async def test_join_timeout_leaves_listeners_running(
    bus: EventTarget, caplog: pytest.LogCaptureFixture
) -> None:
    release = asyncio.Event()
    done: list[str] = []

    async def listener(e: Event) -> None:
        await release.wait()
        done.append(e.type)

    bus.add_event_listener("a", listener)
    bus.dispatch_event(Event("a"))

    with caplog.at_level(logging.WARNING, logger="evented.primitives.target"):
        await bus.join(timeout=0.01)

    assert "Timeout waiting for 1 async listener(s)" in caplog.text
    assert done == []

    release.set()
    await bus.join()
    assert done == ["a"]


@pytest.mark.asyncio()
async def test_join_without_pending_listeners_returns() -> None:
    await EventTarget().join()


def test_equal_unhashable_listeners_are_distinct(bus: EventTarget) -> None:
    class Sink:
        __hash__ = None  # type: ignore[assignment]

        def __init__(self) -> None:
            self.events: list[Event] = []

        def __eq__(self, other: object) -> bool:
            return isinstance(other, Sink)

        def handle_event(self, event: Event) -> None:
            self.events.append(event)

    first, second = Sink(), Sink()
    bus.add_event_listener("a", first)
    bus.add_event_listener("a", second)
    bus.remove_event_listener("a", second)
    bus.dispatch_event(Event("a"))

    assert len(first.events) == 1
    assert second.events == []
