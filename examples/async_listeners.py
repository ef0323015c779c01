"""Async listeners are scheduled on the running loop without blocking dispatch."""

from __future__ import annotations

import asyncio

from evented import CustomEvent, Evented


async def main() -> None:
    events = Evented()

    async def slow(event: CustomEvent[int]) -> None:
        await asyncio.sleep(0.01)
        print(f"processed {event.detail}")

    events.add_event_listener("job", slow)
    events.dispatch_event(CustomEvent("job", detail=42))
    print("dispatch returned")
    await events.join(timeout=1)


if __name__ == "__main__":
    asyncio.run(main())
