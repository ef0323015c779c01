"""Re-emit errors from an owned object as the owner's own error events."""

from __future__ import annotations

from evented import EventAll, EventError, EventedMixin, evented


class FetchError(EventError):
    pass


class SyncError(EventError):
    pass


@evented()
class Fetcher:
    def fetch(self, url: str) -> None:
        self.dispatch_event(FetchError(detail=ConnectionError(f"{url} unreachable")))


class Syncer(EventedMixin):
    def __init__(self) -> None:
        super().__init__()
        self.fetcher = Fetcher()
        self.fetcher.add_event_listener("FetchError", self._on_fetch_error)

    def _on_fetch_error(self, event: FetchError) -> None:
        error = RuntimeError("sync failed")
        error.__cause__ = event.detail
        self.dispatch_event(SyncError(detail=error))

    def run(self) -> None:
        self.fetcher.fetch("https://example.invalid/feed")


def main() -> None:
    syncer = Syncer()

    def log_everything(event: EventAll) -> None:
        inner = event.detail
        print(f"{type(inner).__name__}: {inner.detail} (caused by {inner.detail.__cause__!r})")

    syncer.add_event_listener("EventAll", log_everything)
    syncer.run()


if __name__ == "__main__":
    main()
