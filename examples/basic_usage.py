"""Minimal evented example covering registration, defaults and the catch-all channel."""

from __future__ import annotations

from evented import AbstractEvent, EventAny, EventDefault, evented


class Uploaded(AbstractEvent[str]):
    pass


class Skipped(AbstractEvent[str]):
    pass


@evented()
class Uploader:
    def upload(self, path: str) -> None:
        if path.endswith(".tmp"):
            self.dispatch_event(Skipped(detail=path))
        else:
            self.dispatch_event(Uploaded(detail=path))


def main() -> None:
    uploader = Uploader()

    @uploader.on("Uploaded")
    def report(event: Uploaded) -> None:
        print(f"uploaded {event.detail}")

    @uploader.on("EventDefault")
    def unhandled(event: EventDefault) -> None:
        print(f"nobody handled {event.detail.type} for {event.detail.detail}")

    @uploader.on()
    def audit(event: EventAny) -> None:
        print(f"audit: {event.detail.type}")

    uploader.upload("report.pdf")
    uploader.upload("scratch.tmp")


if __name__ == "__main__":
    main()
