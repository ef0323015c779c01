"""Dispatch tracing for evented objects.

When tracing is enabled, every bus delivery made by ``Evented.dispatch_event``
is reported with its phase, event type, listener count, resulting status and
duration. Output goes to a Rich console on stderr, or to ``logging`` at debug
level when Rich output is disabled.

Verbosity:
- 0: one line per delivery
- 1: one line per delivery plus the detail summary inline
- 2: one line per delivery followed by a field table
"""

from __future__ import annotations

import enum
import logging
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .primitives.event import CustomEvent, Event

logger = logging.getLogger(__name__)

# stderr keeps trace output out of the host program's stdout
_console = Console(stderr=True)


class DispatchPhase(enum.StrEnum):
    EXACT = "exact"
    DEFAULT = "default"
    ALL = "all"
    ANY = "any"


_PHASE_COLORS = {
    DispatchPhase.EXACT: "cyan",
    DispatchPhase.DEFAULT: "yellow",
    DispatchPhase.ALL: "blue",
    DispatchPhase.ANY: "magenta",
}


def _truncate(value: Any, limit: int) -> str:
    text = repr(value)
    if len(text) > limit:
        text = text[: limit - 3] + "..."
    return text


class DispatchTracer:
    """Formats and emits trace records for one ``Evented`` component."""

    def __init__(
        self,
        enabled: bool = False,
        verbosity: int = 1,
        use_rich: bool = True,
        console: Console | None = None,
    ):
        self.enabled = enabled
        self.verbosity = verbosity
        self.use_rich = use_rich
        self._console = console or _console

    def configure(
        self, enabled: bool, verbosity: int = 1, use_rich: bool = True, owner: str = ""
    ) -> None:
        if not 0 <= verbosity <= 2:
            raise ValueError(f"Trace verbosity must be 0, 1 or 2, got {verbosity!r}")
        self.enabled = enabled
        self.verbosity = verbosity
        self.use_rich = use_rich

        msg = f"Event tracing {'enabled' if enabled else 'disabled'} for {owner}"
        if use_rich and enabled:
            self._console.print(
                Panel(
                    f"[bold green]✓[/bold green] {msg}\n"
                    f"[dim]Verbosity: {['minimal', 'normal', 'verbose'][verbosity]}[/dim]",
                    title="Event Tracing",
                    border_style="green",
                )
            )
        elif use_rich:
            self._console.print(f"[yellow]ℹ[/yellow] {msg}")
        else:
            logger.info(f"{msg} (verbosity={verbosity})")

    def format(
        self,
        phase: DispatchPhase,
        event: Event,
        handler_count: int,
        status: bool,
        duration_ms: float | None = None,
    ) -> tuple[Text, Table | None]:
        color = _PHASE_COLORS[phase]
        text = Text()
        text.append(f"{phase.value:<7} ", style=f"bold {color}")
        text.append(event.type, style="bold")
        text.append(" | ")
        if handler_count > 0:
            text.append(f"listeners: {handler_count}", style="green")
        else:
            text.append("no listeners", style="dim red")
        text.append(" | ")
        text.append("ok" if status else "canceled", style="green" if status else "red")
        if duration_ms is not None:
            text.append(" | ")
            if duration_ms < 10:
                dur_style = "green"
            elif duration_ms < 100:
                dur_style = "yellow"
            else:
                dur_style = "red"
            text.append(f"{duration_ms:.2f}ms", style=f"bold {dur_style}")

        detail = event.detail if isinstance(event, CustomEvent) else None
        if self.verbosity == 1 and detail is not None:
            text.append(f" [{_truncate(detail, 40)}]", style="dim")

        table = None
        if self.verbosity >= 2:
            table = Table(show_header=True, header_style="bold cyan", box=None)
            table.add_column("Field", style="cyan", width=15)
            table.add_column("Value", overflow="fold")
            table.add_row("class", type(event).__name__)
            table.add_row("target", _truncate(event.target, 100))
            table.add_row(
                "flags",
                f"bubbles={event.bubbles} cancelable={event.cancelable} "
                f"composed={event.composed}",
            )
            if detail is not None:
                table.add_row("detail", _truncate(detail, 200))
        return text, table

    def record(
        self,
        phase: DispatchPhase,
        event: Event,
        handler_count: int,
        status: bool,
        duration_ms: float | None = None,
    ) -> None:
        if not self.enabled:
            return

        if self.use_rich:
            text, table = self.format(phase, event, handler_count, status, duration_ms)
            self._console.print(text)
            if table is not None:
                self._console.print(table)
            return

        parts = [
            "[EVENT TRACE]",
            f"phase={phase.value}",
            f"event={event.type!r}",
            f"listeners={handler_count}",
            f"status={'ok' if status else 'canceled'}",
        ]
        if duration_ms is not None:
            parts.append(f"duration={duration_ms:.2f}ms")
        if self.verbosity >= 1 and isinstance(event, CustomEvent):
            parts.append(f"detail={_truncate(event.detail, 200)}")
        logger.debug(" | ".join(parts))


__all__ = ["DispatchPhase", "DispatchTracer"]
