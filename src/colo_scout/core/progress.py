"""Live progress counters and the periodic progress line."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

from rich.console import Console


@dataclass
class ProgressState:
    """Counters shared by every worker of one scheduler run.

    Increments never await, so on the event loop they cannot interleave
    with another task's update. ``attempted`` is always bumped before
    ``accepted`` for the same endpoint, which keeps
    ``accepted <= attempted <= total`` true at every observation.
    """

    total: int
    attempted: int = field(default=0, init=False)
    accepted: int = field(default=0, init=False)

    def record_attempt(self) -> None:
        self.attempted += 1

    def record_accept(self) -> None:
        self.accepted += 1

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return self.attempted / self.total * 100

    @property
    def finished(self) -> bool:
        return self.attempted >= self.total

    def render(self) -> str:
        """Format as ``attempted/total (percent%), accepted=N``."""
        return (
            f"{self.attempted}/{self.total} ({self.percent:.2f}%), "
            f"accepted={self.accepted}"
        )


class ProgressTracker:
    """Redraws the progress line on a fixed interval.

    The line is overwritten in place with a carriage return while the run
    is active. ``stop()`` joins the ticking task before drawing the final
    snapshot, so the last line always shows the true final counts.
    """

    def __init__(
        self,
        state: ProgressState,
        console: Console | None = None,
        interval: float = 1.0,
    ):
        self.state = state
        self.console = console or Console(stderr=True)
        self.interval = interval
        self._task: asyncio.Task | None = None

    def start(self) -> "ProgressTracker":
        """Begin ticking; returns self so the caller can keep the handle."""
        if not self.running:
            self._task = asyncio.create_task(self._tick())
        return self

    async def stop(self) -> None:
        """Cancel ticking and draw one final newline-terminated snapshot."""
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        self._draw(final=True)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _tick(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._draw(final=False)

    def _draw(self, final: bool) -> None:
        self.console.print(
            self.state.render(),
            end="\n" if final else "\r",
            highlight=False,
            soft_wrap=True,
        )
