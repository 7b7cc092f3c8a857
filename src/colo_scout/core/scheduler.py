"""Bounded-concurrency probe scheduler.

Dispatches one probe per endpoint onto a semaphore-limited pool, stops
dispatching once enough endpoints have been accepted, and streams the
accepted outcomes in completion order.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Sequence
from typing import Optional, Protocol

from rich.console import Console

from colo_scout.core.config import Settings
from colo_scout.core.exceptions import ProbeError
from colo_scout.core.logging import get_logger
from colo_scout.core.models import Endpoint, ProbeOutcome
from colo_scout.core.progress import ProgressState, ProgressTracker
from colo_scout.prober.filters import accepts

logger = get_logger(__name__)

# Marks the end of the outcome stream.
_DONE = object()


class Prober(Protocol):
    async def probe(self, endpoint: Endpoint) -> ProbeOutcome: ...


class ProbeScheduler:
    """Runs a prober over many endpoints with bounded parallelism."""

    def __init__(
        self,
        settings: Settings,
        prober: Prober,
        console: Optional[Console] = None,
    ):
        self.settings = settings
        self.prober = prober
        self.console = console or Console(stderr=True)
        self.state: Optional[ProgressState] = None

        allowed = settings.scheduler.allowed_colos
        self.allowed: Optional[frozenset[str]] = frozenset(allowed) if allowed else None

    @property
    def max_parallel(self) -> int:
        return self.settings.scheduler.max_parallel

    @property
    def max_accepted(self) -> int:
        return self.settings.scheduler.max_accepted

    @property
    def verbose(self) -> bool:
        return self.settings.output.verbose

    async def run(self, endpoints: Sequence[Endpoint]) -> AsyncIterator[ProbeOutcome]:
        """Probe *endpoints* and yield accepted outcomes as they complete.

        The progress line is stopped (and its final snapshot drawn) before
        the stream ends.
        """
        state = ProgressState(total=len(endpoints))
        self.state = state
        queue: asyncio.Queue = asyncio.Queue()

        tracker = ProgressTracker(
            state,
            console=self.console,
            interval=self.settings.scheduler.progress_interval,
        ).start()
        dispatcher = asyncio.create_task(self._dispatch(endpoints, state, queue))

        try:
            while True:
                item = await queue.get()
                if item is _DONE:
                    break
                yield item
        finally:
            try:
                await dispatcher
            finally:
                await tracker.stop()

        if not state.finished:
            logger.info(
                "max_accepted_reached",
                accepted=state.accepted,
                skipped=state.total - state.attempted,
            )

    async def collect(self, endpoints: Sequence[Endpoint]) -> list[ProbeOutcome]:
        """Run to completion and return the accepted outcomes."""
        return [outcome async for outcome in self.run(endpoints)]

    def _should_stop(self, state: ProgressState) -> bool:
        return self.max_accepted > 0 and state.accepted >= self.max_accepted

    async def _dispatch(
        self,
        endpoints: Sequence[Endpoint],
        state: ProgressState,
        queue: asyncio.Queue,
    ) -> None:
        """Start one worker per endpoint, then wait for all of them."""
        sem = asyncio.Semaphore(self.max_parallel)
        pending: set[asyncio.Task] = set()

        try:
            for endpoint in endpoints:
                await sem.acquire()
                # Workers already in flight may still push accepted past
                # the limit; only new dispatch is prevented.
                if self._should_stop(state):
                    sem.release()
                    break

                task = asyncio.create_task(self._probe_one(endpoint, sem, state, queue))
                pending.add(task)
                task.add_done_callback(pending.discard)

            if pending:
                await asyncio.gather(*pending)
        except BaseException:
            leftover = list(pending)
            for task in leftover:
                task.cancel()
            await asyncio.gather(*leftover, return_exceptions=True)
            raise
        finally:
            queue.put_nowait(_DONE)

    async def _probe_one(
        self,
        endpoint: Endpoint,
        sem: asyncio.Semaphore,
        state: ProgressState,
        queue: asyncio.Queue,
    ) -> None:
        """Probe a single endpoint and record the outcome."""
        try:
            outcome = await self.prober.probe(endpoint)
        except ProbeError as e:
            state.record_attempt()
            if self.verbose:
                logger.info(
                    "probe_failed",
                    endpoint=str(endpoint),
                    error_type=type(e).__name__,
                    error=str(e),
                )
            return
        finally:
            sem.release()

        state.record_attempt()
        passed = accepts(outcome, self.allowed)
        logger.info(
            "endpoint_found",
            endpoint=str(endpoint),
            data_center=outcome.data_center,
            location=outcome.location,
            latency_ms=round(outcome.latency_ms),
            filtered=not passed,
        )
        if passed:
            state.record_accept()
            queue.put_nowait(outcome)
