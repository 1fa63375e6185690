"""Bounded-concurrency runner for fire-and-forget automation calls."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from loguru import logger

from livehub.schemas import AutomationOutcome


@dataclass
class DispatchResult:
    label: str
    outcome: AutomationOutcome
    error: str | None = None
    duration_ms: float = 0.0


ResultSink = Callable[[DispatchResult], None]


class AutomationDispatcher:
    """Runs automation calls as detached tasks, each bounded by a timeout.

    Calls never propagate exceptions to the submitter: every outcome, including
    timeouts and cancellation, is reported to the result sink. A semaphore caps
    how many calls run at once; waiters are released in submission order, so
    with the default concurrency of 1 scene switches execute in trigger order.
    """

    def __init__(
        self,
        *,
        max_concurrency: int = 1,
        timeout: float = 5.0,
        max_pending: int = 32,
        sink: ResultSink | None = None,
    ) -> None:
        self._semaphore = asyncio.Semaphore(max(1, int(max_concurrency)))
        self._timeout = float(timeout)
        self._max_pending = max(1, int(max_pending))
        self._sink = sink
        self._tasks: set[asyncio.Task[DispatchResult]] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def set_sink(self, sink: ResultSink) -> None:
        self._sink = sink

    def submit(
        self,
        call: Callable[[], Awaitable[object]],
        *,
        label: str,
    ) -> asyncio.Task[DispatchResult] | None:
        """Schedule `call` without awaiting it.

        Must be called from the running event loop.

        Returns:
            The scheduled task, or None if the call was dropped because too many
            calls are already pending
        """
        if len(self._tasks) >= self._max_pending:
            logger.warning(f"Automation backlog full ({len(self._tasks)}), dropping {label}")
            self._report(DispatchResult(label=label, outcome=AutomationOutcome.DROPPED))
            return None

        task = asyncio.get_running_loop().create_task(self._run(call, label), name=label)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, call: Callable[[], Awaitable[object]], label: str) -> DispatchResult:
        started = time.monotonic()
        try:
            async with self._semaphore:
                started = time.monotonic()
                await asyncio.wait_for(call(), timeout=self._timeout)
            result = DispatchResult(label=label, outcome=AutomationOutcome.OK)
        except TimeoutError:
            result = DispatchResult(
                label=label,
                outcome=AutomationOutcome.TIMEOUT,
                error=f"timed out after {self._timeout:g}s",
            )
        except asyncio.CancelledError:
            result = DispatchResult(label=label, outcome=AutomationOutcome.CANCELLED)
            result.duration_ms = (time.monotonic() - started) * 1000
            self._report(result)
            raise
        except Exception as exc:
            result = DispatchResult(
                label=label,
                outcome=AutomationOutcome.FAILED,
                error=f"{type(exc).__name__}: {exc}",
            )

        result.duration_ms = (time.monotonic() - started) * 1000
        self._report(result)
        return result

    def _report(self, result: DispatchResult) -> None:
        if self._sink is None:
            return
        try:
            self._sink(result)
        except Exception:
            logger.exception(f"Automation result sink failed for {result.label}")

    async def shutdown(self) -> None:
        """Cancel outstanding calls and wait for them to settle."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info(f"Cancelled {len(tasks)} pending automation call(s)")
