"""Fan-out of registry snapshots to connected dashboard observers.

Each observer owns a bounded FIFO queue drained by its own writer task
(`Observer.pump`). `ChangeNotifier.publish` only enqueues, so a slow or stuck
client can never hold up the ingest path: once its queue is full it is
detached instead.

Ordering: every enqueue happens under the notifier's critical section, the
same mutex the lifecycle adapter holds while it mutates the registry and
publishes. Queues are FIFO, so each observer sees snapshots in mutation order,
and a newly attached observer's first message is a snapshot taken under that
mutex.
"""

from __future__ import annotations

import asyncio
import contextlib
import threading
from collections.abc import Callable, Iterator
from typing import Protocol
from uuid import uuid4

from loguru import logger

from livehub.schemas import StreamListUpdate

from .session_registry import SessionRegistry

# Close code sent to clients when the server detaches them
WS_CLOSE_GOING_AWAY = 1001

_CLOSE = object()


class ObserverTransport(Protocol):
    """Duplex channel to one dashboard client (a Starlette WebSocket satisfies it)."""

    async def send_text(self, data: str) -> None: ...

    async def close(self, code: int = 1000, reason: str | None = None) -> None: ...


class Observer:
    """One connected dashboard client.

    Only the notifier enqueues to or closes an observer. The transport is only
    written from `pump`, which the connection handler runs as a task.
    """

    def __init__(
        self,
        transport: ObserverTransport,
        *,
        max_pending: int = 64,
        label: str | None = None,
    ) -> None:
        self.transport = transport
        self.label = label or uuid4().hex[:8]
        self._max_pending = max(1, int(max_pending))
        # One extra slot so the close marker always fits
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=self._max_pending + 1)
        self._closed = False
        self._on_send_failure: Callable[[Observer], object] | None = None

    def __repr__(self) -> str:
        return f"Observer(label={self.label!r}, closed={self._closed})"

    @property
    def closed(self) -> bool:
        return self._closed

    def bind(self, on_send_failure: Callable[[Observer], object]) -> None:
        self._on_send_failure = on_send_failure

    def offer(self, message: str) -> bool:
        """Enqueue a message without blocking.

        Returns:
            False if the observer is closed or its queue is full
        """
        if self._closed or self._queue.qsize() >= self._max_pending:
            return False
        self._queue.put_nowait(message)
        return True

    def close(self) -> None:
        """Mark closed; `pump` flushes what is queued, closes the transport and exits."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSE)

    async def pump(self) -> None:
        """Drain the queue into the transport until closed or a send fails."""
        while True:
            message = await self._queue.get()
            if message is _CLOSE:
                with contextlib.suppress(Exception):
                    await self.transport.close(code=WS_CLOSE_GOING_AWAY)
                return

            try:
                await self.transport.send_text(message)  # type: ignore[arg-type]
            except Exception as exc:
                logger.debug(f"Observer {self.label} send failed: {type(exc).__name__}: {exc}")
                if self._on_send_failure is not None:
                    self._on_send_failure(self)
                return


class ChangeNotifier:
    """Keeps the set of attached observers and pushes registry snapshots to them."""

    def __init__(self, registry: SessionRegistry) -> None:
        self._registry = registry
        # Re-entrant: detach may run while publish already holds it
        self._lock = threading.RLock()
        self._observers: dict[Observer, None] = {}

    @contextlib.contextmanager
    def critical_section(self) -> Iterator[None]:
        """Mutex covering registry mutation, snapshot and publish for one event."""
        with self._lock:
            yield

    @property
    def observer_count(self) -> int:
        with self._lock:
            return len(self._observers)

    def attach(self, observer: Observer) -> bool:
        """Register an observer and enqueue the current snapshot as its first message.

        Returns:
            True if the observer is attached, False if it was already closed
        """
        with self._lock:
            if observer.closed:
                return False

            observer.bind(self.detach)
            message = self._render(self._registry.snapshot())
            if not observer.offer(message):
                observer.close()
                return False

            self._observers[observer] = None
            count = len(self._observers)

        logger.info(f"👀 Observer {observer.label} attached ({count} connected)")
        return True

    def detach(self, observer: Observer) -> bool:
        """Remove and close an observer. Idempotent.

        Returns:
            True if the observer was attached
        """
        with self._lock:
            present = observer in self._observers
            if present:
                del self._observers[observer]
            count = len(self._observers)

        observer.close()
        if present:
            logger.info(f"👋 Observer {observer.label} detached ({count} connected)")
        return present

    def publish(self, snapshot: tuple[str, ...]) -> int:
        """Enqueue a snapshot to every attached observer.

        Observers that cannot take the message are detached.

        Returns:
            Number of observers the snapshot was delivered to
        """
        message = self._render(snapshot)

        with self._lock:
            observers = list(self._observers)
            failed = [observer for observer in observers if not observer.offer(message)]
            for observer in failed:
                logger.warning(f"Observer {observer.label} cannot keep up, detaching")
                self.detach(observer)

        delivered = len(observers) - len(failed)
        logger.debug(f"Published {len(snapshot)} stream(s) to {delivered} observer(s)")
        return delivered

    def close_all(self) -> None:
        with self._lock:
            observers = list(self._observers)
        for observer in observers:
            self.detach(observer)

    @staticmethod
    def _render(snapshot: tuple[str, ...]) -> str:
        return StreamListUpdate.from_snapshot(snapshot).model_dump_json()
