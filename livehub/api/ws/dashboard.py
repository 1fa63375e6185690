"""Dashboard WebSocket: pushes the live stream list on connect and on every change.

Messages sent: {"type": "streamListUpdate", "streams": [...]}.
Messages received from the client are accepted and ignored.
"""

from __future__ import annotations

import asyncio
import contextlib

from fastapi import APIRouter, WebSocket
from loguru import logger

from livehub.domain.live.session.notifier import Observer
from livehub.runtime import get_runtime

router = APIRouter()


@router.websocket("/ws/streams")
async def stream_updates(websocket: WebSocket) -> None:
    runtime = get_runtime(websocket)
    await websocket.accept()

    client = websocket.client
    observer = Observer(
        websocket,
        max_pending=runtime.cfg.OBSERVER_MAX_PENDING,
        label=f"{client.host}:{client.port}" if client else None,
    )
    if not runtime.notifier.attach(observer):
        await websocket.close()
        return

    pump = asyncio.create_task(observer.pump(), name=f"observer-{observer.label}")
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            logger.debug(f"Ignoring message from observer {observer.label}")
    except RuntimeError as exc:
        # Raised by receive() once the server side has already closed the socket
        logger.debug(f"Observer {observer.label} receive ended: {exc}")
    finally:
        runtime.notifier.detach(observer)
        pump.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await pump
