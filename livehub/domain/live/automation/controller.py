"""Scene automation triggered by stream lifecycle transitions."""

from __future__ import annotations

import asyncio
from collections import deque
from datetime import datetime, timezone
from typing import Protocol
from uuid import uuid4

from loguru import logger

from livehub.schemas import (
    AutomationCallResult,
    AutomationOutcome,
    AutomationState,
    AutomationStatus,
    AutomationTrigger,
)

from .automation_state_machine import AutomationStateMachine
from .dispatcher import AutomationDispatcher, DispatchResult


class SceneClient(Protocol):
    """Remote scene-switch surface (OBS in production, fakes in tests)."""

    @property
    def endpoint(self) -> str: ...

    async def connect(self) -> str: ...

    async def set_current_scene(self, scene_name: str) -> None: ...

    async def disconnect(self) -> None: ...


class AutomationController:
    """Best-effort bridge from stream starts/stops to scene switches.

    Nothing here raises to the caller. `connect` is attempted once; scene
    switches are handed to the dispatcher and their outcomes only end up in
    the logs and the call history. A failed switch leaves the state alone.
    """

    def __init__(
        self,
        client: SceneClient | None,
        dispatcher: AutomationDispatcher,
        *,
        live_scene: str = "Drone Scene",
        default_scene: str = "Default Scene",
        connect_timeout: float = 5.0,
        history_size: int = 50,
    ) -> None:
        self._client = client
        self._dispatcher = dispatcher
        self._dispatcher.set_sink(self._record)
        self.live_scene = live_scene
        self.default_scene = default_scene
        self._connect_timeout = float(connect_timeout)

        self._state = AutomationState.DISCONNECTED
        self._last_error: str | None = None
        self._connected_at: datetime | None = None
        self._history: deque[AutomationCallResult] = deque(maxlen=max(1, int(history_size)))
        # dispatch label -> (stream key, trigger, scene)
        self._calls: dict[str, tuple[str, AutomationTrigger, str]] = {}

    @property
    def state(self) -> AutomationState:
        return self._state

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def history(self) -> list[AutomationCallResult]:
        return list(self._history)

    def _transition(self, new_state: AutomationState) -> None:
        self._state = AutomationStateMachine.ensure_transition(self._state, new_state)

    async def connect(self) -> AutomationState:
        """Attempt to open the automation channel once.

        Returns:
            The resulting state, CONNECTED or DISCONNECTED
        """
        if self._client is None:
            self._last_error = "automation disabled"
            logger.info("🎬 Scene automation disabled, not connecting to OBS")
            return self._state

        if self._state is not AutomationState.DISCONNECTED:
            logger.warning(f"Automation connect ignored while {self._state}")
            return self._state

        self._transition(AutomationState.CONNECTING)
        endpoint = self._client.endpoint
        try:
            version = await asyncio.wait_for(self._client.connect(), timeout=self._connect_timeout)
        except asyncio.CancelledError:
            self._last_error = "connect cancelled"
            self._transition(AutomationState.DISCONNECTED)
            raise
        except TimeoutError:
            self._last_error = f"connect timed out after {self._connect_timeout:g}s"
            self._transition(AutomationState.DISCONNECTED)
        except Exception as exc:
            self._last_error = f"{type(exc).__name__}: {exc}"
            self._transition(AutomationState.DISCONNECTED)
        else:
            self._last_error = None
            self._connected_at = datetime.now(timezone.utc)
            self._transition(AutomationState.CONNECTED)
            logger.info(f"🎬 Connected to OBS WebSocket at {endpoint} (OBS {version})")
            return self._state

        logger.warning(f"⚠️  Could not connect to OBS WebSocket at {endpoint}: {self._last_error}")
        logger.warning("   Make sure OBS is running with WebSocket enabled")
        return self._state

    def on_stream_start(self, key: str) -> asyncio.Task[DispatchResult] | None:
        """Switch to the live scene when a stream starts (if connected)."""
        return self._trigger(key, AutomationTrigger.START, self.live_scene)

    def on_stream_stop(self, key: str) -> asyncio.Task[DispatchResult] | None:
        """Switch back to the default scene when a stream stops (if connected)."""
        return self._trigger(key, AutomationTrigger.STOP, self.default_scene)

    def _trigger(
        self,
        key: str,
        trigger: AutomationTrigger,
        scene_name: str,
    ) -> asyncio.Task[DispatchResult] | None:
        if self._state is not AutomationState.CONNECTED or self._client is None:
            logger.debug(f"Automation {self._state}, skipping {trigger} switch for {key}")
            return None

        client = self._client
        label = f"{trigger}:{key}:{uuid4().hex[:6]}"
        self._calls[label] = (key, trigger, scene_name)

        try:
            return self._dispatcher.submit(
                lambda: client.set_current_scene(scene_name),
                label=label,
            )
        except Exception:
            # Isolation boundary: a dispatch problem must not reach the ingest path
            self._calls.pop(label, None)
            logger.exception(f"Could not dispatch {trigger} scene switch for {key}")
            return None

    def _record(self, result: DispatchResult) -> None:
        meta = self._calls.pop(result.label, None)
        if meta is None:
            logger.debug(f"Untracked automation result {result.label}")
            return

        key, trigger, scene_name = meta
        entry = AutomationCallResult(
            stream_key=key,
            trigger=trigger,
            scene_name=scene_name,
            outcome=result.outcome,
            error=result.error,
            duration_ms=round(result.duration_ms, 2),
        )
        self._history.append(entry)

        if result.outcome is AutomationOutcome.OK:
            logger.info(f"🎬 Switched OBS to {scene_name} ({trigger} of {key})")
        else:
            logger.warning(
                f"⚠️  Could not switch OBS scene to {scene_name} ({trigger} of {key}): "
                f"{result.outcome} {result.error or ''}".rstrip()
            )

    def status(self) -> AutomationStatus:
        return AutomationStatus(
            state=self._state,
            endpoint=self._client.endpoint if self._client is not None else None,
            last_error=self._last_error,
            connected_at=self._connected_at,
            live_scene=self.live_scene,
            default_scene=self.default_scene,
            in_flight=self._dispatcher.in_flight,
            recent_calls=list(self._history),
        )

    async def shutdown(self) -> None:
        """Cancel in-flight calls and close the automation channel."""
        await self._dispatcher.shutdown()

        if self._client is None:
            return
        # Also closes a handshake that completed after its attempt was abandoned
        was_connected = self._state is AutomationState.CONNECTED
        try:
            await self._client.disconnect()
        except Exception as exc:
            logger.warning(f"OBS disconnect failed: {type(exc).__name__}: {exc}")
        else:
            if was_connected:
                logger.info("🎬 Disconnected from OBS WebSocket")
