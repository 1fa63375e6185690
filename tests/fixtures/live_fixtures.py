"""Live stream runtime fixtures and fakes for testing."""

import asyncio
import json

import pytest

from livehub.app_config import AppEnvironConfig
from livehub.domain.live.session.notifier import ChangeNotifier, Observer
from livehub.domain.live.session.session_registry import SessionRegistry
from livehub.runtime import LiveRuntime


class FakeTransport:
    """In-memory stand-in for a dashboard WebSocket."""

    def __init__(self, *, fail_after: int | None = None, gate: asyncio.Event | None = None):
        self.sent: list[str] = []
        self.closed_with: int | None = None
        self._fail_after = fail_after
        self._gate = gate

    async def send_text(self, data: str) -> None:
        if self._gate is not None:
            await self._gate.wait()
        if self._fail_after is not None and len(self.sent) >= self._fail_after:
            raise ConnectionResetError("connection reset by peer")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason: str | None = None) -> None:
        self.closed_with = code

    @property
    def messages(self) -> list[dict]:
        return [json.loads(x) for x in self.sent]

    @property
    def stream_lists(self) -> list[list[str]]:
        return [x["streams"] for x in self.messages]


class FakeSceneClient:
    """Scene client that records switches instead of talking to OBS."""

    endpoint = "ws://obs.test:4455"

    def __init__(
        self,
        *,
        connect_error: Exception | None = None,
        connect_delay: float = 0.0,
        switch_error: Exception | None = None,
        switch_delay: float = 0.0,
    ):
        self.connect_error = connect_error
        self.connect_delay = connect_delay
        self.switch_error = switch_error
        self.switch_delay = switch_delay
        self.scenes: list[str] = []
        self.connect_calls = 0
        self.disconnected = False

    async def connect(self) -> str:
        self.connect_calls += 1
        if self.connect_delay:
            await asyncio.sleep(self.connect_delay)
        if self.connect_error is not None:
            raise self.connect_error
        return "30.2.0"

    async def set_current_scene(self, scene_name: str) -> None:
        if self.switch_delay:
            await asyncio.sleep(self.switch_delay)
        if self.switch_error is not None:
            raise self.switch_error
        self.scenes.append(scene_name)

    async def disconnect(self) -> None:
        self.disconnected = True


async def drain(notifier: ChangeNotifier, observer: Observer) -> None:
    """Detach the observer and flush everything queued for it into its transport."""
    notifier.detach(observer)
    await observer.pump()


@pytest.fixture
def live_cfg() -> AppEnvironConfig:
    return AppEnvironConfig(
        OBS_ENABLED=False,
        PUBLIC_HOST="media.test",
        RTMP_PORT=1935,
        HTTP_PORT=8000,
        STREAM_APP="live",
        PLAYBACK_URL_TEMPLATE="rtmp://{host}:{rtmp_port}/{app}/{stream_key}",
        INGEST_WEBHOOK_SECRET=None,
        OBS_LIVE_SCENE="Drone Scene",
        OBS_DEFAULT_SCENE="Default Scene",
        OBS_CONNECT_TIMEOUT_SECONDS=0.5,
        AUTOMATION_CALL_TIMEOUT_SECONDS=0.2,
        AUTOMATION_MAX_CONCURRENCY=1,
        AUTOMATION_MAX_PENDING=8,
        AUTOMATION_HISTORY_SIZE=10,
        OBSERVER_MAX_PENDING=4,
    )


@pytest.fixture
def scene_client() -> FakeSceneClient:
    return FakeSceneClient()


@pytest.fixture
def live_runtime(live_cfg: AppEnvironConfig, scene_client: FakeSceneClient) -> LiveRuntime:
    return LiveRuntime(live_cfg, scene_client=scene_client)


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def notifier(registry: SessionRegistry) -> ChangeNotifier:
    return ChangeNotifier(registry)


def ingest_event(event: str, stream_path: str | None = None, session_id: str = "NMS_1") -> dict:
    """Webhook body as posted by the ingest server."""
    payload = {"event": event, "id": session_id, "args": {"app": "live"}}
    if stream_path is not None:
        payload["stream_path"] = stream_path
    return payload
