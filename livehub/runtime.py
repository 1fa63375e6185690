"""Process-wide owner of the live stream state.

One `LiveRuntime` is built in the application lifespan and stored on
`app.state.runtime`; routes reach it through `get_runtime`.
"""

from __future__ import annotations

import asyncio
import contextlib

from loguru import logger
from starlette.requests import HTTPConnection

from livehub.app_config import AppEnvironConfig, get_app_environ_config
from livehub.domain.live.automation.controller import AutomationController, SceneClient
from livehub.domain.live.automation.dispatcher import AutomationDispatcher
from livehub.domain.live.session.lifecycle import LifecycleEventAdapter
from livehub.domain.live.session.notifier import ChangeNotifier
from livehub.domain.live.session.session_registry import SessionRegistry
from livehub.services.integrations.obs_service import ObsSceneClient
from livehub.services.network import get_host_address


def resolve_obs_host(cfg: AppEnvironConfig) -> str:
    return cfg.OBS_HOST or cfg.DOCKER_HOST_IP or get_host_address()


def build_scene_client(cfg: AppEnvironConfig) -> SceneClient | None:
    if not cfg.OBS_ENABLED:
        return None
    return ObsSceneClient(
        host=resolve_obs_host(cfg),
        port=cfg.OBS_WEBSOCKET_PORT,
        password=cfg.OBS_PASSWORD,
        timeout=cfg.OBS_CONNECT_TIMEOUT_SECONDS,
    )


class LiveRuntime:
    """Registry, notifier, automation and the adapter that wires them together."""

    def __init__(
        self,
        cfg: AppEnvironConfig | None = None,
        *,
        scene_client: SceneClient | None = None,
        use_default_scene_client: bool = True,
    ) -> None:
        self.cfg = cfg or get_app_environ_config()

        if scene_client is None and use_default_scene_client:
            scene_client = build_scene_client(self.cfg)

        self.registry = SessionRegistry()
        self.notifier = ChangeNotifier(self.registry)
        self.dispatcher = AutomationDispatcher(
            max_concurrency=self.cfg.AUTOMATION_MAX_CONCURRENCY,
            timeout=self.cfg.AUTOMATION_CALL_TIMEOUT_SECONDS,
            max_pending=self.cfg.AUTOMATION_MAX_PENDING,
        )
        self.controller = AutomationController(
            scene_client,
            self.dispatcher,
            live_scene=self.cfg.OBS_LIVE_SCENE,
            default_scene=self.cfg.OBS_DEFAULT_SCENE,
            connect_timeout=self.cfg.OBS_CONNECT_TIMEOUT_SECONDS,
            history_size=self.cfg.AUTOMATION_HISTORY_SIZE,
        )
        self.adapter = LifecycleEventAdapter(self.registry, self.notifier, self.controller)
        self._connect_task: asyncio.Task | None = None

    def start(self) -> asyncio.Task:
        """Kick off the single automation connect attempt in the background.

        Ingest events are processed immediately; starts that arrive before the
        connection is up simply skip the scene switch.
        """
        if self._connect_task is None:
            self._connect_task = asyncio.get_running_loop().create_task(
                self.controller.connect(), name="automation-connect"
            )
        return self._connect_task

    async def shutdown(self) -> None:
        logger.info("Closing observers and automation channel")
        self.notifier.close_all()

        if self._connect_task is not None and not self._connect_task.done():
            self._connect_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._connect_task

        await self.controller.shutdown()


def get_runtime(conn: HTTPConnection) -> LiveRuntime:
    return conn.app.state.runtime
