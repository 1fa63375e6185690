"""OBS WebSocket helper service.

Thin async wrapper around the `obsws-python` request client (OBS WebSocket v5).
The SDK is blocking, so every call runs in a worker thread.

Usage:
    client = ObsSceneClient(host="192.168.1.20", port=4455, password="secret")
    await client.connect()
    await client.set_current_scene("Drone Scene")
    await client.disconnect()
"""

from __future__ import annotations

import asyncio
import threading

from loguru import logger
from obsws_python import ReqClient


class ObsSceneClient:
    """Scene-switch surface of an OBS instance."""

    def __init__(
        self,
        host: str,
        port: int = 4455,
        password: str | None = None,
        timeout: float = 5.0,
    ) -> None:
        self.host = host
        self.port = int(port)
        self._password = password
        self._timeout = timeout
        self._client: ReqClient | None = None
        # Bumped on every connect and on abandon/disconnect; a handshake only
        # installs its client if its attempt is still the current one
        self._attempt = 0
        # ReqClient shares one socket; serialize requests on it
        self._lock = threading.Lock()

    @property
    def endpoint(self) -> str:
        return f"ws://{self.host}:{self.port}"

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> str:
        """Open the WebSocket and authenticate.

        Returns:
            OBS version string reported by the server

        Raises:
            Exception: Whatever the SDK raises on connection or auth failure
        """
        with self._lock:
            self._attempt += 1
            attempt = self._attempt
        try:
            return await asyncio.to_thread(self._connect_blocking, attempt)
        except asyncio.CancelledError:
            # The worker thread cannot be interrupted; make it drop what it builds
            with self._lock:
                if self._attempt == attempt:
                    self._attempt += 1
            raise

    def _connect_blocking(self, attempt: int) -> str:
        logger.debug(f"Connecting to OBS WebSocket at {self.endpoint}")
        client = ReqClient(
            host=self.host,
            port=self.port,
            password=self._password or "",
            timeout=self._timeout,
        )
        version = client.get_version()
        with self._lock:
            abandoned = attempt != self._attempt
            if not abandoned:
                self._client = client
        if abandoned:
            logger.info(f"Closing late OBS connection to {self.endpoint}, attempt was abandoned")
            self._close_quietly(client)
        return str(getattr(version, "obs_version", "unknown"))

    async def set_current_scene(self, scene_name: str) -> None:
        """Switch the program output to `scene_name` (SetCurrentProgramScene)."""
        await asyncio.to_thread(self._set_scene_blocking, scene_name)

    def _set_scene_blocking(self, scene_name: str) -> None:
        with self._lock:
            if self._client is None:
                raise ConnectionError(f"OBS WebSocket at {self.endpoint} is not connected")
            self._client.set_current_program_scene(scene_name)

    async def disconnect(self) -> None:
        await asyncio.to_thread(self._disconnect_blocking)

    def _disconnect_blocking(self) -> None:
        with self._lock:
            client, self._client = self._client, None
            # Any handshake still in flight is discarded when it completes
            self._attempt += 1
        if client is not None:
            self._close_quietly(client)

    @staticmethod
    def _close_quietly(client: ReqClient) -> None:
        try:
            client.disconnect()
        except Exception as exc:
            logger.debug(f"OBS disconnect raised {type(exc).__name__}: {exc}")
