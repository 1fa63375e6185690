"""Tests for the OBS WebSocket scene client wrapper."""

import asyncio
import time
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from livehub.services.integrations.obs_service import ObsSceneClient


@pytest.fixture
def req_client() -> MagicMock:
    client = MagicMock()
    client.get_version.return_value = SimpleNamespace(obs_version="30.2.0")
    return client


class TestObsSceneClient:
    async def test_connect_uses_configured_endpoint(self, req_client: MagicMock):
        with patch(
            "livehub.services.integrations.obs_service.ReqClient", return_value=req_client
        ) as factory:
            client = ObsSceneClient(host="192.168.1.20", port=4455, password="secret", timeout=3)
            version = await client.connect()

        factory.assert_called_once_with(
            host="192.168.1.20", port=4455, password="secret", timeout=3
        )
        assert version == "30.2.0"
        assert client.is_connected is True
        assert client.endpoint == "ws://192.168.1.20:4455"

    async def test_connect_failure_propagates(self):
        with patch(
            "livehub.services.integrations.obs_service.ReqClient",
            side_effect=ConnectionRefusedError("refused"),
        ):
            client = ObsSceneClient(host="127.0.0.1")
            with pytest.raises(ConnectionRefusedError):
                await client.connect()

        assert client.is_connected is False

    async def test_set_current_scene(self, req_client: MagicMock):
        with patch("livehub.services.integrations.obs_service.ReqClient", return_value=req_client):
            client = ObsSceneClient(host="127.0.0.1")
            await client.connect()
            await client.set_current_scene("Drone Scene")

        req_client.set_current_program_scene.assert_called_once_with("Drone Scene")

    async def test_set_scene_before_connect_raises(self):
        client = ObsSceneClient(host="127.0.0.1")
        with pytest.raises(ConnectionError):
            await client.set_current_scene("Drone Scene")

    async def test_disconnect(self, req_client: MagicMock):
        with patch("livehub.services.integrations.obs_service.ReqClient", return_value=req_client):
            client = ObsSceneClient(host="127.0.0.1")
            await client.connect()
            await client.disconnect()
            await client.disconnect()

        req_client.disconnect.assert_called_once()
        assert client.is_connected is False

    async def test_disconnect_during_handshake_discards_client(self, req_client: MagicMock):
        def build(**kwargs):
            time.sleep(0.2)
            return req_client

        with patch("livehub.services.integrations.obs_service.ReqClient", side_effect=build):
            client = ObsSceneClient(host="127.0.0.1")
            connecting = asyncio.create_task(client.connect())
            await asyncio.sleep(0.05)
            await client.disconnect()
            await connecting

        assert client.is_connected is False
        req_client.disconnect.assert_called_once()
