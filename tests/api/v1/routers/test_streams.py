"""Tests for the stream list and automation status endpoints."""

from fastapi.testclient import TestClient

from livehub.api.v1.routers.streams import build_playback_url
from tests.fixtures.live_fixtures import ingest_event


class TestBuildPlaybackUrl:
    def test_default_template(self, live_cfg):
        assert build_playback_url(live_cfg, "alpha") == "rtmp://media.test:1935/live/alpha"

    def test_http_flv_template(self, live_cfg):
        cfg = live_cfg.model_copy(
            update={"PLAYBACK_URL_TEMPLATE": "http://{host}:{http_port}/{app}/{stream_key}.flv"}
        )
        assert build_playback_url(cfg, "alpha", host="10.0.0.5") == (
            "http://10.0.0.5:8000/live/alpha.flv"
        )

    def test_stream_key_is_escaped(self, live_cfg):
        assert build_playback_url(live_cfg, "cam 1") == "rtmp://media.test:1935/live/cam%201"


class TestListStreams:
    def test_empty(self, client: TestClient):
        response = client.get("/api/v1/streams")

        assert response.status_code == 200
        assert response.json()["results"] == {"count": 0, "observers": 0, "streams": []}

    def test_lists_live_streams_in_start_order(self, client: TestClient):
        client.post("/webhooks/ingest", json=ingest_event("postPublish", "/live/beta"))
        client.post("/webhooks/ingest", json=ingest_event("postPublish", "/live/alpha"))

        results = client.get("/api/v1/streams").json()["results"]

        assert results["count"] == 2
        assert results["streams"] == [
            {"stream_key": "beta", "playback_url": "rtmp://media.test:1935/live/beta"},
            {"stream_key": "alpha", "playback_url": "rtmp://media.test:1935/live/alpha"},
        ]


class TestAutomationStatus:
    def test_status_shape(self, client: TestClient):
        response = client.get("/api/v1/automation")

        assert response.status_code == 200
        results = response.json()["results"]
        assert results["state"] in {"disconnected", "connecting", "connected"}
        assert results["endpoint"] == "ws://obs.test:4455"
        assert results["live_scene"] == "Drone Scene"
        assert results["default_scene"] == "Default Scene"
        assert isinstance(results["recent_calls"], list)


class TestHealth:
    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["results"] == "OK"
