"""Tests for environment configuration loading."""

import pytest

from livehub.app_config import AppEnvironConfig, _flag, _optional, get_app_environ_config
from livehub.config import EnvironConfig, config


@pytest.fixture
def reloaded_config(monkeypatch):
    """Reload the shared config around a test so env changes do not leak."""
    yield monkeypatch
    monkeypatch.undo()
    config.reload()


class TestEnvironConfig:
    def test_is_singleton(self):
        assert EnvironConfig() is config

    def test_env_example_values_loaded(self):
        assert config.get("OBS_WEBSOCKET_PORT") is not None
        assert config.get("RTMP_PORT") is not None

    def test_environment_overrides_files(self, reloaded_config):
        reloaded_config.setenv("OBS_LIVE_SCENE", "Field Camera")
        config.reload()

        assert config.get("OBS_LIVE_SCENE") == "Field Camera"

    def test_missing_key(self):
        assert config.get("LIVEHUB_DOES_NOT_EXIST") is None
        assert config.get("LIVEHUB_DOES_NOT_EXIST", "fallback") == "fallback"


class TestHelpers:
    @pytest.mark.parametrize("raw", ["true", "1", "YES", " on "])
    def test_flag_truthy(self, reloaded_config, raw):
        reloaded_config.setenv("LIVEHUB_TEST_FLAG", raw)
        config.reload()

        assert _flag("LIVEHUB_TEST_FLAG", "false") is True

    def test_flag_default(self):
        assert _flag("LIVEHUB_TEST_MISSING_FLAG", "false") is False

    def test_optional_blank_is_none(self, reloaded_config):
        reloaded_config.setenv("LIVEHUB_TEST_OPTIONAL", "   ")
        config.reload()

        assert _optional("LIVEHUB_TEST_OPTIONAL") is None


class TestAppEnvironConfig:
    def test_defaults(self):
        cfg = get_app_environ_config()

        assert cfg.OBS_LIVE_SCENE
        assert cfg.OBS_DEFAULT_SCENE
        assert cfg.AUTOMATION_MAX_CONCURRENCY >= 1
        assert "{stream_key}" in cfg.PLAYBACK_URL_TEMPLATE

    def test_overrides(self):
        cfg = AppEnvironConfig(OBS_WEBSOCKET_PORT=4460, OBS_ENABLED=False)

        assert cfg.OBS_WEBSOCKET_PORT == 4460
        assert cfg.OBS_ENABLED is False
