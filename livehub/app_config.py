from pydantic import BaseModel

from livehub.config import config


def _flag(key: str, default: str) -> bool:
    return str(config.get(key, default)).strip().lower() in {"true", "1", "yes", "on"}


def _text(key: str, default: str = "") -> str:
    return str(config.get(key, default)).strip()


def _optional(key: str) -> str | None:
    return (config.get(key) or "").strip() or None


class AppEnvironConfig(BaseModel):
    DEBUG: bool = _flag("DEBUG", "false")

    # HTTP API
    API_HOST: str = _text("API_HOST", "0.0.0.0")
    API_PORT: int = int(_text("API_PORT") or 8080)
    API_WORKERS: int = int(_text("API_WORKERS") or 1)
    API_CORS_ORIGINS: list[str] = [
        x.strip() for x in _text("API_CORS_ORIGINS", "*").split(",") if x.strip()
    ]

    # Ingest server (RTMP) addresses, used for rendering playback URLs and the startup banner
    RTMP_PORT: int = int(_text("RTMP_PORT") or 1935)
    HTTP_PORT: int = int(_text("HTTP_PORT") or 8000)
    STREAM_APP: str = _text("STREAM_APP", "live")
    PUBLIC_HOST: str | None = _optional("PUBLIC_HOST")
    PLAYBACK_URL_TEMPLATE: str = _text(
        "PLAYBACK_URL_TEMPLATE", "rtmp://{host}:{rtmp_port}/{app}/{stream_key}"
    )
    # Shared secret expected in X-Ingest-Token; unset disables the check
    INGEST_WEBHOOK_SECRET: str | None = _optional("INGEST_WEBHOOK_SECRET")

    # OBS WebSocket automation
    OBS_ENABLED: bool = _flag("OBS_ENABLED", "true")
    DOCKER_HOST_IP: str | None = _optional("DOCKER_HOST_IP")
    OBS_HOST: str | None = _optional("OBS_HOST")
    OBS_WEBSOCKET_PORT: int = int(_text("OBS_WEBSOCKET_PORT") or 4455)
    OBS_PASSWORD: str | None = _optional("OBS_PASSWORD")
    OBS_LIVE_SCENE: str = _text("OBS_LIVE_SCENE", "Drone Scene")
    OBS_DEFAULT_SCENE: str = _text("OBS_DEFAULT_SCENE", "Default Scene")
    OBS_CONNECT_TIMEOUT_SECONDS: float = float(_text("OBS_CONNECT_TIMEOUT_SECONDS") or 5)

    AUTOMATION_CALL_TIMEOUT_SECONDS: float = float(_text("AUTOMATION_CALL_TIMEOUT_SECONDS") or 5)
    # 1 keeps scene switches in trigger order
    AUTOMATION_MAX_CONCURRENCY: int = int(_text("AUTOMATION_MAX_CONCURRENCY") or 1)
    AUTOMATION_MAX_PENDING: int = int(_text("AUTOMATION_MAX_PENDING") or 32)
    AUTOMATION_HISTORY_SIZE: int = int(_text("AUTOMATION_HISTORY_SIZE") or 50)

    # Dashboard observers
    OBSERVER_MAX_PENDING: int = int(_text("OBSERVER_MAX_PENDING") or 64)

    LOGFIRE_ENABLE: bool = _flag("LOGFIRE_ENABLE", "false")
    LOGFIRE_TOKEN: str | None = _optional("LOGFIRE_TOKEN")


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config
