"""Read-only status endpoints for live streams and scene automation."""

from urllib.parse import quote

from fastapi import APIRouter, Depends

from livehub.api.v1.schemas.base import ApiOut
from livehub.api.v1.schemas.streams import LiveStreamOut, StreamListOut
from livehub.app_config import AppEnvironConfig
from livehub.runtime import LiveRuntime, get_runtime
from livehub.schemas import AutomationStatus
from livehub.services.network import get_host_address

router = APIRouter()


def build_playback_url(cfg: AppEnvironConfig, stream_key: str, host: str | None = None) -> str:
    """Render PLAYBACK_URL_TEMPLATE for one stream key.

    Supported placeholders: {host}, {rtmp_port}, {http_port}, {app}, {stream_key}.
    """
    return cfg.PLAYBACK_URL_TEMPLATE.format(
        host=host or cfg.PUBLIC_HOST or get_host_address(),
        rtmp_port=cfg.RTMP_PORT,
        http_port=cfg.HTTP_PORT,
        app=cfg.STREAM_APP,
        stream_key=quote(stream_key, safe=""),
    )


@router.get("/streams")
async def list_streams(runtime: LiveRuntime = Depends(get_runtime)) -> ApiOut[StreamListOut]:
    """List live streams with their playback URLs, in the order they went live."""
    snapshot = runtime.registry.snapshot()
    host = runtime.cfg.PUBLIC_HOST or get_host_address()

    return ApiOut[StreamListOut](
        results=StreamListOut(
            count=len(snapshot),
            observers=runtime.notifier.observer_count,
            streams=[
                LiveStreamOut(
                    stream_key=key,
                    playback_url=build_playback_url(runtime.cfg, key, host=host),
                )
                for key in snapshot
            ],
        )
    )


@router.get("/automation")
async def get_automation_status(
    runtime: LiveRuntime = Depends(get_runtime),
) -> ApiOut[AutomationStatus]:
    """Scene automation connection state and recent scene-switch outcomes."""
    return ApiOut[AutomationStatus](results=runtime.controller.status())
