"""Ingest server webhook endpoint for receiving RTMP lifecycle events.

The ingest server (node-media-server, nginx-rtmp relay hooks, ...) posts every
lifecycle callback here. Only publish events change state; the rest are logged.

Event Types:
- preConnect / postConnect / doneConnect: RTMP connection lifecycle (logged)
- prePublish: publish requested (logged, authorization extension point)
- postPublish: stream went live (registry add, observers notified, scene switch)
- donePublish: stream ended (registry remove, observers notified, scene switch)

When INGEST_WEBHOOK_SECRET is configured, the X-Ingest-Token header must match it.

References:
- Pydantic schemas: livehub.api.webhooks.schemas.ingest
"""

from __future__ import annotations

import hmac

from fastapi import APIRouter, Depends, Header
from loguru import logger

from livehub.api.v1.schemas.base import ApiOut
from livehub.api.webhooks.schemas.ingest import IngestEvent, IngestEventOut, IngestEventType
from livehub.domain.live.session.lifecycle import LifecycleEventAdapter, LifecycleResult
from livehub.runtime import LiveRuntime, get_runtime
from livehub.utils.app_errors import AppError, AppErrorCode, HttpStatusCode

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


def verify_ingest_token(token: str | None, secret: str | None) -> bool:
    """Check the shared webhook secret.

    Args:
        token: Value of the X-Ingest-Token header
        secret: Configured secret; None disables verification

    Returns:
        True if the request may proceed
    """
    if not secret:
        return True
    if not token:
        return False
    return hmac.compare_digest(token.encode("utf-8"), secret.encode("utf-8"))


def dispatch_event(adapter: LifecycleEventAdapter, event: IngestEvent) -> LifecycleResult:
    match event.event:
        case IngestEventType.PRE_CONNECT:
            return adapter.pre_connect(event.id, event.args)
        case IngestEventType.POST_CONNECT:
            return adapter.post_connect(event.id, event.args)
        case IngestEventType.DONE_CONNECT:
            return adapter.done_connect(event.id, event.args)
        case IngestEventType.PRE_PUBLISH:
            return adapter.pre_publish(event.id, event.stream_path, event.args)
        case IngestEventType.POST_PUBLISH:
            return adapter.post_publish(event.id, event.stream_path, event.args)
        case IngestEventType.DONE_PUBLISH:
            return adapter.done_publish(event.id, event.stream_path, event.args)
    raise AppError(
        errcode=AppErrorCode.E_INVALID_PARAMS,
        errmesg=f"Unsupported ingest event: {event.event}",
        status_code=HttpStatusCode.UNPROCESSABLE_ENTITY,
    )


@router.post("/ingest")
async def ingest_webhook(
    event: IngestEvent,
    runtime: LiveRuntime = Depends(get_runtime),
    x_ingest_token: str | None = Header(default=None),
) -> ApiOut[IngestEventOut]:
    """Receive one ingest lifecycle callback."""
    if not verify_ingest_token(x_ingest_token, runtime.cfg.INGEST_WEBHOOK_SECRET):
        logger.warning(f"Rejected ingest webhook {event.event} id={event.id}: bad token")
        raise AppError(
            errcode=AppErrorCode.E_UNAUTHORIZED,
            errmesg="Invalid ingest webhook token",
            status_code=HttpStatusCode.UNAUTHORIZED,
        )

    result = dispatch_event(runtime.adapter, event)

    return ApiOut[IngestEventOut](
        results=IngestEventOut(
            event=event.event,
            stream_key=result.stream_key,
            accepted=result.accepted,
            changed=result.changed,
        )
    )
