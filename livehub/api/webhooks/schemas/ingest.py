"""Ingest server webhook event schemas.

The ingest server posts one JSON document per lifecycle callback. Connection
events carry no stream path; publish events carry the RTMP stream path
(`/live/<stream_key>`).
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class IngestEventType(str, Enum):
    """Lifecycle callbacks emitted by the ingest server."""

    PRE_CONNECT = "preConnect"
    POST_CONNECT = "postConnect"
    DONE_CONNECT = "doneConnect"
    PRE_PUBLISH = "prePublish"
    POST_PUBLISH = "postPublish"
    DONE_PUBLISH = "donePublish"

    def __str__(self) -> str:
        return self.value


class IngestEvent(BaseModel):
    """One lifecycle callback."""

    model_config = ConfigDict(populate_by_name=True)

    event: IngestEventType
    id: str = Field(..., min_length=1, description="Ingest session id")
    stream_path: str | None = Field(
        default=None,
        alias="StreamPath",
        description="Stream path for publish events, e.g. /live/alpha",
    )
    args: dict[str, Any] = Field(default_factory=dict)


class IngestEventOut(BaseModel):
    event: IngestEventType
    stream_key: str | None = None
    accepted: bool = True
    changed: bool = False
