from typing import Literal

from pydantic import BaseModel, Field

STREAM_LIST_UPDATE = "streamListUpdate"


class StreamListUpdate(BaseModel):
    """Message pushed to every dashboard observer on attach and on each registry change."""

    type: Literal["streamListUpdate"] = STREAM_LIST_UPDATE
    streams: list[str] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: tuple[str, ...]) -> "StreamListUpdate":
        return cls(streams=list(snapshot))
