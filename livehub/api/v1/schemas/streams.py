from pydantic import BaseModel, Field


class LiveStreamOut(BaseModel):
    stream_key: str
    playback_url: str


class StreamListOut(BaseModel):
    count: int = 0
    observers: int = 0
    streams: list[LiveStreamOut] = Field(default_factory=list)
