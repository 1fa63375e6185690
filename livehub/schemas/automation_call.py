from datetime import datetime, timezone

from pydantic import BaseModel, Field

from .automation_state import AutomationOutcome, AutomationState, AutomationTrigger


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AutomationCallResult(BaseModel):
    """Outcome of one scene-switch call, kept for observability only."""

    stream_key: str
    trigger: AutomationTrigger
    scene_name: str
    outcome: AutomationOutcome
    error: str | None = None
    duration_ms: float = 0.0
    finished_at: datetime = Field(default_factory=utc_now)


class AutomationStatus(BaseModel):
    state: AutomationState
    endpoint: str | None = None
    last_error: str | None = None
    connected_at: datetime | None = None
    live_scene: str
    default_scene: str
    in_flight: int = 0
    recent_calls: list[AutomationCallResult] = Field(default_factory=list)
