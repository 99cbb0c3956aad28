from datetime import datetime

from pydantic import BaseModel, Field


class CameraCreate(BaseModel):
    camera_id: str
    name: str
    active: bool = True


class ClipCreate(BaseModel):
    camera_id: str
    ts: datetime
    filename: str
    duration_seconds: float = Field(default=0.0, ge=0.0, le=9_223_372_036, allow_inf_nan=False)
    metadata: dict[str, str] | None = None


class FeedClip(BaseModel):
    clip_id: str
    camera_id: str
    camera_name: str | None = None
    ts: datetime
    fn: str
    duration: int  # nanoseconds
    metadata: dict[str, str] = Field(default_factory=dict)


class FeedPage(BaseModel):
    results: list[FeedClip]
    cursor: str | None = None


class ScanSummary(BaseModel):
    camera_id: str
    seen: int = 0
    added: int = 0
    skipped: int = 0
