from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Camera(SQLModel, table=True):
    __tablename__ = "cameras"

    camera_id: str = Field(primary_key=True)
    name: str
    active: bool = True
    created_at: datetime = Field(default_factory=utcnow)


class ClipEvent(SQLModel, table=True):
    __tablename__ = "clip_events"

    # "<camera_id>/<file stem>", stable across rescans of the same storage object.
    clip_id: str = Field(primary_key=True)
    camera_id: str = Field(foreign_key="cameras.camera_id", index=True)
    ts: datetime = Field(index=True)
    filename: str
    duration_ns: int = 0
    metadata_json: str | None = None
    created_at: datetime = Field(default_factory=utcnow, index=True)
