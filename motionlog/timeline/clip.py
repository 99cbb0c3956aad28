from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any


@dataclass(frozen=True)
class ClipRecord:
    """One motion-detection clip as delivered by the feed."""

    timestamp: datetime
    camera_id: str
    duration_nanos: int
    file_ref: str
    camera_label: str = ""
    metadata: tuple[tuple[str, str], ...] = ()

    def __post_init__(self) -> None:
        if self.duration_nanos < 0:
            raise ValueError(f"duration_nanos must be non-negative, got {self.duration_nanos}")

    @classmethod
    def from_wire(cls, item: Mapping[str, Any]) -> "ClipRecord":
        ts = item["ts"]
        if isinstance(ts, str):
            ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
        metadata = item.get("metadata") or {}
        return cls(
            timestamp=ts,
            camera_id=str(item.get("camera_id") or ""),
            duration_nanos=int(item.get("duration") or 0),
            file_ref=str(item["fn"]),
            camera_label=str(item.get("camera_name") or ""),
            metadata=tuple(sorted((str(k), str(v)) for k, v in metadata.items())),
        )


@dataclass(frozen=True)
class DayKey:
    # Equality is by calendar day; the label depends on the "now" it was rendered against.
    day: date
    label: str = field(default="", compare=False)

    def __str__(self) -> str:
        return self.label or self.day.isoformat()


@dataclass(frozen=True)
class DayGroup:
    day_key: DayKey
    clips: tuple[ClipRecord, ...] = ()


@dataclass(frozen=True)
class CameraDescriptor:
    id: str
    label: str

    @classmethod
    def from_wire(cls, item: Mapping[str, Any]) -> "CameraDescriptor":
        camera_id = str(item.get("camera_id") or item.get("id") or "")
        return cls(id=camera_id, label=str(item.get("name") or item.get("label") or camera_id))
