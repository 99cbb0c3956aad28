import json
import logging
import math
from datetime import datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

from sqlmodel import Session, select

from motionlog.core.config import settings
from motionlog.db.models import Camera, ClipEvent
from motionlog.schemas.domain import ClipCreate, ScanSummary
from motionlog.services.feed_service import load_cameras, to_utc_naive

logger = logging.getLogger(__name__)

CLIP_TIME_FORMAT = "%Y%m%d%H%M%S"
CLIP_SUFFIX = ".mp4"
RESERVED_METADATA = {"", "camera", "captured", "duration"}
# duration_ns is stored as a signed 64-bit integer.
MAX_DURATION_SECONDS = (2**63 - 1) // 1_000_000_000


class DuplicateClip(ValueError):
    pass


def clip_id_for(camera_id: str, filename: str) -> str:
    return f"{camera_id}/{Path(filename).stem}"


def _read_sidecar(video: Path) -> dict:
    sidecar = video.with_suffix(".json")
    if not sidecar.exists():
        return {}
    try:
        data = json.loads(sidecar.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.warning("Unreadable sidecar %s: %s", sidecar, exc)
        return {}
    return data if isinstance(data, dict) else {}


def parse_clip_time(stem: str, captured: object = None) -> datetime:
    """Capture time of a clip as naive UTC.

    ``captured`` (an RFC3339 string) wins when usable; otherwise the file stem is read
    as local time in the storage timezone.
    """
    if isinstance(captured, str) and captured:
        try:
            parsed = datetime.fromisoformat(captured.replace("Z", "+00:00"))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return to_utc_naive(parsed)
        except ValueError:
            logger.debug("Ignoring unparseable captured=%r for %s", captured, stem)
    local = datetime.strptime(stem, CLIP_TIME_FORMAT).replace(tzinfo=ZoneInfo(settings.storage_timezone))
    return to_utc_naive(local)


def _build_clip(camera_id: str, video: Path) -> ClipEvent | None:
    meta = _read_sidecar(video)
    try:
        ts = parse_clip_time(video.stem, meta.get("captured"))
    except ValueError as exc:
        logger.info("Failed to parse time in %s: %s", video, exc)
        return None

    try:
        duration_seconds = float(meta["duration"])
    except (KeyError, TypeError, ValueError):
        logger.info("No duration for %s", video)
        return None
    if not math.isfinite(duration_seconds) or not 0 <= duration_seconds <= MAX_DURATION_SECONDS:
        logger.info("Invalid duration %r for %s", duration_seconds, video)
        return None

    extra = {str(k): str(v) for k, v in meta.items() if k not in RESERVED_METADATA}
    return ClipEvent(
        clip_id=clip_id_for(camera_id, video.name),
        camera_id=camera_id,
        ts=ts,
        filename=video.stem,
        duration_ns=int(round(duration_seconds * 1_000_000_000)),
        metadata_json=json.dumps(extra, ensure_ascii=True) if extra else None,
    )


def scan_camera(session: Session, camera_id: str, root: Path | None = None) -> ScanSummary:
    if not session.get(Camera, camera_id):
        raise LookupError(f"Requested camera {camera_id!r} not found")

    base = (root or settings.clip_storage_dir) / camera_id
    summary = ScanSummary(camera_id=camera_id)
    if not base.is_dir():
        logger.info("No storage directory for camera %s at %s", camera_id, base)
        return summary

    known = set(session.exec(select(ClipEvent.clip_id).where(ClipEvent.camera_id == camera_id)))
    for video in sorted(base.glob(f"*{CLIP_SUFFIX}")):
        summary.seen += 1
        clip_id = clip_id_for(camera_id, video.name)
        if clip_id in known:
            continue
        clip = _build_clip(camera_id, video)
        if clip is None:
            summary.skipped += 1
            continue
        logger.debug("Adding %s in %s: %s", video.stem, camera_id, clip.ts)
        session.add(clip)
        known.add(clip_id)
        summary.added += 1

    session.commit()
    logger.info(
        "Scanned camera %s: seen=%d added=%d skipped=%d",
        camera_id,
        summary.seen,
        summary.added,
        summary.skipped,
    )
    return summary


def scan_all(session: Session, root: Path | None = None) -> list[ScanSummary]:
    base = root or settings.clip_storage_dir
    cameras = load_cameras(session)
    if base.is_dir():
        for entry in sorted(base.iterdir()):
            if entry.is_dir() and entry.name not in cameras:
                logger.warning("Unhandled storage directory %s", entry)
    return [scan_camera(session, camera_id, root=base) for camera_id, cam in cameras.items() if cam.active]


def index_clip(session: Session, payload: ClipCreate) -> ClipEvent:
    if not session.get(Camera, payload.camera_id):
        raise LookupError(f"Requested camera {payload.camera_id!r} not found")
    clip_id = clip_id_for(payload.camera_id, payload.filename)
    if session.get(ClipEvent, clip_id):
        raise DuplicateClip(f"Clip {clip_id} already indexed")

    clip = ClipEvent(
        clip_id=clip_id,
        camera_id=payload.camera_id,
        ts=to_utc_naive(payload.ts),
        filename=Path(payload.filename).stem,
        duration_ns=int(round(payload.duration_seconds * 1_000_000_000)),
        metadata_json=json.dumps(payload.metadata, ensure_ascii=True) if payload.metadata else None,
    )
    session.add(clip)
    session.commit()
    session.refresh(clip)
    return clip
