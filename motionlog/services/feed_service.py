import json
import logging
from datetime import datetime, timezone

from sqlalchemy import and_, or_
from sqlmodel import Session, select

from motionlog.db.models import Camera, ClipEvent
from motionlog.schemas.domain import FeedClip, FeedPage
from motionlog.services.cursor_service import decode_cursor, encode_cursor

logger = logging.getLogger(__name__)


def to_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def load_cameras(session: Session) -> dict[str, Camera]:
    return {cam.camera_id: cam for cam in session.exec(select(Camera).order_by(Camera.camera_id))}


def _feed_clip(row: ClipEvent, cameras: dict[str, Camera]) -> FeedClip:
    camera = cameras.get(row.camera_id)
    return FeedClip(
        clip_id=row.clip_id,
        camera_id=row.camera_id,
        camera_name=camera.name if camera else None,
        ts=to_utc_naive(row.ts).replace(tzinfo=timezone.utc),
        fn=row.filename,
        duration=row.duration_ns,
        metadata=json.loads(row.metadata_json) if row.metadata_json else {},
    )


def fetch_feed_page(session: Session, cam: str, cursor: str, limit: int) -> FeedPage:
    """Return up to ``limit`` clips newest first, starting after ``cursor``.

    An unknown ``cam`` falls back to all cameras. The returned cursor is
    ``None`` once no rows remain past the last one returned.
    """
    cameras = load_cameras(session)

    query = select(ClipEvent)
    if cam in cameras:
        query = query.where(ClipEvent.camera_id == cam)
    elif cam:
        logger.info("Unknown camera %r in feed request, serving all cameras", cam)

    if cursor:
        after_ts, after_id = decode_cursor(cursor)
        logger.debug("Starting feed from cursor ts=%s id=%s", after_ts, after_id)
        query = query.where(
            or_(
                ClipEvent.ts < after_ts,
                and_(ClipEvent.ts == after_ts, ClipEvent.clip_id < after_id),
            )
        )

    rows = list(session.exec(query.order_by(ClipEvent.ts.desc(), ClipEvent.clip_id.desc()).limit(limit + 1)))
    has_more = len(rows) > limit
    rows = rows[:limit]

    next_cursor = None
    if has_more:
        last = rows[-1]
        next_cursor = encode_cursor(to_utc_naive(last.ts), last.clip_id)

    return FeedPage(results=[_feed_clip(row, cameras) for row in rows], cursor=next_cursor)
