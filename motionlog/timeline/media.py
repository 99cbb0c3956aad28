import math

from motionlog.core.config import settings
from motionlog.timeline.clip import ClipRecord

THUMB_WIDTH = 320
THUMB_HEIGHT = 240


def _base(base_url: str | None) -> str:
    base = base_url if base_url is not None else settings.media_base_url
    return base if base.endswith("/") else base + "/"


def video_url(clip: ClipRecord, base_url: str | None = None) -> str:
    return f"{_base(base_url)}{clip.camera_id}/{clip.file_ref}.mp4"


def snapshot_url(camera_id: str, ts_ms: int, base_url: str | None = None) -> str:
    # Cache buster.
    return f"{_base(base_url)}{camera_id}/lastsnap.jpg?ts={ts_ms}"


def thumbnail_size(duration_nanos: int) -> tuple[int, int]:
    """Thumbnail box scaled with the log of the clip length."""
    seconds = duration_nanos / 1_000_000_000
    scale = 0.1
    if seconds > 0:
        scale = max(0.1, math.log(seconds) / 8.2)
    return round(THUMB_WIDTH * scale), round(THUMB_HEIGHT * scale)
