from datetime import datetime, timedelta

import pytest

from motionlog.timeline.clip import ClipRecord
from motionlog.timeline.formatting import calendar_heading, clock_time, format_duration, relative_time
from motionlog.timeline.media import snapshot_url, thumbnail_size, video_url

NOW = datetime(2024, 1, 10, 12, 0)


@pytest.mark.parametrize(
    ("nanos", "expected"),
    [(0, "0:00"), (5_000_000_000, "0:05"), (90_000_000_000, "1:30"), (3_599_400_000_000, "59:59")],
)
def test_format_duration(nanos: int, expected: str) -> None:
    assert format_duration(nanos) == expected


def test_calendar_heading() -> None:
    assert calendar_heading(datetime(2024, 1, 10, 8, 5), NOW) == "Today 08:05"
    assert calendar_heading(datetime(2024, 1, 9, 22, 0), NOW) == "Yesterday 22:00"
    assert calendar_heading(datetime(2024, 1, 5, 7, 30), NOW) == "Last Friday 07:30"
    assert calendar_heading(datetime(2024, 1, 11, 7, 30), NOW) == "Tomorrow"
    assert calendar_heading(datetime(2024, 1, 13, 7, 30), NOW) == "Saturday"
    assert calendar_heading(datetime(2023, 12, 1, 7, 30), NOW) == "2023/12/01 07:30"


def test_clock_time() -> None:
    assert clock_time(datetime(2024, 1, 10, 6, 7)) == "06:07"


def test_relative_time() -> None:
    assert relative_time(NOW - timedelta(seconds=10), NOW) == "a few seconds ago"
    assert relative_time(NOW - timedelta(minutes=5), NOW) == "5 minutes ago"
    assert relative_time(NOW - timedelta(hours=3), NOW) == "3 hours ago"
    assert relative_time(NOW - timedelta(days=3), NOW) == "3 days ago"
    assert relative_time(NOW + timedelta(minutes=1), NOW) == "in a minute"


def test_media_urls() -> None:
    clip = ClipRecord(timestamp=NOW, camera_id="front", duration_nanos=0, file_ref="20240110120000")
    assert video_url(clip, "https://media.test/clips") == "https://media.test/clips/front/20240110120000.mp4"
    assert snapshot_url("front", 1700000000000, "https://media.test/") == (
        "https://media.test/front/lastsnap.jpg?ts=1700000000000"
    )


def test_thumbnail_size_grows_with_duration() -> None:
    assert thumbnail_size(0) == (32, 24)
    assert thumbnail_size(1_000_000_000) == (32, 24)
    short = thumbnail_size(10_000_000_000)
    long = thumbnail_size(600_000_000_000)
    assert short < long
    assert short == (90, 67)
    assert long == (250, 187)
