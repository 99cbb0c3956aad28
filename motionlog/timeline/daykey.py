"""Calendar-day bucketing for clip timestamps.

Every timestamp falls into one of six buckets relative to a reference
"now": today, tomorrow, this-coming-weekday, yesterday, last-weekday or an
absolute date. The bucket only decides the label; grouping is by local
calendar date, so keys stay equal for the same day whatever the label says.
"""

from datetime import date, datetime, tzinfo
from enum import Enum
from zoneinfo import ZoneInfo

from motionlog.timeline.clip import DayKey


class CalendarBucket(str, Enum):
    TODAY = "today"
    TOMORROW = "tomorrow"
    NEXT_WEEK = "next_week"
    YESTERDAY = "yesterday"
    LAST_WEEK = "last_week"
    ABSOLUTE = "absolute"


def resolve_timezone(name: str | None) -> tzinfo | None:
    if not name:
        return None
    return ZoneInfo(name)


def local_date(ts: datetime, tz: tzinfo | None = None) -> date:
    # Naive timestamps are taken as already being in display time.
    if ts.tzinfo is not None and tz is not None:
        ts = ts.astimezone(tz)
    elif ts.tzinfo is not None:
        ts = ts.astimezone()
    return ts.date()


def classify(day: date, today: date) -> CalendarBucket:
    diff = (day - today).days
    if diff < -6:
        return CalendarBucket.ABSOLUTE
    if diff < -1:
        return CalendarBucket.LAST_WEEK
    if diff < 0:
        return CalendarBucket.YESTERDAY
    if diff < 1:
        return CalendarBucket.TODAY
    if diff < 2:
        return CalendarBucket.TOMORROW
    if diff < 7:
        return CalendarBucket.NEXT_WEEK
    return CalendarBucket.ABSOLUTE


def day_label(day: date, today: date) -> str:
    weekday = day.strftime("%A")
    ymd = day.strftime("%Y/%m/%d")
    bucket = classify(day, today)
    if bucket is CalendarBucket.TODAY:
        return f"Today ({weekday} {ymd})"
    if bucket is CalendarBucket.TOMORROW:
        return "Tomorrow"
    if bucket is CalendarBucket.NEXT_WEEK:
        return weekday
    if bucket is CalendarBucket.YESTERDAY:
        return f"Yesterday ({weekday} {ymd})"
    if bucket is CalendarBucket.LAST_WEEK:
        return f"Last {weekday} ({ymd})"
    return f"{weekday} {ymd}"


class DayBucketer:
    """Computes day keys against a "now" fixed at construction."""

    def __init__(self, now: datetime, tz: tzinfo | None = None) -> None:
        self.now = now
        self.tz = tz
        self.today = local_date(now, tz)

    def key_for(self, ts: datetime) -> DayKey:
        day = local_date(ts, self.tz)
        return DayKey(day=day, label=day_label(day, self.today))
