from datetime import datetime, tzinfo

from motionlog.timeline.daykey import CalendarBucket, classify, local_date

NANOS_PER_SECOND = 1_000_000_000


def _localize(ts: datetime, tz: tzinfo | None) -> datetime:
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(tz) if tz is not None else ts.astimezone()


def format_duration(nanos: int) -> str:
    """Clip length as ``M:SS``."""
    seconds = max(0, round(nanos / NANOS_PER_SECOND))
    minutes, seconds = divmod(seconds, 60)
    return f"{minutes}:{seconds:02d}"


def clock_time(ts: datetime, tz: tzinfo | None = None) -> str:
    return _localize(ts, tz).strftime("%H:%M")


def calendar_heading(ts: datetime, now: datetime, tz: tzinfo | None = None) -> str:
    local = _localize(ts, tz)
    bucket = classify(local.date(), local_date(now, tz))
    hhmm = local.strftime("%H:%M")
    if bucket is CalendarBucket.TODAY:
        return f"Today {hhmm}"
    if bucket is CalendarBucket.TOMORROW:
        return "Tomorrow"
    if bucket is CalendarBucket.NEXT_WEEK:
        return local.strftime("%A")
    if bucket is CalendarBucket.YESTERDAY:
        return f"Yesterday {hhmm}"
    if bucket is CalendarBucket.LAST_WEEK:
        return f"Last {local.strftime('%A')} {hhmm}"
    return local.strftime("%Y/%m/%d %H:%M")


def _span(seconds: float) -> str:
    minutes = seconds / 60
    hours = minutes / 60
    days = hours / 24
    if seconds < 45:
        return "a few seconds"
    if seconds < 90:
        return "a minute"
    if minutes < 45:
        return f"{round(minutes)} minutes"
    if minutes < 90:
        return "an hour"
    if hours < 22:
        return f"{round(hours)} hours"
    if hours < 36:
        return "a day"
    if days < 26:
        return f"{round(days)} days"
    if days < 45:
        return "a month"
    if days < 320:
        return f"{round(days / 30.4)} months"
    if days < 548:
        return "a year"
    return f"{round(days / 365)} years"


def relative_time(ts: datetime, now: datetime) -> str:
    """Human distance between ``ts`` and ``now``, e.g. ``5 minutes ago``."""
    if (ts.tzinfo is None) != (now.tzinfo is None):
        # Naive values are display-local; compare both as local wall time.
        ts = _localize(ts, None).replace(tzinfo=None)
        now = _localize(now, None).replace(tzinfo=None)
    delta = (now - ts).total_seconds()
    if delta >= 0:
        return f"{_span(delta)} ago"
    return f"in {_span(-delta)}"
