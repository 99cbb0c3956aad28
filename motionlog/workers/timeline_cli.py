import argparse
import asyncio
import logging
import sys
from datetime import tzinfo
from typing import TextIO

from motionlog.core.config import settings
from motionlog.core.logging_setup import setup_logging
from motionlog.timeline.aggregator import Aggregator, LoadStatus
from motionlog.timeline.clip import DayGroup
from motionlog.timeline.daykey import resolve_timezone
from motionlog.timeline.errors import TransportFailure
from motionlog.timeline.fetcher import ClipFetcher, HttpClipFetcher
from motionlog.timeline.formatting import clock_time, format_duration
from motionlog.timeline.media import video_url

logger = logging.getLogger(__name__)


def render_groups(
    groups: tuple[DayGroup, ...],
    out: TextIO,
    tz: tzinfo | None = None,
    media_base_url: str | None = None,
) -> None:
    for group in groups:
        out.write(f"== {group.day_key} ({len(group.clips)} clips)\n")
        for clip in group.clips:
            camera = clip.camera_label or clip.camera_id
            out.write(
                f"  {clock_time(clip.timestamp, tz)}  {camera:<16} {format_duration(clip.duration_nanos):>6}  "
                f"{video_url(clip, media_base_url)}\n"
            )


async def browse(fetcher: ClipFetcher, args: argparse.Namespace, out: TextIO) -> int:
    tz = resolve_timezone(args.timezone)

    if args.list_cameras:
        for camera in await fetcher.fetch_cameras():
            out.write(f"{camera.id}\t{camera.label}\n")
        return 0

    aggregator = Aggregator(fetcher, filter=args.cam, tz=tz)
    pages = 0
    while args.pages <= 0 or pages < args.pages:
        result = await aggregator.load_next()
        if result.status is LoadStatus.END_OF_FEED:
            break
        pages += 1
        if aggregator.exhausted:
            break

    render_groups(aggregator.groups, out, tz=tz, media_base_url=args.media_base_url)
    clip_count = sum(len(group.clips) for group in aggregator.groups)
    logger.info("Loaded %d clips in %d day groups over %d pages", clip_count, len(aggregator.groups), pages)
    return 0


async def _run(args: argparse.Namespace, out: TextIO) -> int:
    async with HttpClipFetcher(base_url=args.base_url, api_key=args.api_key) as fetcher:
        try:
            return await browse(fetcher, args, out)
        except TransportFailure as exc:
            logger.error("Could not load clip feed: %s", exc)
            return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print the day-grouped clip timeline")
    parser.add_argument("--base-url", default=settings.feed_base_url)
    parser.add_argument("--api-key", default=settings.api_key)
    parser.add_argument("--cam", default="", help="Camera id to filter on (default: all cameras)")
    parser.add_argument("--pages", type=int, default=1, help="Pages to load; 0 loads until the feed ends")
    parser.add_argument("--timezone", default=settings.display_timezone or None)
    parser.add_argument("--media-base-url", default=settings.media_base_url)
    parser.add_argument("--list-cameras", action="store_true", help="List cameras and exit")
    return parser


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(_run(args, sys.stdout))


if __name__ == "__main__":
    raise SystemExit(main())
