"""Incremental day-grouped aggregation of the clip feed.

The feed arrives newest first in cursor-paginated pages. Each page is merged
into a list of day groups; the last group stays open, because the next page
may start with more clips from the same day.
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum

from motionlog.timeline.clip import ClipRecord, DayGroup, DayKey
from motionlog.timeline.daykey import DayBucketer
from motionlog.timeline.errors import TransportFailure
from motionlog.timeline.fetcher import ClipFetcher

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    LOADED = "loaded"
    BUSY = "busy"
    STALE = "stale"
    END_OF_FEED = "end_of_feed"


@dataclass(frozen=True)
class LoadResult:
    status: LoadStatus
    groups: tuple[DayGroup, ...]
    appended: int = 0


@dataclass
class AggregationState:
    filter: str = ""
    groups: list[DayGroup] = field(default_factory=list)
    cursor: str = ""
    trailing_day_key: DayKey | None = None
    exhausted: bool = False
    # Reference instant for day labels, fixed for the lifetime of this state.
    now: datetime | None = None


def merge_page(
    groups: list[DayGroup],
    clips: Iterable[ClipRecord],
    key_for: Callable[[datetime], DayKey],
) -> DayKey | None:
    """Merge ``clips`` into ``groups`` in place and return the trailing day key.

    The trailing group is reopened so leading clips of the same day extend it
    instead of starting a duplicate group. Zero-clip groups are never pushed.
    """
    current_key: DayKey | None = None
    current: list[ClipRecord] = []
    if groups:
        trailing = groups.pop()
        current_key = trailing.day_key
        current = list(trailing.clips)

    for clip in clips:
        key = key_for(clip.timestamp)
        if current_key is None:
            current_key = key
        elif key != current_key:
            groups.append(DayGroup(day_key=current_key, clips=tuple(current)))
            current_key = key
            current = []
        current.append(clip)

    if current_key is not None:
        groups.append(DayGroup(day_key=current_key, clips=tuple(current)))
    return current_key


def _system_now() -> datetime:
    return datetime.now().astimezone()


class Aggregator:
    """Owns one camera-filtered timeline and its pagination cursor.

    At most one fetch is in flight per generation. ``reset`` starts a new
    generation; a page requested under an older generation is dropped when it
    arrives.
    """

    def __init__(
        self,
        fetcher: ClipFetcher,
        filter: str = "",
        *,
        tz: tzinfo | None = None,
        clock: Callable[[], datetime] = _system_now,
    ) -> None:
        self._fetcher = fetcher
        self._tz = tz
        self._clock = clock
        self._generation = 0
        self._inflight: int | None = None
        self._state = self._new_state(filter)

    def _new_state(self, filter: str) -> AggregationState:
        return AggregationState(filter=filter, now=self._clock())

    @property
    def state(self) -> AggregationState:
        return self._state

    @property
    def groups(self) -> tuple[DayGroup, ...]:
        return tuple(self._state.groups)

    @property
    def cursor(self) -> str:
        return self._state.cursor

    @property
    def filter(self) -> str:
        return self._state.filter

    @property
    def trailing_day_key(self) -> DayKey | None:
        return self._state.trailing_day_key

    @property
    def exhausted(self) -> bool:
        return self._state.exhausted

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return self._inflight == self._generation

    def reset(self, filter: str = "") -> None:
        self._generation += 1
        self._state = self._new_state(filter)
        logger.info("Timeline reset, camera filter is now %s", filter or "all")

    async def change_filter(self, filter: str) -> LoadResult:
        self.reset(filter)
        return await self.load_next()

    async def load_next(self) -> LoadResult:
        if self.loading:
            logger.debug("Load already in flight for generation %d", self._generation)
            return LoadResult(LoadStatus.BUSY, self.groups)

        state = self._state
        if state.exhausted:
            return LoadResult(LoadStatus.END_OF_FEED, self.groups)

        generation = self._generation
        self._inflight = generation
        try:
            page = await self._fetcher.fetch_page(state.filter, state.cursor)
        except TransportFailure:
            if generation != self._generation:
                logger.debug("Dropping failed fetch from superseded generation %d", generation)
                return LoadResult(LoadStatus.STALE, self.groups)
            raise
        finally:
            if self._inflight == generation:
                self._inflight = None

        if generation != self._generation:
            logger.debug("Dropping page from superseded generation %d", generation)
            return LoadResult(LoadStatus.STALE, self.groups)

        bucketer = DayBucketer(state.now or self._clock(), self._tz)
        state.trailing_day_key = merge_page(state.groups, page.results, bucketer.key_for)

        end_of_feed = not page.cursor or (not page.results and page.cursor == state.cursor)
        if page.cursor:
            state.cursor = page.cursor
        state.exhausted = end_of_feed
        logger.debug(
            "Merged %d clips into %d day groups%s",
            len(page.results),
            len(state.groups),
            " (end of feed)" if end_of_feed else "",
        )
        return LoadResult(LoadStatus.LOADED, self.groups, appended=len(page.results))
