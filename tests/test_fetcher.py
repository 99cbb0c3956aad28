from datetime import date, datetime, timezone

import httpx
import pytest
from sqlmodel import Session

from motionlog.api import routes
from motionlog.db.models import Camera, ClipEvent
from motionlog.db.session import engine
from motionlog.main import app
from motionlog.timeline.aggregator import Aggregator, LoadStatus
from motionlog.timeline.errors import TransportFailure
from motionlog.timeline.fetcher import HttpClipFetcher

pytestmark = pytest.mark.anyio

BASE_URL = "http://testserver/api/v1"
UTC_NOW = datetime(2024, 1, 3, 12, 0, tzinfo=timezone.utc)


def _seed() -> None:
    stamps = [
        ("front", datetime(2024, 1, 2, 23, 0)),
        ("back", datetime(2024, 1, 2, 10, 0)),
        ("front", datetime(2024, 1, 1, 9, 0)),
        ("front", datetime(2024, 1, 1, 8, 0)),
        ("back", datetime(2023, 12, 31, 7, 0)),
    ]
    with Session(engine) as session:
        session.add(Camera(camera_id="front", name="Front Door"))
        session.add(Camera(camera_id="back", name="Back Yard"))
        for camera_id, ts in stamps:
            stem = ts.strftime("%Y%m%d%H%M%S")
            session.add(
                ClipEvent(
                    clip_id=f"{camera_id}/{stem}",
                    camera_id=camera_id,
                    ts=ts,
                    filename=stem,
                    duration_ns=2_000_000_000,
                )
            )
        session.commit()


def _asgi_fetcher() -> HttpClipFetcher:
    return HttpClipFetcher(base_url=BASE_URL, api_key="change-me", transport=httpx.ASGITransport(app=app))


async def test_aggregator_pages_through_live_feed(monkeypatch) -> None:
    _seed()
    monkeypatch.setattr(routes.settings, "feed_page_size", 2)

    async with _asgi_fetcher() as fetcher:
        aggregator = Aggregator(fetcher, tz=timezone.utc, clock=lambda: UTC_NOW)
        statuses = []
        while not aggregator.exhausted:
            statuses.append((await aggregator.load_next()).status)

        assert statuses == [LoadStatus.LOADED] * 3
        assert [group.day_key.day for group in aggregator.groups] == [
            date(2024, 1, 2),
            date(2024, 1, 1),
            date(2023, 12, 31),
        ]
        assert [len(group.clips) for group in aggregator.groups] == [2, 2, 1]
        assert aggregator.groups[0].clips[0].camera_label == "Front Door"

        result = await aggregator.change_filter("back")
        assert result.status is LoadStatus.LOADED
        clips = [clip for group in aggregator.groups for clip in group.clips]
        assert {clip.camera_id for clip in clips} == {"back"}


async def test_fetch_cameras() -> None:
    _seed()
    async with _asgi_fetcher() as fetcher:
        cameras = await fetcher.fetch_cameras()
    assert [(cam.id, cam.label) for cam in cameras] == [("back", "Back Yard"), ("front", "Front Door")]


async def test_wrong_api_key_is_a_transport_failure() -> None:
    fetcher = HttpClipFetcher(base_url=BASE_URL, api_key="nope", transport=httpx.ASGITransport(app=app))
    async with fetcher:
        with pytest.raises(TransportFailure) as excinfo:
            await fetcher.fetch_page("", "")
    assert excinfo.value.status_code == 401


def _mock_fetcher(handler) -> HttpClipFetcher:
    return HttpClipFetcher(base_url=BASE_URL, api_key="k", transport=httpx.MockTransport(handler))


async def test_request_carries_filter_cursor_and_key() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        seen["key"] = request.headers["x-api-key"]
        return httpx.Response(200, json={"results": [], "cursor": None})

    async with _mock_fetcher(handler) as fetcher:
        page = await fetcher.fetch_page("front", "abc")

    assert seen == {"params": {"cam": "front", "cursor": "abc"}, "key": "k"}
    assert page.results == ()
    assert page.cursor is None


@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(500, text="boom"),
        lambda request: httpx.Response(200, text="not json"),
        lambda request: httpx.Response(200, json=["not", "an", "object"]),
        lambda request: httpx.Response(200, json={"results": [{"ts": "2024-01-01T00:00:00Z"}], "cursor": None}),
    ],
)
async def test_bad_responses_become_transport_failures(handler) -> None:
    async with _mock_fetcher(handler) as fetcher:
        with pytest.raises(TransportFailure):
            await fetcher.fetch_page("", "")


async def test_connection_error_becomes_transport_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _mock_fetcher(handler) as fetcher:
        with pytest.raises(TransportFailure):
            await fetcher.fetch_cameras()


async def test_empty_wire_cursor_is_read_as_end_of_feed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"results": [], "cursor": ""})

    async with _mock_fetcher(handler) as fetcher:
        page = await fetcher.fetch_page("", "")

    assert page.cursor is None
