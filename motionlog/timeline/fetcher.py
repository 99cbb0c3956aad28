import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from motionlog.core.config import settings
from motionlog.timeline.clip import CameraDescriptor, ClipRecord
from motionlog.timeline.errors import TransportFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Page:
    results: tuple[ClipRecord, ...]
    # None marks the end of the feed.
    cursor: str | None


class ClipFetcher(Protocol):
    async def fetch_page(self, filter: str, cursor: str) -> Page: ...

    async def fetch_cameras(self) -> list[CameraDescriptor]: ...


class HttpClipFetcher:
    """Reads the clip feed over HTTP."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.feed_base_url).rstrip("/"),
            headers={"x-api-key": api_key if api_key is not None else settings.api_key},
            timeout=timeout if timeout is not None else settings.fetch_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "HttpClipFetcher":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            raise TransportFailure(f"GET {path} failed: {exc}") from exc
        if response.status_code >= 400:
            raise TransportFailure(
                f"GET {path} returned {response.status_code}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as exc:
            raise TransportFailure(f"GET {path} returned an undecodable body") from exc

    async def fetch_page(self, filter: str, cursor: str) -> Page:
        if cursor:
            logger.debug("Fetching from cursor %s", cursor)
        data = await self._get_json("/clips", params={"cam": filter, "cursor": cursor})
        if not isinstance(data, dict):
            raise TransportFailure("Feed page is not a JSON object")
        try:
            results = tuple(ClipRecord.from_wire(item) for item in data.get("results") or [])
        except (KeyError, TypeError, ValueError) as exc:
            raise TransportFailure(f"Malformed clip in feed page: {exc}") from exc
        # An empty cursor would restart the feed; treat it as the end.
        next_cursor = data.get("cursor") or None
        logger.debug("Next cursor is %s", next_cursor)
        return Page(results=results, cursor=next_cursor)

    async def fetch_cameras(self) -> list[CameraDescriptor]:
        data = await self._get_json("/cameras")
        if not isinstance(data, list):
            raise TransportFailure("Camera list is not a JSON array")
        return [CameraDescriptor.from_wire(item) for item in data]
