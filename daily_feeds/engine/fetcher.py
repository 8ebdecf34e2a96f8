"""HTTP retrieval and RSS parsing for a single feed."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import Any

import feedparser
import httpx
import structlog

from ..errors import NetworkError, ParseError

DEFAULT_TIMEOUT = 20.0
ACCEPT_HEADER = "application/rss+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.1"


@dataclass(slots=True, frozen=True)
class FeedItem:
    """One entry of a feed; any field may be missing in the source document."""

    identifier: str | None
    title: str | None
    body: str | None

    @property
    def is_renderable(self) -> bool:
        return bool(self.identifier and self.title and self.body)


class FeedFetcher:
    """Retrieve a feed over HTTP and turn it into ordered items.

    No retries: a failed request surfaces as :class:`NetworkError` and
    unparseable content as :class:`ParseError`.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.timeout = timeout
        self.logger = logger or structlog.get_logger("daily_feeds.fetcher")
        headers = {"Accept": ACCEPT_HEADER}
        if user_agent:
            headers["User-Agent"] = user_agent
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            follow_redirects=True,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    async def __aenter__(self) -> "FeedFetcher":
        return self

    async def __aexit__(self, *_exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def fetch(self, url: str) -> list[FeedItem]:
        content = await self._download(url)
        return self.parse(content, url)

    async def _download(self, url: str) -> bytes:
        try:
            response = await self._client.get(url, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Timed out after {self.timeout}s fetching {url}") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc
        if not response.is_success:
            raise NetworkError(f"Unexpected status {response.status_code} for {url}")
        return response.content

    def parse(self, content: bytes, url: str = "") -> list[FeedItem]:
        parsed = feedparser.parse(io.BytesIO(content))
        entries = parsed.get("entries") or []
        if not entries and (parsed.get("bozo") or not parsed.get("version")):
            reason = parsed.get("bozo_exception") or "not a syndication document"
            raise ParseError(f"Cannot parse feed {url}: {reason}")
        if parsed.get("bozo"):
            self.logger.warning(
                "feed_parse_warning",
                url=url,
                error=str(parsed.get("bozo_exception")),
                entries=len(entries),
            )
        items = [self._to_item(entry) for entry in entries]
        self.logger.debug(
            "feed_fetched",
            url=url,
            title=parsed.get("feed", {}).get("title"),
            items=len(items),
        )
        return items

    @staticmethod
    def _to_item(entry: Any) -> FeedItem:
        return FeedItem(
            identifier=_text(entry.get("id")),
            title=_text(entry.get("title")),
            body=_text(entry.get("summary")) if "summary_detail" in entry else None,
        )


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


__all__ = ["DEFAULT_TIMEOUT", "FeedFetcher", "FeedItem"]
