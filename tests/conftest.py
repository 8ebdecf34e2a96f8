"""Shared fixtures: RSS documents, mocked HTTP transport and config builders."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Mapping
from xml.sax.saxutils import escape

import httpx
import pytest

from daily_feeds.config import FeedsConfig, SiteConfig
from daily_feeds.engine import FeedFetcher


@pytest.fixture(autouse=True)
def _isolated_logs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DAILY_FEEDS_LOG_DIR", str(tmp_path / "logs"))


def build_rss(items: list[dict[str, str | None]], title: str = "Example feed") -> bytes:
    rendered = []
    for item in items:
        fields = []
        if item.get("guid") is not None:
            fields.append(f'<guid isPermaLink="false">{escape(item["guid"])}</guid>')
        if item.get("title") is not None:
            fields.append(f"<title>{escape(item['title'])}</title>")
        if item.get("description") is not None:
            fields.append(f"<description>{escape(item['description'])}</description>")
        rendered.append("<item>" + "".join(fields) + "</item>")
    document = (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<rss version="2.0"><channel>'
        f"<title>{escape(title)}</title>"
        "<link>http://example.com/</link>"
        "<description>Example channel</description>"
        + "".join(rendered)
        + "</channel></rss>"
    )
    return document.encode("utf-8")


def rss_item(guid: str | None, title: str | None = None, body: str | None = None) -> dict:
    return {
        "guid": guid,
        "title": title if title is not None else f"Title {guid}",
        "description": body if body is not None else f"<p>Body of {guid}</p>",
    }


@pytest.fixture
def rss() -> Callable[..., bytes]:
    return build_rss


@pytest.fixture
def item() -> Callable[..., dict]:
    return rss_item


Route = bytes | tuple[int, bytes] | Exception


@pytest.fixture
def mock_fetcher() -> Callable[[Mapping[str, Route]], FeedFetcher]:
    """Build a FeedFetcher whose HTTP layer serves canned responses per URL."""

    def _builder(routes: Mapping[str, Route], timeout: float = 5.0) -> FeedFetcher:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(str(request.url))
            if route is None:
                return httpx.Response(404, content=b"not found")
            if isinstance(route, Exception):
                raise route
            if isinstance(route, tuple):
                status, content = route
                return httpx.Response(status, content=content)
            return httpx.Response(
                200, content=route, headers={"Content-Type": "application/rss+xml"}
            )

        return FeedFetcher(timeout=timeout, transport=httpx.MockTransport(handler))

    return _builder


@pytest.fixture
def feeds_config(tmp_path: Path) -> Callable[..., FeedsConfig]:
    def _builder(
        sites: list[tuple[str, str]],
        cache: Mapping[str, list[str]] | None = None,
        create_cache: bool = True,
        **overrides: Any,
    ) -> FeedsConfig:
        cache_file = tmp_path / "cache.json"
        if create_cache:
            cache_file.write_text(json.dumps(dict(cache or {})), encoding="utf-8")
        base: dict[str, Any] = {
            "sites": [SiteConfig(name=name, url=url) for name, url in sites],
            "cache_file": cache_file,
            "output_dir": tmp_path / "out",
        }
        base.update(overrides)
        return FeedsConfig(**base)

    return _builder


@pytest.fixture
def read_cache() -> Callable[[Path], dict[str, list[str]]]:
    def _read(path: Path) -> dict[str, list[str]]:
        return json.loads(path.read_text(encoding="utf-8"))

    return _read
