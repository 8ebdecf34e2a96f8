from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from daily_feeds.config import FeedsConfig, SiteConfig


def test_site_config_strips_and_requires_http() -> None:
    site = SiteConfig(name="  blog ", url=" http://x/feed ")
    assert site.name == "blog"
    assert site.url == "http://x/feed"
    with pytest.raises(ValidationError):
        SiteConfig(name="blog", url="ftp://x/feed")
    with pytest.raises(ValidationError):
        SiteConfig(name="   ", url="http://x/feed")


def test_feeds_config_defaults() -> None:
    config = FeedsConfig(cache_file="cache.json")
    assert config.sites == []
    assert config.cache_file == Path("cache.json")
    assert config.output_dir == Path(".")
    assert config.fetch_timeout == 20.0


@pytest.mark.parametrize(
    "overrides",
    [{"fetch_timeout": 0}, {"max_concurrency": 0}],
)
def test_feeds_config_rejects_invalid_limits(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        FeedsConfig(cache_file="cache.json", **overrides)


def test_resolve_paths_keeps_absolute_paths(tmp_path: Path) -> None:
    absolute = tmp_path / "elsewhere" / "cache.json"
    config = FeedsConfig(cache_file=absolute, output_dir="out").resolve_paths(tmp_path / "conf")
    assert config.cache_file == absolute
    assert config.output_dir == (tmp_path / "conf" / "out").resolve()


def test_site_lookup() -> None:
    config = FeedsConfig(
        cache_file="cache.json",
        sites=[{"name": "blog", "url": "http://x/feed"}],
    )
    assert config.site("blog").url == "http://x/feed"
    with pytest.raises(KeyError):
        config.site("missing")
