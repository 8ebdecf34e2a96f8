from __future__ import annotations

import asyncio
import re
from pathlib import Path

import pytest

from daily_feeds.config import SiteConfig
from daily_feeds.engine import FeedItem, ItemRenderer
from daily_feeds.engine.renderer import document_filename, render_document
from daily_feeds.errors import WriteError

SOURCE = SiteConfig(name="blog", url="http://x/feed")


def test_document_filename_is_deterministic_and_path_safe() -> None:
    assert document_filename("blog", "Hello world") == "blog-Hello world.html"
    assert re.fullmatch(r"blog-a_b_c_ d_-[0-9a-f]{8}\.html", document_filename("blog", "a/b\\c: d?"))
    assert document_filename("blog", "Hello world") == document_filename("blog", "Hello world")


def test_titles_differing_only_in_unsafe_characters_get_distinct_files() -> None:
    first = document_filename("blog", "Q&A: part 1")
    second = document_filename("blog", "Q&A/ part 1")
    assert first != second
    assert first.startswith("blog-Q&A_ part 1-")
    assert second.startswith("blog-Q&A_ part 1-")


def test_source_names_with_separator_do_not_collide() -> None:
    assert document_filename("a-b", "c") != document_filename("a", "b-c")


@pytest.mark.parametrize("title", ["长" * 100, "x" * 1000, "é" * 300])
def test_long_titles_fit_the_filename_byte_limit(title: str) -> None:
    name = document_filename("blog", title)
    assert len(name.encode("utf-8")) <= 255
    assert name != document_filename("blog", title + "!")


def test_render_long_multibyte_title(tmp_path: Path) -> None:
    item = FeedItem(identifier="i1", title="长" * 100, body="<p>one</p>")
    path = asyncio.run(ItemRenderer().render(SOURCE, item, tmp_path))
    assert path.exists()
    assert "长" * 100 in path.read_text(encoding="utf-8")


def test_colliding_sanitised_titles_keep_both_documents(tmp_path: Path) -> None:
    renderer = ItemRenderer()
    asyncio.run(renderer.render(SOURCE, FeedItem("i1", "Q&A: part 1", "<p>one</p>"), tmp_path))
    asyncio.run(renderer.render(SOURCE, FeedItem("i2", "Q&A/ part 1", "<p>two</p>"), tmp_path))
    assert len(list(tmp_path.iterdir())) == 2


def test_render_document_embeds_fields() -> None:
    item = FeedItem(identifier="id1", title="Fish & <Chips>", body="<p>Tasty</p>")
    document = render_document(SOURCE, item)
    assert "<title>blog-Fish &amp; &lt;Chips&gt;</title>" in document
    assert "<h1>blog-Fish &amp; &lt;Chips&gt;</h1>" in document
    assert "<p>Tasty</p>" in document
    assert document.startswith("<!DOCTYPE html>")


def test_render_writes_document(tmp_path: Path) -> None:
    item = FeedItem(identifier="id1", title="First", body="<p>one</p>")
    path = asyncio.run(ItemRenderer().render(SOURCE, item, tmp_path))
    assert path == tmp_path / "blog-First.html"
    assert "<p>one</p>" in path.read_text(encoding="utf-8")


def test_same_title_overwrites_previous_document(tmp_path: Path) -> None:
    renderer = ItemRenderer()
    asyncio.run(renderer.render(SOURCE, FeedItem("id1", "Same", "<p>old</p>"), tmp_path))
    asyncio.run(renderer.render(SOURCE, FeedItem("id2", "Same", "<p>new</p>"), tmp_path))
    files = list(tmp_path.iterdir())
    assert len(files) == 1
    assert "<p>new</p>" in files[0].read_text(encoding="utf-8")


def test_render_failure_raises_write_error(tmp_path: Path) -> None:
    missing_dir = tmp_path / "does-not-exist"
    with pytest.raises(WriteError) as excinfo:
        asyncio.run(ItemRenderer().render(SOURCE, FeedItem("id1", "T", "B"), missing_dir))
    assert excinfo.value.source == "blog"
