"""Render feed items as standalone HTML documents."""

from __future__ import annotations

import asyncio
import hashlib
import html
import re
from pathlib import Path

from ..config import SiteConfig
from ..errors import WriteError
from .fetcher import FeedItem

_UNSAFE_CHARS = re.compile(r'[\x00-\x1f\x7f<>:"/\\|?*]+')
# bytes, leaving room for the digest and ".html" within the 255-byte name limit
MAX_STEM_BYTES = 200
DIGEST_LENGTH = 8

DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>{name}-{title}</title>
</head>
<body>
<h1>{name}-{title}</h1>
{body}
</body>
</html>
"""


def document_filename(source_name: str, title: str) -> str:
    """Deterministic file name for an item; equal titles map to the same file.

    The stem is ``<source>-<title>`` when that is already path safe. If
    characters had to be replaced, the stem had to be shortened, or the
    source name itself contains the separator, a short digest of the raw
    pair is appended so distinct items never share a file.
    """

    raw = f"{source_name}-{title}"
    stem = _UNSAFE_CHARS.sub("_", raw).strip(" .")
    encoded = stem.encode("utf-8")
    if len(encoded) > MAX_STEM_BYTES:
        stem = encoded[:MAX_STEM_BYTES].decode("utf-8", "ignore")
    stem = stem.rstrip(" .") or "item"
    if stem != raw or "-" in source_name:
        digest = hashlib.sha1(f"{source_name}\x00{title}".encode("utf-8")).hexdigest()
        stem = f"{stem}-{digest[:DIGEST_LENGTH]}"
    return f"{stem}.html"


def render_document(source: SiteConfig, item: FeedItem) -> str:
    # body is an already sanitised markup fragment and is embedded as-is
    return DOCUMENT_TEMPLATE.format(
        name=html.escape(source.name),
        title=html.escape(item.title or ""),
        body=item.body or "",
    )


class ItemRenderer:
    """Write one HTML document per new item into the run directory."""

    async def render(self, source: SiteConfig, item: FeedItem, output_dir: Path) -> Path:
        path = output_dir / document_filename(source.name, item.title or "")
        contents = render_document(source, item)
        try:
            await asyncio.to_thread(path.write_text, contents, encoding="utf-8")
        except OSError as exc:
            raise WriteError(f"Cannot write {path}: {exc}", source=source.name) from exc
        return path


__all__ = ["DOCUMENT_TEMPLATE", "ItemRenderer", "document_filename", "render_document"]
