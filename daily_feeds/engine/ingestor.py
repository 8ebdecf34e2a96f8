"""Per-source pipeline: fetch, filter against the cache, render, commit."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import structlog

from ..config import SiteConfig
from ..errors import DailyFeedsError
from .dedup import DedupCache
from .fetcher import FeedFetcher
from .renderer import ItemRenderer


class IngestState(str, Enum):
    FETCHING = "Fetching"
    FILTERING = "Filtering"
    RENDERING = "Rendering"
    STAGED = "Staged"
    DONE = "Done"
    FAILED = "Failed"


@dataclass(slots=True)
class SiteOutcome:
    """Terminal result of one source's ingestion."""

    source: str
    ok: bool = False
    rendered: list[Path] = field(default_factory=list)
    committed: set[str] = field(default_factory=set)
    skipped_seen: int = 0
    skipped_incomplete: int = 0
    error: str | None = None
    error_type: str | None = None


class SiteIngestor:
    """Run one source through Fetching → Filtering → Rendering → Staged → Done.

    Each item is checked against committed cache state and rendered as soon as
    it is known to be new, so documents follow feed order. New identifiers
    stay staged locally and reach the cache in one ``commit`` only after every
    item rendered; any failure (or cancellation) before that drops them.
    """

    def __init__(
        self,
        source: SiteConfig,
        fetcher: FeedFetcher,
        cache: DedupCache,
        renderer: ItemRenderer,
        output_dir: Path,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.source = source
        self.fetcher = fetcher
        self.cache = cache
        self.renderer = renderer
        self.output_dir = output_dir
        self.logger = logger or structlog.get_logger("daily_feeds.ingestor").bind(
            source=source.name
        )
        self.state = IngestState.FETCHING

    async def run(self) -> SiteOutcome:
        outcome = SiteOutcome(source=self.source.name)
        try:
            await self._ingest(outcome)
        except DailyFeedsError as exc:
            if exc.source is None:
                exc.source = self.source.name
            self._fail(outcome, exc)
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("site_unexpected_error", error=str(exc))
            self._fail(outcome, exc)
        return outcome

    async def _ingest(self, outcome: SiteOutcome) -> None:
        self._set_state(IngestState.FETCHING)
        items = await self.fetcher.fetch(self.source.url)

        self._set_state(IngestState.FILTERING)
        staged: set[str] = set()
        for item in items:
            if not item.is_renderable:
                outcome.skipped_incomplete += 1
                self.logger.debug("item_skipped_incomplete", identifier=item.identifier)
                continue
            if self.cache.contains(self.source.name, item.identifier):
                outcome.skipped_seen += 1
                self.logger.debug("item_skipped_seen", identifier=item.identifier)
                continue
            self._set_state(IngestState.RENDERING)
            path = await self.renderer.render(self.source, item, self.output_dir)
            outcome.rendered.append(path)
            staged.add(item.identifier)
            self.logger.info("item_rendered", identifier=item.identifier, title=item.title)

        self._set_state(IngestState.STAGED)
        self.cache.commit(self.source.name, staged)
        outcome.committed = staged
        outcome.ok = True
        self._set_state(IngestState.DONE)
        self.logger.info(
            "site_done",
            rendered=len(outcome.rendered),
            skipped_seen=outcome.skipped_seen,
            skipped_incomplete=outcome.skipped_incomplete,
        )

    def _fail(self, outcome: SiteOutcome, exc: Exception) -> None:
        self._set_state(IngestState.FAILED)
        outcome.ok = False
        outcome.error = exc.message if isinstance(exc, DailyFeedsError) else str(exc)
        outcome.error_type = type(exc).__name__
        self.logger.error("site_failed", error=outcome.error, error_type=outcome.error_type)

    def _set_state(self, state: IngestState) -> None:
        if state is not self.state:
            self.state = state
            self.logger.debug("site_state", state=state.value)


__all__ = ["IngestState", "SiteIngestor", "SiteOutcome"]
