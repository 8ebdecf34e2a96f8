"""Run coordinator: fan out one ingestor per source, join, then persist the cache."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable

import structlog

from .config import FeedsConfig, SiteConfig
from .engine import DedupCache, FeedFetcher, ItemRenderer, SiteIngestor, SiteOutcome
from .infra import CacheFile
from .logging_conf import source_logger


@dataclass(slots=True, frozen=True)
class RunContext:
    """Date-scoped output location shared by every source of a run."""

    run_date: date
    output_dir: Path

    @classmethod
    def for_date(cls, run_date: date, output_root: Path) -> "RunContext":
        return cls(run_date=run_date, output_dir=Path(output_root) / run_date.isoformat())

    def ensure_output_dir(self) -> Path:
        # reused when an earlier run today already created it
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir


@dataclass(slots=True)
class RunReport:
    run_date: date
    output_dir: Path
    outcomes: list[SiteOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[SiteOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def rendered(self) -> int:
        return sum(len(outcome.rendered) for outcome in self.outcomes)


class RunOrchestrator:
    """Central coordinator for one ingestion run across all configured sources."""

    def __init__(
        self,
        config: FeedsConfig,
        cache: DedupCache,
        cache_file: CacheFile | None = None,
        fetcher: FeedFetcher | None = None,
        renderer: ItemRenderer | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config
        self.cache = cache
        self.cache_file = cache_file or CacheFile(config.cache_file)
        self.fetcher = fetcher
        self.renderer = renderer or ItemRenderer()
        self.today = today
        self.logger = structlog.get_logger("daily_feeds").bind(component="orchestrator")

    @classmethod
    def from_config(cls, config: FeedsConfig, **kwargs) -> "RunOrchestrator":
        """Load the durable cache (it must already exist) and build an orchestrator."""

        cache_file = CacheFile(config.cache_file)
        cache = DedupCache(cache_file.load())
        return cls(config, cache, cache_file=cache_file, **kwargs)

    async def run(self) -> RunReport:
        context = RunContext.for_date(self.today(), self.config.output_dir)
        context.ensure_output_dir()
        self.logger.info(
            "run_started",
            run_date=context.run_date.isoformat(),
            output_dir=str(context.output_dir),
            sources=len(self.config.sites),
        )
        report = RunReport(run_date=context.run_date, output_dir=context.output_dir)

        fetcher = self.fetcher or FeedFetcher(
            timeout=self.config.fetch_timeout, user_agent=self.config.user_agent
        )
        try:
            report.outcomes = await self._fan_out(fetcher, context)
        except asyncio.CancelledError:
            self.logger.warning("run_cancelled", output_dir=str(context.output_dir))
            raise
        finally:
            if self.fetcher is None:
                await fetcher.aclose()

        # every source has reached a terminal state; persist exactly once
        self.cache_file.save(self.cache.snapshot())
        self.logger.info("cache_persisted", path=str(self.cache_file.path))

        self.logger.info(
            "run_finished",
            output_dir=str(context.output_dir),
            rendered=report.rendered,
            failed=[outcome.source for outcome in report.failed],
        )
        return report

    def run_sync(self) -> RunReport:
        return asyncio.run(self.run())

    async def _fan_out(self, fetcher: FeedFetcher, context: RunContext) -> list[SiteOutcome]:
        limit = self.config.max_concurrency
        semaphore = asyncio.Semaphore(limit) if limit else None

        async def _run_site(site: SiteConfig) -> SiteOutcome:
            ingestor = SiteIngestor(
                site,
                fetcher,
                self.cache,
                self.renderer,
                context.output_dir,
                logger=source_logger(site.name),
            )
            if semaphore is None:
                return await ingestor.run()
            async with semaphore:
                return await ingestor.run()

        async with asyncio.TaskGroup() as group:
            tasks = [
                group.create_task(_run_site(site), name=f"site::{site.name}")
                for site in self.config.sites
            ]
        return [task.result() for task in tasks]


def run_once(config: FeedsConfig, **kwargs) -> RunReport:
    """Load the cache, run every source for today and persist; blocking."""

    return RunOrchestrator.from_config(config, **kwargs).run_sync()


__all__ = ["RunContext", "RunOrchestrator", "RunReport", "run_once"]
