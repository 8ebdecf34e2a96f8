"""Engine components wiring fetch → filter → render → commit."""

from .dedup import DedupCache
from .fetcher import FeedFetcher, FeedItem
from .ingestor import IngestState, SiteIngestor, SiteOutcome
from .renderer import ItemRenderer

__all__ = [
    "DedupCache",
    "FeedFetcher",
    "FeedItem",
    "IngestState",
    "ItemRenderer",
    "SiteIngestor",
    "SiteOutcome",
]
