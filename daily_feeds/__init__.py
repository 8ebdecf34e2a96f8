"""daily-feeds: fetch configured RSS feeds daily and render each new item as HTML."""

__version__ = "0.1.0"
