"""Exception hierarchy separating fatal run errors from source-local ones."""

from __future__ import annotations


class DailyFeedsError(Exception):
    """Base class for every error raised by the pipeline."""

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        if self.source:
            return f"[{self.source}] {self.message}"
        return self.message


class ConfigError(DailyFeedsError):
    """Configuration or cache file is missing or malformed. Fatal."""


class FetchError(DailyFeedsError):
    """A feed could not be retrieved or understood. Source-local."""


class NetworkError(FetchError):
    """Transport failure, timeout or non-success HTTP status."""


class ParseError(FetchError):
    """Retrieved bytes are not a well-formed syndication document."""


class WriteError(DailyFeedsError):
    """A rendered document could not be written. Source-local."""


class CacheIOError(DailyFeedsError):
    """The seen-identifier cache could not be persisted at run end."""


__all__ = [
    "CacheIOError",
    "ConfigError",
    "DailyFeedsError",
    "FetchError",
    "NetworkError",
    "ParseError",
    "WriteError",
]
