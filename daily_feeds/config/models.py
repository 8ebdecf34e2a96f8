"""Pydantic models describing the feed list and run settings."""

from __future__ import annotations

from datetime import time
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class SiteConfig(BaseModel):
    """One configured feed endpoint; ``name`` is its identity within a run."""

    model_config = {"frozen": True}

    name: str
    url: str

    @field_validator("name", "url")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("url")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError(f"feed url must be http(s): {value}")
        return value


class FeedsConfig(BaseModel):
    """Full run configuration: the source list plus where state lives."""

    sites: list[SiteConfig] = Field(default_factory=list)
    cache_file: Path
    output_dir: Path = Field(default=Path("."))
    fetch_timeout: float = 20.0
    max_concurrency: int | None = None
    user_agent: str = "daily-feeds/0.1 (+feed reader)"
    schedule_time: time = time(6, 0)

    @field_validator("cache_file", "output_dir", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    @model_validator(mode="after")
    def _validate(self) -> "FeedsConfig":
        if self.fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be > 0")
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        seen: set[str] = set()
        duplicates: list[str] = []
        for site in self.sites:
            if site.name in seen:
                duplicates.append(site.name)
            seen.add(site.name)
        if duplicates:
            raise ValueError(f"duplicate site names: {', '.join(sorted(set(duplicates)))}")
        return self

    def resolve_paths(self, base_dir: Path) -> "FeedsConfig":
        """Return a copy with relative paths anchored at ``base_dir``."""

        updates: dict[str, Path] = {}
        for field in ("cache_file", "output_dir"):
            value: Path = getattr(self, field)
            if not value.is_absolute():
                updates[field] = (base_dir / value).resolve()
        return self.model_copy(update=updates)

    def site(self, name: str) -> SiteConfig:
        for site in self.sites:
            if site.name == name:
                return site
        raise KeyError(name)


__all__ = ["FeedsConfig", "SiteConfig"]
