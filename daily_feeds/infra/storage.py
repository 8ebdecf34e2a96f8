"""Durable JSON storage for the per-source seen-identifier record."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Mapping

from ..errors import CacheIOError, ConfigError


class CacheFile:
    """Read and fully overwrite the cache file mapping source name to identifiers."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def initialise(self) -> bool:
        """Create an empty cache if none exists; return True when created."""

        if self.path.exists():
            return False
        self.save({})
        return True

    def load(self) -> dict[str, set[str]]:
        if not self.path.exists():
            raise ConfigError(f"Cache file not found: {self.path}")
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read cache file {self.path}: {exc}") from exc
        try:
            payload = json.loads(text) if text.strip() else {}
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Cache file is not valid JSON: {self.path}: {exc}") from exc
        if not isinstance(payload, dict):
            raise ConfigError(f"Cache file must contain a JSON object: {self.path}")
        seen: dict[str, set[str]] = {}
        for name, identifiers in payload.items():
            if not isinstance(identifiers, list) or not all(
                isinstance(item, str) for item in identifiers
            ):
                raise ConfigError(
                    f"Cache entry `{name}` must be a list of strings: {self.path}"
                )
            seen[str(name)] = set(identifiers)
        return seen

    def save(self, snapshot: Mapping[str, frozenset[str] | set[str]]) -> None:
        payload = {name: sorted(snapshot[name]) for name in sorted(snapshot)}
        text = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as stream:
                stream.write(text)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            raise CacheIOError(f"Cannot persist cache file {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)


__all__ = ["CacheFile"]
