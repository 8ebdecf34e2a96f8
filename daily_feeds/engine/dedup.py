"""Shared seen-identifier cache guarded by a lock callers never see."""

from __future__ import annotations

from threading import Lock
from types import MappingProxyType
from typing import Iterable, Mapping


class DedupCache:
    """Map source name to the set of identifiers already processed.

    ``contains`` only ever sees committed state. A source stages its new
    identifiers locally and merges them with a single ``commit`` once every
    item of its fetch has been handled, so no source observes another
    source's in-flight work and entries only grow.
    """

    def __init__(self, seen: Mapping[str, Iterable[str]] | None = None) -> None:
        self._lock = Lock()
        self._seen: dict[str, set[str]] = {
            name: set(identifiers) for name, identifiers in (seen or {}).items()
        }

    def contains(self, source_name: str, identifier: str) -> bool:
        with self._lock:
            entry = self._seen.get(source_name)
            return entry is not None and identifier in entry

    def commit(self, source_name: str, identifiers: Iterable[str]) -> None:
        new = set(identifiers)
        with self._lock:
            self._seen.setdefault(source_name, set()).update(new)

    def snapshot(self) -> Mapping[str, frozenset[str]]:
        with self._lock:
            return MappingProxyType(
                {name: frozenset(identifiers) for name, identifiers in self._seen.items()}
            )

    def sources(self) -> list[str]:
        with self._lock:
            return sorted(self._seen)

    def count(self, source_name: str) -> int:
        with self._lock:
            return len(self._seen.get(source_name, ()))


__all__ = ["DedupCache"]
