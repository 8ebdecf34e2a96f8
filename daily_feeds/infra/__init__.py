"""Infra layer utilities (durable cache storage)."""

from .storage import CacheFile

__all__ = ["CacheFile"]
