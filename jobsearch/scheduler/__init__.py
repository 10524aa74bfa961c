"""Debounced scheduling of search rebuilds."""

from .service import RebuildScheduler

__all__ = [
    "RebuildScheduler",
]
