"""Normalization layer turning corpus records into search index entries.

This module provides:
- EntryNormalizer: projects Jobs onto IndexEntry values and back
- JobRecord: the union of record types a corpus may contain
"""

from .service import EntryNormalizer, JobRecord

__all__ = [
    "EntryNormalizer",
    "JobRecord",
]
