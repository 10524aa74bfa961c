"""Query matching and result ordering.

This module provides:
- tokenize: split a query into lowercase tokens
- JobSearchMatcher: AND-of-substrings matching over every searchable field
- rank_entries / rank_aggregates: newest-first ordering with address tie-breaks
"""

from .engine import SEARCHABLE_FIELDS, JobSearchMatcher, tokenize
from .ranking import rank_aggregates, rank_entries, rank_key

__all__ = [
    "JobSearchMatcher",
    "tokenize",
    "SEARCHABLE_FIELDS",
    "rank_entries",
    "rank_aggregates",
    "rank_key",
]
