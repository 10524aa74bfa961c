"""Ordering rules shared by recents, search results, and aggregates.

Order: most recent date first; equal dates by address ascending,
case-insensitively; then by id so equal keys never swap between runs.
Records without a date sort after every dated record.
"""

from datetime import datetime
from typing import Iterable, List, Optional, Tuple, TypeVar

from jobsearch.domain.models import IndexEntry
from jobsearch.utils.text import casefold_key

T = TypeVar("T")

RankKey = Tuple[int, float, str, str]


def rank_key(date: Optional[datetime], address: Optional[str], ident: str) -> RankKey:
    """Build the sort key for one record.

    Args:
        date: Record date (None sorts last)
        address: Address used to break date ties
        ident: Stable identifier used as the final tie-break

    Returns:
        Tuple usable as a ``sorted`` key
    """
    if date is None:
        return (1, 0.0, casefold_key(address), ident)
    return (0, -date.timestamp(), casefold_key(address), ident)


def rank_entries(entries: Iterable[IndexEntry]) -> List[IndexEntry]:
    """Order entries newest first, then by address."""
    return sorted(entries, key=lambda entry: rank_key(entry.date, entry.address, entry.id))


def rank_aggregates(aggregates: Iterable[T]) -> List[T]:
    """Order aggregates by their most recent member, then by address.

    Works on any object exposing ``most_recent_job`` (with a ``date``),
    ``address`` and ``id``.
    """

    def key(aggregate) -> RankKey:
        newest = aggregate.most_recent_job
        return rank_key(newest.date if newest else None, aggregate.address, aggregate.id)

    return sorted(aggregates, key=key)
