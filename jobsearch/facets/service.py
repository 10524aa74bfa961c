"""Quick filter computation over a set of index entries."""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from jobsearch.domain.models import CreatorResolver, IndexEntry, resolve_creator
from jobsearch.logging import get_logger
from jobsearch.matching.ranking import rank_entries
from jobsearch.utils.text import casefold_key

from .models import QuickFilter, QuickFilterKind

logger = get_logger(__name__, component="facets")


@dataclass
class _Tally:
    display: str
    count: int = 0


class FrequencyTable:
    """Case-insensitive value counter that remembers the first spelling seen."""

    def __init__(self) -> None:
        self._tallies: Dict[str, _Tally] = {}

    def add(self, value: Optional[str]) -> None:
        display = (value or "").strip()
        if not display:
            return
        tally = self._tallies.setdefault(display.lower(), _Tally(display=display))
        tally.count += 1

    def top(self, size: int) -> List[_Tally]:
        """Most frequent values; ties by case-insensitive name ascending."""
        ordered = sorted(
            self._tallies.values(),
            key=lambda tally: (-tally.count, casefold_key(tally.display)),
        )
        return ordered[:size]

    def __len__(self) -> int:
        return len(self._tallies)


class QuickFilterBuilder:
    """Builds status and creator quick filters.

    Entries are ranked newest first before counting, so a value's display
    spelling is the one on its most recent entry regardless of corpus order.
    """

    def __init__(
        self,
        per_kind: int = 4,
        max_total: int = 8,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize QuickFilterBuilder.

        Args:
            per_kind: Maximum filters per kind (status, creator)
            max_total: Cap on the combined list
            logger_instance: Logger instance (defaults to module logger)
        """
        self.per_kind = per_kind
        self.max_total = max_total
        self.logger = logger_instance or logger

    def build(self, entries: Iterable[IndexEntry], resolver: CreatorResolver) -> List[QuickFilter]:
        """Compute quick filters for a corpus or match set.

        Args:
            entries: Entries to count over
            resolver: Looks up the directory record for a creator id

        Returns:
            Status filters then creator filters, capped at ``max_total``
        """
        statuses = FrequencyTable()
        creators = FrequencyTable()

        for entry in rank_entries(entries):
            statuses.add(entry.status)
            user = resolve_creator(resolver, entry.created_by)
            if user is not None:
                creators.add(user.display_name)

        filters = [
            QuickFilter(kind=QuickFilterKind.STATUS, value=t.display, count=t.count)
            for t in statuses.top(self.per_kind)
        ]
        filters.extend(
            QuickFilter(kind=QuickFilterKind.CREATOR, value=t.display, count=t.count)
            for t in creators.top(self.per_kind)
        )
        filters = filters[: self.max_total]

        self.logger.debug(
            f"Built {len(filters)} quick filters",
            extra={
                "event": "facets.built",
                "distinct_statuses": len(statuses),
                "distinct_creators": len(creators),
                "filter_count": len(filters),
            },
        )
        return filters
