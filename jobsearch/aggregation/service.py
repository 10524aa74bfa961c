"""Grouping of ranked search matches into aggregates.

This module implements the aggregation logic that:
1. Groups entries by normalized address + job number
2. Orders each group's members newest first
3. Takes the representative address/job number from the newest member
4. Collects unique contributors in newest-first order
5. Orders the aggregates by their newest member, then by address
"""

import logging
from typing import Dict, Iterable, List, Optional

from jobsearch.domain.models import CreatorResolver, IndexEntry, resolve_creator
from jobsearch.logging import get_logger
from jobsearch.matching.ranking import rank_aggregates, rank_entries
from jobsearch.utils.text import normalize_field

from .models import Aggregate, Contributor, JobDigest

logger = get_logger(__name__, component="aggregation")


def aggregation_key(address: Optional[str], job_number: Optional[str]) -> str:
    """Build the identity key of the aggregate an entry belongs to.

    Absent and empty job numbers both normalize to "", so they group together.

    Example:
        >>> aggregation_key("123 MAIN ST ", " 42")
        '123 main st|#42'
    """
    return normalize_field(address) + "|#" + normalize_field(job_number)


class JobAggregator:
    """Builds aggregates from the ranked entries of one rebuild.

    Every call is a pure re-derivation from its inputs; no aggregate carries
    state from a previous rebuild.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        self.logger = logger_instance or logger

    def aggregate(self, entries: Iterable[IndexEntry], resolver: CreatorResolver) -> List[Aggregate]:
        """Group entries into aggregates.

        Args:
            entries: Matching entries (usually already ranked)
            resolver: Looks up the directory record for a creator id

        Returns:
            Aggregates ordered newest first, then by address
        """
        groups: Dict[str, List[IndexEntry]] = {}
        for entry in entries:
            groups.setdefault(aggregation_key(entry.address, entry.job_number), []).append(entry)

        aggregates = [self._build(key, members, resolver) for key, members in groups.items()]
        ordered = rank_aggregates(aggregates)

        self.logger.debug(
            f"Built {len(ordered)} aggregates",
            extra={
                "event": "aggregation.completed",
                "aggregate_count": len(ordered),
                "entry_count": sum(len(members) for members in groups.values()),
            },
        )
        return ordered

    @staticmethod
    def _build(key: str, members: List[IndexEntry], resolver: CreatorResolver) -> Aggregate:
        ordered = rank_entries(members)
        newest = ordered[0]

        seen_creators = set()
        contributors: List[Contributor] = []
        for member in ordered:
            creator_id = member.created_by
            if not creator_id or creator_id in seen_creators:
                continue
            user = resolve_creator(resolver, creator_id)
            if user is None:
                continue
            seen_creators.add(creator_id)
            contributors.append(
                Contributor(
                    id=creator_id,
                    first_name=user.first_name,
                    last_name=user.last_name,
                    position=user.position,
                )
            )

        digests = tuple(
            JobDigest(id=m.id, status=m.status, date=m.date, created_by=m.created_by)
            for m in ordered
        )

        return Aggregate(
            id=key,
            address=newest.address,
            job_number=(newest.job_number or "").strip(),
            jobs=digests,
            contributors=tuple(contributors),
        )
