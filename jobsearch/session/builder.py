"""Snapshot construction for one rebuild.

This module implements the rebuild algorithm that:
1. Trims and tokenizes the query
2. Normalizes the corpus snapshot into unique index entries
3. Computes quick filters over the whole corpus, independent of the query
4. Publishes recents for an empty query, otherwise filters, ranks, and
   aggregates (or lists) the matches

Building is pure: the same (query, records, users) triple always yields an
equal snapshot.
"""

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from jobsearch.aggregation import JobAggregator
from jobsearch.config.models import SearchSettings
from jobsearch.domain.models import (
    CreatorResolver,
    DirectoryUser,
    IndexEntry,
    Job,
    resolve_creator,
)
from jobsearch.facets import QuickFilterBuilder
from jobsearch.logging import get_logger
from jobsearch.matching import JobSearchMatcher, rank_entries, tokenize
from jobsearch.normalization import EntryNormalizer, JobRecord

from .models import (
    EmptyState,
    IdleState,
    ResultItem,
    ResultsState,
    SearchResult,
    SessionSnapshot,
)

logger = get_logger(__name__, component="session")


class SnapshotBuilder:
    """Derives a complete SessionSnapshot from a query and source snapshots."""

    def __init__(
        self,
        settings: Optional[SearchSettings] = None,
        normalizer: Optional[EntryNormalizer] = None,
        matcher: Optional[JobSearchMatcher] = None,
        aggregator: Optional[JobAggregator] = None,
        facet_builder: Optional[QuickFilterBuilder] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize SnapshotBuilder.

        Args:
            settings: Caps and result mode (defaults to SearchSettings())
            normalizer: Corpus normalizer
            matcher: Query matcher
            aggregator: Result aggregator
            facet_builder: Quick filter builder (defaults to the settings' caps)
            logger_instance: Logger instance (defaults to module logger)
        """
        self.settings = settings or SearchSettings()
        self.normalizer = normalizer or EntryNormalizer()
        self.matcher = matcher or JobSearchMatcher()
        self.aggregator = aggregator or JobAggregator()
        self.facet_builder = facet_builder or QuickFilterBuilder(
            per_kind=self.settings.quick_filters_per_kind,
            max_total=self.settings.quick_filters_total,
        )
        self.logger = logger_instance or logger

    def build(
        self,
        query: str,
        records: Sequence[JobRecord],
        users: Mapping[str, DirectoryUser],
        generation: int = 0,
    ) -> SessionSnapshot:
        """Run one rebuild.

        Args:
            query: Raw query text
            records: Corpus snapshot
            users: Directory snapshot keyed by user id
            generation: Trigger sequence number stamped on the snapshot

        Returns:
            Snapshot with view state, count, quick filters, and lookups
        """
        resolver: CreatorResolver = users.get
        trimmed = query.strip()
        tokens = tokenize(trimmed)

        entries = self.normalizer.to_entries(records)
        quick_filters = tuple(self.facet_builder.build(entries, resolver))
        job_lookup: Dict[str, JobRecord] = {}
        for record in records:
            if isinstance(record, (Job, IndexEntry)):
                job_lookup[record.id] = EntryNormalizer.prefer_record(
                    job_lookup.get(record.id), record
                )

        if not tokens:
            recents = tuple(
                self._to_result(entry, resolver)
                for entry in rank_entries(entries)[: self.settings.recents_limit]
            )
            return SessionSnapshot(
                query=query,
                view_state=IdleState(recents=recents),
                result_count=0,
                quick_filters=quick_filters,
                result_lookup={result.id: result for result in recents},
                job_lookup=job_lookup,
                generation=generation,
            )

        matched = rank_entries(self.matcher.filter(entries, tokens, resolver))
        flat = [self._to_result(entry, resolver) for entry in matched]
        result_lookup: Dict[str, ResultItem] = {result.id: result for result in flat}

        if self.settings.aggregate_results:
            items: List[ResultItem] = list(self.aggregator.aggregate(matched, resolver))
            result_lookup.update((aggregate.id, aggregate) for aggregate in items)
        else:
            items = list(flat)

        count = len(matched)
        view_state = (
            ResultsState(query=trimmed, items=tuple(items), count=count)
            if count
            else EmptyState(query=trimmed)
        )

        return SessionSnapshot(
            query=query,
            view_state=view_state,
            result_count=count,
            quick_filters=quick_filters,
            result_lookup=result_lookup,
            job_lookup=job_lookup,
            generation=generation,
        )

    @staticmethod
    def _to_result(entry: IndexEntry, resolver: CreatorResolver) -> SearchResult:
        return SearchResult.from_entry(entry, resolve_creator(resolver, entry.created_by))
