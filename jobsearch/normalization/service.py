"""Conversion between full jobs and search index entries.

This module implements the normalization logic that:
1. Projects Job records onto lightweight IndexEntry values
2. Passes IndexEntry values from the global search index through unchanged
3. Collapses duplicate ids so every id names at most one entry
4. Expands an IndexEntry back into a partial Job when no full record exists
"""

import logging
from typing import Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from jobsearch.domain.models import IndexEntry, Job
from jobsearch.logging import get_logger
from jobsearch.utils.timestamps import EPOCH

logger = get_logger(__name__, component="normalization")

JobRecord = Union[Job, IndexEntry]


class EntryNormalizer:
    """Normalizes corpus records into IndexEntry values.

    Responsibilities:
    - Copy the searchable fields of a Job verbatim (trimming happens at match time)
    - Deduplicate records by id
    - Skip and log records that cannot be projected instead of failing the batch
    - Rebuild partial Jobs from entries for detail navigation
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        """Initialize EntryNormalizer.

        Args:
            logger_instance: Logger instance (defaults to module logger)
        """
        self.logger = logger_instance or logger

    @staticmethod
    def to_entry(record: JobRecord) -> IndexEntry:
        """Project a Job (or pass through an IndexEntry) as an IndexEntry.

        Args:
            record: Full Job or an entry from the global search index

        Returns:
            IndexEntry with the same identity and searchable fields

        Raises:
            TypeError: If record is neither a Job nor an IndexEntry
        """
        if isinstance(record, IndexEntry):
            return record
        if not isinstance(record, Job):
            raise TypeError(f"Cannot index record of type {type(record).__name__}")

        return IndexEntry(
            id=record.id,
            address=record.address,
            job_number=record.job_number,
            status=record.status,
            created_by=record.created_by,
            date=record.date,
            notes=record.notes,
            assignments=record.assignments,
            materials_used=record.materials_used,
            nid_footage=record.nid_footage,
            can_footage=record.can_footage,
        )

    @staticmethod
    def prefer_record(current: Optional[JobRecord], incoming: JobRecord) -> JobRecord:
        """Pick which of two records sharing an id to keep.

        A full Job is never replaced by an IndexEntry for the same id; in every
        other case the incoming (later) record wins.

        Args:
            current: Record already held for the id, if any
            incoming: Record arriving later in corpus order

        Returns:
            The record to keep
        """
        if isinstance(current, Job) and isinstance(incoming, IndexEntry):
            return current
        return incoming

    def to_entries(self, records: Iterable[JobRecord]) -> List[IndexEntry]:
        """Convert a corpus snapshot into a list of unique entries.

        When two records share an id, the later one wins but keeps the
        position of the first, so corpus order stays stable across updates.
        An IndexEntry never displaces a full Job (see ``prefer_record``).

        Args:
            records: Jobs and/or IndexEntries in corpus order

        Returns:
            Entries in first-seen order, one per id
        """
        by_id: Dict[str, IndexEntry] = {}
        full_ids = set()
        skipped = 0

        for record in records:
            if isinstance(record, IndexEntry) and record.id in full_ids:
                continue
            try:
                entry = self.to_entry(record)
            except (TypeError, ValidationError) as e:
                skipped += 1
                self.logger.warning(
                    f"Skipping unindexable record: {e}",
                    extra={
                        "event": "normalization.entry.skipped",
                        "record_type": type(record).__name__,
                    },
                )
                continue
            by_id[entry.id] = entry
            if isinstance(record, Job):
                full_ids.add(entry.id)

        self.logger.debug(
            "Corpus normalized",
            extra={
                "event": "normalization.corpus.normalized",
                "entry_count": len(by_id),
                "skipped_count": skipped,
            },
        )
        return list(by_id.values())

    @staticmethod
    def make_partial_job(entry: IndexEntry) -> Job:
        """Expand an entry into a Job for callers that need a full record.

        Fields the entry does not carry get safe defaults: no photos, zero
        hours, empty notes, and the Unix epoch for a missing date. Never
        fails and never touches the job store.

        Args:
            entry: Index entry without a backing Job

        Returns:
            Partial Job with the entry's identity and known fields
        """
        return Job(
            id=entry.id,
            address=entry.address,
            date=entry.date or EPOCH,
            status=entry.status,
            created_by=entry.created_by,
            notes=entry.notes or "",
            job_number=entry.job_number,
            assignments=entry.assignments,
            materials_used=entry.materials_used,
            photos=[],
            hours=0.0,
            nid_footage=entry.nid_footage,
            can_footage=entry.can_footage,
        )
