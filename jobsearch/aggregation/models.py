"""Data models for aggregated search results.

An Aggregate collapses every matching job that shares an address and job
number into one result, keeping a digest per job and the people who added
them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class JobDigest:
    """Summary of one job inside an aggregate.

    Attributes:
        id: Job identifier (unique within the aggregate)
        status: Job status at rebuild time
        date: Job date, None for undated index entries
        created_by: Creator id, if recorded
    """

    id: str
    status: str
    date: Optional[datetime]
    created_by: Optional[str] = None


@dataclass(frozen=True)
class Contributor:
    """Person who added at least one job in an aggregate."""

    id: str
    first_name: str
    last_name: str
    position: Optional[str] = None

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class Aggregate:
    """Group of jobs sharing a normalized (address, job number) identity.

    Attributes:
        id: Grouping key, ``lower(trim(address)) + "|#" + lower(trim(job_number))``
        address: Address of the newest member, as recorded
        job_number: Trimmed job number of the newest member ("" if none)
        jobs: Member digests, newest first
        contributors: Unique creators in first-seen order over ``jobs``
    """

    id: str
    address: str
    job_number: str
    jobs: Tuple[JobDigest, ...] = field(default_factory=tuple)
    contributors: Tuple[Contributor, ...] = field(default_factory=tuple)

    @property
    def most_recent_job(self) -> Optional[JobDigest]:
        """Newest member digest, None for an empty aggregate."""
        return self.jobs[0] if self.jobs else None

    @property
    def result_count(self) -> int:
        """Number of jobs collapsed into this aggregate."""
        return len(self.jobs)
