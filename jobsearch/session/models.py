"""Data models published by a search session.

A session publishes one immutable SessionSnapshot per rebuild. Its
``view_state`` is exactly one of IdleState, EmptyState, or ResultsState, so
"nothing typed yet" and "nothing matched" stay distinguishable.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from jobsearch.aggregation.models import Aggregate
from jobsearch.domain.models import DirectoryUser, IndexEntry, Job
from jobsearch.facets.models import QuickFilter
from jobsearch.utils.text import clean_optional, split_address


@dataclass(frozen=True)
class AddressComponents:
    """Address split for display: street line and the rest."""

    primary: str
    secondary: Optional[str] = None

    @classmethod
    def from_address(cls, address: str) -> "AddressComponents":
        primary, secondary = split_address(address)
        return cls(primary=primary, secondary=secondary)


@dataclass(frozen=True)
class CreatorSummary:
    """Resolved creator shown next to a result."""

    id: str
    name: str
    role: Optional[str] = None

    @classmethod
    def from_user(cls, user: DirectoryUser) -> "CreatorSummary":
        return cls(id=user.id, name=user.display_name, role=clean_optional(user.position))


@dataclass(frozen=True)
class SearchResult:
    """Flat, display-ready result for one job.

    Attributes:
        id: Job identifier
        address: Address split into primary/secondary lines
        job_number: Trimmed job number, None when absent or blank
        status: Job status
        date: Job date, None for undated index entries
        creator: Resolved creator, None when unknown
    """

    id: str
    address: AddressComponents
    job_number: Optional[str]
    status: str
    date: Optional[datetime]
    creator: Optional[CreatorSummary] = None

    @classmethod
    def from_entry(cls, entry: IndexEntry, creator: Optional[DirectoryUser] = None) -> "SearchResult":
        return cls(
            id=entry.id,
            address=AddressComponents.from_address(entry.address),
            job_number=clean_optional(entry.job_number),
            status=entry.status,
            date=entry.date,
            creator=CreatorSummary.from_user(creator) if creator is not None else None,
        )


ResultItem = Union[SearchResult, Aggregate]


@dataclass(frozen=True)
class IdleState:
    """Query is empty: show recent activity."""

    recents: Tuple[SearchResult, ...] = ()

    kind = "idle"


@dataclass(frozen=True)
class EmptyState:
    """Query is non-empty and nothing matched."""

    query: str

    kind = "empty"


@dataclass(frozen=True)
class ResultsState:
    """Query matched at least one job.

    Attributes:
        query: Trimmed query text
        items: Aggregates (aggregating mode) or SearchResults, in rank order
        count: Number of matching jobs, not the number of items
    """

    query: str
    items: Tuple[ResultItem, ...]
    count: int

    kind = "results"


ViewState = Union[IdleState, EmptyState, ResultsState]


def _frozen(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class SessionSnapshot:
    """Everything a host UI reads after a rebuild, published atomically.

    Attributes:
        query: Raw query text the snapshot was built for
        view_state: Idle, Empty, or Results
        result_count: Matching job count (0 while idle)
        quick_filters: Filters computed over the full corpus
        result_lookup: id → SearchResult/Aggregate for detail navigation
        job_lookup: id → corpus record (Job or IndexEntry)
        generation: Trigger sequence number that produced the snapshot
    """

    query: str = ""
    view_state: ViewState = field(default_factory=IdleState)
    result_count: int = 0
    quick_filters: Tuple[QuickFilter, ...] = ()
    result_lookup: Mapping[str, ResultItem] = field(default_factory=dict)
    job_lookup: Mapping[str, Union[Job, IndexEntry]] = field(default_factory=dict)
    generation: int = 0

    def __post_init__(self):
        # Read-only views so a published snapshot cannot be edited by consumers
        object.__setattr__(self, "result_lookup", _frozen(self.result_lookup))
        object.__setattr__(self, "job_lookup", _frozen(self.job_lookup))


@dataclass
class SessionStats:
    """Rebuild bookkeeping for a session.

    Attributes:
        triggers: Rebuild triggers received (query edits, source changes, manual)
        published: Rebuilds whose snapshot became visible
        discarded: Rebuilds dropped because a newer trigger arrived first
        source_failures: Snapshot reads that failed and were treated as empty
        last_published_generation: Generation of the visible snapshot
        last_published_at: When the visible snapshot was published (UTC)
    """

    triggers: int = 0
    published: int = 0
    discarded: int = 0
    source_failures: int = 0
    last_published_generation: int = 0
    last_published_at: Optional[datetime] = None
