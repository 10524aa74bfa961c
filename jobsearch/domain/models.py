"""Core domain models for jobs, index entries, and directory users.

This module defines the data structures used throughout the application:
- Job: full job record owned by the external job store
- IndexEntry: lightweight, immutable projection of a Job used for search
- DirectoryUser: crew member a creator id resolves to

Field names are snake_case in Python; camelCase aliases (``jobNumber``,
``createdBy``, ``materialsUsed``...) are accepted so documents exported from
the job store validate without remapping.
"""

from datetime import datetime
from typing import Callable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from jobsearch.utils.timestamps import ensure_utc


class Job(BaseModel):
    """Full job record as stored by the crew's job store.

    The search engine only reads jobs. Status, date, and the free-text fields
    may change between search sessions; every rebuild re-reads them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Stable unique job identifier")
    address: str = Field(..., description="Full physical job address")
    date: datetime = Field(..., description="Scheduling/tracking date (UTC)")
    status: str = Field(..., description='Free text, e.g. "Pending", "Done"')
    assigned_to: Optional[str] = Field(None, description="User id currently owning the job")
    created_by: Optional[str] = Field(None, description="User id of the creator")
    notes: Optional[str] = Field(None, description="Additional text notes")
    job_number: Optional[str] = Field(None, description="Reference/timesheet job number")
    assignments: Optional[str] = Field(None, description="Dotted assignment code")
    materials_used: Optional[str] = Field(None, description="Materials installed")
    photos: List[str] = Field(default_factory=list, description="Image URLs")
    participants: Optional[List[str]] = Field(None, description="User ids that can see the job")
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    hours: float = Field(0.0, ge=0.0, description="Hours spent on this job")
    nid_footage: Optional[str] = Field(None, description="NID footage")
    can_footage: Optional[str] = Field(None, description="CAN footage")

    @field_validator("id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        """Strip whitespace from the identifier."""
        if not v or not v.strip():
            raise ValueError("id cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("date")
    @classmethod
    def date_utc(cls, v: datetime) -> datetime:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)

    @property
    def short_address(self) -> str:
        """First comma-separated component of the address, trimmed."""
        first = self.address.split(",", 1)[0].strip()
        return first or self.address


class IndexEntry(BaseModel):
    """Immutable search projection of a Job.

    Carries exactly the fields needed for matching and display. The global
    search index may hold entries whose full Job is not available locally;
    see ``EntryNormalizer.make_partial_job`` for the reverse mapping.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    address: str = ""
    job_number: Optional[str] = None
    status: str = ""
    created_by: Optional[str] = None
    date: Optional[datetime] = None
    notes: Optional[str] = None
    assignments: Optional[str] = None
    materials_used: Optional[str] = None
    nid_footage: Optional[str] = None
    can_footage: Optional[str] = None

    @field_validator("id")
    @classmethod
    def strip_id(cls, v: str) -> str:
        """Strip whitespace from the identifier."""
        if not v or not v.strip():
            raise ValueError("id cannot be empty or whitespace-only")
        return v.strip()

    @field_validator("date")
    @classmethod
    def date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Ensure datetime is timezone-aware and in UTC."""
        return ensure_utc(v)


class DirectoryUser(BaseModel):
    """Crew member record from the user directory."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    first_name: str = ""
    last_name: str = ""
    email: Optional[str] = None
    position: Optional[str] = Field(None, description='Role, e.g. "Ariel", "Underground"')

    @property
    def display_name(self) -> str:
        """First and last name joined by a space, trimmed."""
        return f"{self.first_name} {self.last_name}".strip()


# Maps a creator id to its directory record; a plain ``dict.get`` qualifies.
CreatorResolver = Callable[[str], Optional[DirectoryUser]]


def resolve_creator(resolver: CreatorResolver, user_id: Optional[str]) -> Optional[DirectoryUser]:
    """Resolve a creator id, treating missing and blank ids as unresolvable."""
    if not user_id or not user_id.strip():
        return None
    return resolver(user_id)
