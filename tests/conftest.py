"""Shared fixtures for the job search engine tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from jobsearch.domain.models import DirectoryUser, IndexEntry, Job
from jobsearch.sources import InMemoryDirectory, InMemoryJobCorpus

FIXTURES_DIR = Path(__file__).parent / "fixtures"

D1 = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
D2 = D1 + timedelta(days=4)


@pytest.fixture
def make_job():
    """Factory for jobs with sensible defaults."""

    def _make(job_id="job-1", address="1 Test St", status="Pending", date=D1, **overrides):
        return Job(id=job_id, address=address, status=status, date=date, **overrides)

    return _make


@pytest.fixture
def make_entry():
    """Factory for index entries with sensible defaults."""

    def _make(entry_id="idx-1", address="1 Test St", status="Pending", date=D1, **overrides):
        return IndexEntry(id=entry_id, address=address, status=status, date=date, **overrides)

    return _make


@pytest.fixture
def users():
    """Directory keyed by user id."""
    return {
        "u1": DirectoryUser(id="u1", first_name="Ana", last_name="Ruiz", position="Underground"),
        "u2": DirectoryUser(id="u2", first_name="Ben", last_name="Okafor", position="Ariel"),
    }


@pytest.fixture
def oak_jobs():
    """Two jobs at the same address, spelled differently, created by different users."""
    return [
        Job(id="1", address="10 Oak Ave", status="Pending", date=D1, created_by="u1"),
        Job(id="2", address="10 OAK AVE", status="Done", date=D2, created_by="u2"),
    ]


@pytest.fixture
def oak_sources(oak_jobs, users):
    """In-memory corpus and directory seeded with the oak scenario."""
    return InMemoryJobCorpus(oak_jobs), InMemoryDirectory(users.values())
