"""Loading a job corpus and user directory from a YAML or JSON file.

Expected layout (camelCase keys from the job store are accepted too)::

    jobs:            # full job records
      - id: job-1
        address: 10 Oak Ave, Springfield
        date: 2025-11-04T12:00:00Z
        status: Pending
        createdBy: u1
    index:           # lightweight entries from the global search index
      - id: job-9
        address: 4 Elm St
        status: Done
    users:
      - id: u1
        firstName: Taylor
        lastName: Foreman
        position: Underground
"""

import json
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from pathlib import Path
from typing import Any, Dict, List, Type

import yaml
from pydantic import BaseModel, ValidationError

from jobsearch.config.exceptions import ConfigurationError, format_validation_errors
from jobsearch.domain.models import DirectoryUser, IndexEntry, Job
from jobsearch.logging import get_logger
from jobsearch.normalization import JobRecord
from jobsearch.utils.timestamps import parse_iso_datetime

from .memory import InMemoryDirectory, InMemoryJobCorpus

logger = get_logger(__name__, component="sources")


@dataclass
class CorpusFixture:
    """Records and users read from a corpus file."""

    records: List[JobRecord] = field(default_factory=list)
    users: List[DirectoryUser] = field(default_factory=list)

    def to_sources(self) -> tuple:
        """Build in-memory sources seeded with this fixture.

        Returns:
            Tuple of (InMemoryJobCorpus, InMemoryDirectory)
        """
        return InMemoryJobCorpus(self.records), InMemoryDirectory(self.users)


def load_corpus_file(path: Path) -> CorpusFixture:
    """Read and validate a corpus file.

    Args:
        path: .yaml/.yml or .json file

    Returns:
        CorpusFixture with full jobs first, then index entries, then users

    Raises:
        ConfigurationError: If the file is missing, unparsable, or invalid
    """
    data = _read_document(path)

    errors: List[str] = []
    jobs = _validate_section(data, "jobs", Job, errors)
    entries = _validate_section(data, "index", IndexEntry, errors)
    users = _validate_section(data, "users", DirectoryUser, errors)

    if errors:
        raise ConfigurationError(
            f"Corpus file {path} contains invalid records",
            errors=errors,
            suggestions=[
                "Every job needs id, address, date and status",
                "Every index entry and user needs an id",
            ],
        )

    fixture = CorpusFixture(records=[*jobs, *entries], users=users)
    logger.info(
        f"Loaded corpus from {path}",
        extra={
            "event": "sources.fixture.loaded",
            "path": str(path),
            "job_count": len(jobs),
            "index_entry_count": len(entries),
            "user_count": len(users),
        },
    )
    return fixture


def _read_document(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigurationError(
            f"Corpus file not found: {path}",
            suggestions=["Set corpus.path in config.yaml or JOB_SEARCH_CORPUS"],
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(
            f"Failed to parse corpus file {path}: {e}",
            suggestions=["Check the file syntax"],
        )
    except OSError as e:
        raise ConfigurationError(f"Failed to read corpus file {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Corpus file {path} must contain a mapping with jobs/index/users lists"
        )
    return data


def _validate_section(
    data: Dict[str, Any],
    section: str,
    model: Type[BaseModel],
    errors: List[str],
) -> list:
    """Validate every item of one section, collecting errors instead of stopping."""
    items = data.get(section) or []
    if not isinstance(items, list):
        errors.append(f"'{section}' must be a list")
        return []

    validated = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            errors.append(f"{section} -> {idx}: expected a mapping")
            continue
        try:
            validated.append(model.model_validate(_coerce_dates(item)))
        except ValidationError as e:
            errors.extend(f"{section} -> {idx} -> {msg}" for msg in format_validation_errors(e.errors()))
    return validated


def _coerce_dates(item: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize the ``date`` value YAML may hand over as a date or string."""
    value = item.get("date")
    if isinstance(value, datetime) or value is None:
        return item

    coerced = dict(item)
    if isinstance(value, date):
        coerced["date"] = datetime.combine(value, time.min, tzinfo=timezone.utc)
    elif isinstance(value, str):
        parsed = parse_iso_datetime(value)
        if parsed is not None:
            coerced["date"] = parsed
    return coerced
