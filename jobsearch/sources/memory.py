"""In-memory corpus and directory sources.

Used by the CLI (loaded from a fixture file), by tests, and by hosts that
mirror a remote store into memory and push updates through ``upsert`` /
``remove`` / ``replace_all``.
"""

import threading
from typing import Dict, Iterable, List, Optional

from jobsearch.domain.models import DirectoryUser
from jobsearch.normalization import EntryNormalizer, JobRecord

from .base import DirectorySource, JobCorpusSource


def _index_records(records: Iterable[JobRecord]) -> Dict[str, JobRecord]:
    indexed: Dict[str, JobRecord] = {}
    for record in records:
        indexed[record.id] = EntryNormalizer.prefer_record(indexed.get(record.id), record)
    return indexed


class InMemoryJobCorpus(JobCorpusSource):
    """Mutable job corpus that notifies subscribers on every change.

    Holds one record per id. An IndexEntry never replaces a full Job with the
    same id; ``remove`` the Job first to downgrade it.
    """

    def __init__(self, records: Optional[Iterable[JobRecord]] = None, name: str = "memory-corpus"):
        super().__init__(name=name)
        self._lock = threading.Lock()
        self._records: Dict[str, JobRecord] = _index_records(records or ())

    def snapshot(self) -> List[JobRecord]:
        with self._lock:
            return list(self._records.values())

    def get(self, job_id: str) -> Optional[JobRecord]:
        with self._lock:
            return self._records.get(job_id)

    def replace_all(self, records: Iterable[JobRecord]) -> None:
        """Swap the whole corpus (a full listener snapshot)."""
        replacement = _index_records(records)
        with self._lock:
            self._records = replacement
        self.notify_changed()

    def upsert(self, record: JobRecord) -> None:
        """Add or replace one record."""
        with self._lock:
            current = self._records.get(record.id)
            self._records[record.id] = EntryNormalizer.prefer_record(current, record)
        self.notify_changed()

    def remove(self, job_id: str) -> bool:
        """Delete a record; subscribers are only notified if it existed."""
        with self._lock:
            removed = self._records.pop(job_id, None) is not None
        if removed:
            self.notify_changed()
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryDirectory(DirectorySource):
    """Mutable user directory that notifies subscribers on every change."""

    def __init__(self, users: Optional[Iterable[DirectoryUser]] = None, name: str = "memory-directory"):
        super().__init__(name=name)
        self._lock = threading.Lock()
        self._users: Dict[str, DirectoryUser] = {user.id: user for user in users or ()}

    def snapshot(self) -> Dict[str, DirectoryUser]:
        with self._lock:
            return dict(self._users)

    def replace_all(self, users: Iterable[DirectoryUser]) -> None:
        replacement = {user.id: user for user in users}
        with self._lock:
            self._users = replacement
        self.notify_changed()

    def upsert(self, user: DirectoryUser) -> None:
        with self._lock:
            self._users[user.id] = user
        self.notify_changed()

    def remove(self, user_id: str) -> bool:
        with self._lock:
            removed = self._users.pop(user_id, None) is not None
        if removed:
            self.notify_changed()
        return removed
