"""Query session controller.

A SearchSession owns one mutable query string and the latest published
SessionSnapshot. Query edits and source change notifications are rebuild
triggers. Each trigger takes the next generation number; a rebuild publishes
only if no newer trigger arrived while it ran, so a slow stale rebuild can
never overwrite a fresher one.
"""

import dataclasses
import logging
import threading
from typing import Callable, Dict, List, Mapping, Optional, Tuple
from uuid import uuid4

from jobsearch.aggregation.models import Aggregate
from jobsearch.config.models import SearchSettings
from jobsearch.domain.models import DirectoryUser, IndexEntry, Job
from jobsearch.facets.models import QuickFilter
from jobsearch.logging import get_logger
from jobsearch.logging.context import log_context
from jobsearch.normalization import EntryNormalizer, JobRecord
from jobsearch.scheduler import RebuildScheduler
from jobsearch.sources.base import ChangeNotifier, DirectorySource, JobCorpusSource
from jobsearch.sources.exceptions import SourceError
from jobsearch.utils.timestamps import utc_now

from .builder import SnapshotBuilder
from .models import ResultItem, SessionSnapshot, SessionStats, ViewState

logger = get_logger(__name__, component="session")

SnapshotListener = Callable[[SessionSnapshot], None]


class SearchSession:
    """
    Debounced, cancellable search over a job corpus.

    Without a scheduler every trigger rebuilds synchronously in the calling
    thread. With a RebuildScheduler, rebuilds run on its worker pool after
    the debounce window, and a trigger that arrives first replaces the
    pending rebuild.

    The published snapshot is swapped in one assignment, so readers always
    see a consistent (view state, count, filters, lookups) bundle.
    """

    def __init__(
        self,
        corpus: JobCorpusSource,
        directory: DirectorySource,
        settings: Optional[SearchSettings] = None,
        scheduler: Optional[RebuildScheduler] = None,
        builder: Optional[SnapshotBuilder] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """
        Initialize the session and publish the initial (idle) snapshot.

        Args:
            corpus: Source of jobs and index entries
            directory: Source of creator identities
            settings: Caps and result mode (defaults to SearchSettings())
            scheduler: Debounce scheduler; None rebuilds synchronously
            builder: Snapshot builder (defaults to one built from ``settings``)
            logger_instance: Logger instance (defaults to module logger)
        """
        self.session_id = uuid4().hex[:12]
        self.corpus = corpus
        self.directory = directory
        self.settings = settings or SearchSettings()
        self.scheduler = scheduler
        self.builder = builder or SnapshotBuilder(self.settings)
        self.logger = logger_instance or logger

        # Guards query, generation, snapshot and stats
        self._state_lock = threading.Lock()
        # Serializes publication and listener delivery
        self._publish_lock = threading.RLock()

        self._query = ""
        self._generation = 0
        self._snapshot = SessionSnapshot()
        self._stats = SessionStats()
        self._closed = False
        self._listeners: Dict[str, SnapshotListener] = {}

        self._subscriptions: List[Tuple[ChangeNotifier, str]] = [
            (corpus, corpus.on_change(self._on_corpus_changed)),
            (directory, directory.on_change(self._on_directory_changed)),
        ]

        self.logger.info(
            "Search session started",
            extra={
                "event": "session.started",
                "session_id": self.session_id,
                "debounced": scheduler is not None,
                "aggregate_results": self.settings.aggregate_results,
            },
        )
        self.rebuild_now(reason="initial")

    @classmethod
    def from_settings(
        cls,
        corpus: JobCorpusSource,
        directory: DirectorySource,
        settings: SearchSettings,
    ) -> "SearchSession":
        """Create a session that debounces when ``settings.debounce`` is non-zero."""
        scheduler = None
        if settings.debounce_seconds:
            scheduler = RebuildScheduler(debounce_seconds=settings.debounce_seconds)
        return cls(corpus, directory, settings=settings, scheduler=scheduler)

    # Query input

    @property
    def query(self) -> str:
        with self._state_lock:
            return self._query

    def set_query(self, text: str) -> bool:
        """
        Replace the query text and trigger a rebuild.

        Args:
            text: Query as typed (untrimmed)

        Returns:
            False if the text was unchanged and nothing was triggered
        """
        text = text or ""
        with self._state_lock:
            if text == self._query:
                return False
            self._query = text

        self._trigger("query")
        return True

    # Published state

    @property
    def snapshot(self) -> SessionSnapshot:
        with self._state_lock:
            return self._snapshot

    @property
    def view_state(self) -> ViewState:
        return self.snapshot.view_state

    @property
    def result_count(self) -> int:
        return self.snapshot.result_count

    @property
    def quick_filters(self) -> Tuple[QuickFilter, ...]:
        return self.snapshot.quick_filters

    @property
    def stats(self) -> SessionStats:
        """Copy of the rebuild counters."""
        with self._state_lock:
            return dataclasses.replace(self._stats)

    def resolve(self, result_id: str) -> Optional[ResultItem]:
        """
        Look up a result or aggregate in the latest snapshot.

        Returns:
            SearchResult or Aggregate, None if the id is not published
        """
        return self.snapshot.result_lookup.get(result_id)

    def aggregate(self, aggregate_id: str) -> Optional[Aggregate]:
        """Look up an aggregate by its grouping key."""
        item = self.resolve(aggregate_id)
        return item if isinstance(item, Aggregate) else None

    def job(self, job_id: str) -> Optional[Job]:
        """
        Look up the job behind a result.

        Prefers the full Job from the live corpus. Otherwise falls back to the
        record in the latest snapshot, then to a live index entry; index
        entries are expanded into partial Jobs.

        Args:
            job_id: Job identifier

        Returns:
            Full or partial Job, None if the id is unknown
        """
        live = self._live_record(job_id)
        if isinstance(live, Job):
            return live

        record = self.snapshot.job_lookup.get(job_id)
        if record is None:
            record = live
        if isinstance(record, Job):
            return record
        if isinstance(record, IndexEntry):
            return EntryNormalizer.make_partial_job(record)
        return None

    # Listeners

    def subscribe(self, listener: SnapshotListener) -> str:
        """
        Call ``listener(snapshot)`` after every publication.

        Listeners run in the publishing thread, one publication at a time.

        Returns:
            Handle to pass to ``unsubscribe``
        """
        handle = uuid4().hex
        with self._publish_lock:
            self._listeners[handle] = listener
        return handle

    def unsubscribe(self, handle: str) -> bool:
        with self._publish_lock:
            return self._listeners.pop(handle, None) is not None

    # Rebuilds

    def rebuild_now(self, reason: str = "manual") -> SessionSnapshot:
        """
        Rebuild synchronously, superseding any pending debounced rebuild.

        Returns:
            The snapshot visible after the rebuild
        """
        generation, query = self._next_generation()
        if generation is None:
            return self.snapshot
        if self.scheduler is not None:
            self.scheduler.cancel_pending()
        self._run_rebuild(generation, query, reason)
        return self.snapshot

    def _on_corpus_changed(self) -> None:
        self._trigger("corpus")

    def _on_directory_changed(self) -> None:
        self._trigger("directory")

    def _next_generation(self) -> Tuple[Optional[int], str]:
        with self._state_lock:
            if self._closed:
                return None, self._query
            self._generation += 1
            self._stats.triggers += 1
            return self._generation, self._query

    def _trigger(self, reason: str) -> None:
        generation, query = self._next_generation()
        if generation is None:
            self.logger.debug(
                "Trigger ignored on closed session",
                extra={"event": "session.trigger.ignored", "reason": reason},
            )
            return

        if self.scheduler is None:
            self._run_rebuild(generation, query, reason)
        else:
            self.scheduler.schedule(self._run_rebuild, generation, query, reason)

    def _is_current(self, generation: int) -> bool:
        with self._state_lock:
            return not self._closed and generation == self._generation

    def _run_rebuild(self, generation: int, query: str, reason: str) -> bool:
        """
        Build and publish the snapshot for one trigger.

        Returns:
            True if the snapshot was published, False if it was stale
        """
        with log_context(session_id=self.session_id, generation=generation):
            if not self._is_current(generation):
                self._discard(generation, reason, stage="before_build")
                return False

            records = self._read_corpus()
            users = self._read_directory()
            snapshot = self.builder.build(query, records, users, generation=generation)

            with self._publish_lock:
                with self._state_lock:
                    published = not self._closed and generation == self._generation
                    if published:
                        self._snapshot = snapshot
                        self._stats.published += 1
                        self._stats.last_published_generation = generation
                        self._stats.last_published_at = utc_now()

                if not published:
                    self._discard(generation, reason, stage="before_publish")
                    return False

                self.logger.debug(
                    f"Published {snapshot.view_state.kind} snapshot",
                    extra={
                        "event": "session.rebuild.published",
                        "reason": reason,
                        "view_state": snapshot.view_state.kind,
                        "result_count": snapshot.result_count,
                        "filter_count": len(snapshot.quick_filters),
                    },
                )
                self._notify_listeners(snapshot)
            return True

    def _discard(self, generation: int, reason: str, stage: str) -> None:
        with self._state_lock:
            self._stats.discarded += 1
            latest = self._generation
        self.logger.debug(
            "Discarded stale rebuild",
            extra={
                "event": "session.rebuild.discarded",
                "reason": reason,
                "stage": stage,
                "latest_generation": latest,
            },
        )

    def _notify_listeners(self, snapshot: SessionSnapshot) -> None:
        for listener in list(self._listeners.values()):
            try:
                listener(snapshot)
            except Exception as e:
                self.logger.error(
                    f"Snapshot listener failed: {e}",
                    extra={"event": "session.listener.failed"},
                    exc_info=True,
                )

    # Source reads

    def _read_corpus(self) -> List[JobRecord]:
        try:
            return list(self.corpus.snapshot())
        except SourceError as e:
            self._record_source_failure("corpus", e)
        except Exception as e:
            self._record_source_failure("corpus", e, unexpected=True)
        return []

    def _read_directory(self) -> Mapping[str, DirectoryUser]:
        try:
            return dict(self.directory.snapshot())
        except SourceError as e:
            self._record_source_failure("directory", e)
        except Exception as e:
            self._record_source_failure("directory", e, unexpected=True)
        return {}

    def _record_source_failure(self, kind: str, error: Exception, unexpected: bool = False) -> None:
        with self._state_lock:
            self._stats.source_failures += 1

        extra = {
            "event": f"sources.{kind}.failed",
            "error_type": type(error).__name__,
            "error": str(error),
        }
        if unexpected:
            self.logger.error(
                f"Unexpected error reading {kind}, treating it as empty: {error}",
                extra=extra,
                exc_info=True,
            )
        else:
            self.logger.warning(
                f"Could not read {kind}, treating it as empty: {error}",
                extra=extra,
            )

    def _live_record(self, job_id: str) -> Optional[JobRecord]:
        try:
            records = self.corpus.snapshot()
        except Exception as e:
            self._record_source_failure("corpus", e, unexpected=not isinstance(e, SourceError))
            return None

        found = None
        for record in records:
            if isinstance(record, (Job, IndexEntry)) and record.id == job_id:
                found = EntryNormalizer.prefer_record(found, record)
        return found

    # Lifecycle

    def close(self) -> None:
        """
        Stop reacting to triggers, drop source subscriptions, stop the scheduler.

        Waits for a publication already in progress, so no listener is called
        after ``close`` returns. Rebuilds still running are discarded.
        """
        with self._publish_lock:
            with self._state_lock:
                if self._closed:
                    return
                self._closed = True

        for source, handle in self._subscriptions:
            source.unsubscribe(handle)
        self._subscriptions = []

        if self.scheduler is not None:
            self.scheduler.cancel_pending()
            self.scheduler.shutdown(wait=False)

        stats = self.stats
        self.logger.info(
            "Search session closed",
            extra={
                "event": "session.closed",
                "session_id": self.session_id,
                "published": stats.published,
                "discarded": stats.discarded,
            },
        )

    def __enter__(self) -> "SearchSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
