"""Unit tests for the search session.

Tests the SearchSession and SnapshotBuilder for:
- Idle / Empty / Results state transitions
- Aggregated and flat result modes
- Recents, lookups, and detail navigation (resolve, job, aggregate)
- Quick filters independent of the query
- Rebuilds on corpus and directory changes
- Degrading to empty input when a source fails
- Stale rebuild suppression and debounced rebuilds
"""

import threading
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from jobsearch.aggregation import Aggregate
from jobsearch.config.models import SearchSettings
from jobsearch.domain.models import DirectoryUser, IndexEntry, Job
from jobsearch.facets import QuickFilterKind
from jobsearch.session import (
    EmptyState,
    IdleState,
    ResultsState,
    SearchResult,
    SearchSession,
    SnapshotBuilder,
)
from jobsearch.sources import (
    InMemoryDirectory,
    InMemoryJobCorpus,
    JobCorpusSource,
    SourceUnavailableError,
)
from jobsearch.utils.timestamps import EPOCH

BASE = datetime(2025, 3, 1, tzinfo=timezone.utc)


class FailingCorpus(JobCorpusSource):
    """Corpus whose snapshot always fails."""

    def __init__(self, error):
        super().__init__(name="failing-corpus")
        self.error = error

    def snapshot(self):
        raise self.error


class ListCorpus(JobCorpusSource):
    """Corpus that returns its records exactly as given, duplicates included."""

    def __init__(self, records):
        super().__init__(name="list-corpus")
        self.records = list(records)

    def snapshot(self):
        return list(self.records)


class FailingDirectory(InMemoryDirectory):
    """Directory whose snapshot always fails."""

    def snapshot(self):
        raise RuntimeError("directory offline")


class GatedDirectory(InMemoryDirectory):
    """Directory that blocks one armed snapshot call until released."""

    def __init__(self, users):
        super().__init__(users)
        self.armed = False
        self.entered = threading.Event()
        self.release = threading.Event()

    def snapshot(self):
        if self.armed:
            self.armed = False
            self.entered.set()
            self.release.wait(timeout=5)
        return super().snapshot()


@pytest.fixture
def session(oak_sources):
    corpus, directory = oak_sources
    search_session = SearchSession(corpus, directory)
    yield search_session
    search_session.close()


def _view_fields(snapshot):
    return (snapshot.view_state, snapshot.result_count, snapshot.quick_filters, dict(snapshot.result_lookup))


class TestInitialState:
    """Tests for the snapshot published on construction."""

    def test_starts_idle_with_recents(self, session):
        """Test the idle scenario: recents newest first, count 0."""
        view_state = session.view_state

        assert isinstance(view_state, IdleState)
        assert [r.id for r in view_state.recents] == ["2", "1"]
        assert session.result_count == 0
        assert session.query == ""

    def test_recents_are_resolvable(self, session):
        result = session.resolve("2")

        assert isinstance(result, SearchResult)
        assert result.address.primary == "10 OAK AVE"
        assert result.creator.name == "Ben Okafor"
        assert result.creator.role == "Ariel"

    def test_initial_rebuild_is_published(self, session):
        stats = session.stats

        assert stats.published == 1
        assert stats.discarded == 0
        assert session.snapshot.generation == stats.last_published_generation

    def test_subscribes_to_sources(self, oak_sources):
        corpus, directory = oak_sources

        with SearchSession(corpus, directory):
            assert corpus.subscriber_count == 1
            assert directory.subscriber_count == 1

        assert corpus.subscriber_count == 0
        assert directory.subscriber_count == 0


class TestQueryTransitions:
    """Tests for set_query and the resulting view states."""

    def test_oak_scenario(self, session):
        """Test one aggregate with newest-first digests and contributors."""
        session.set_query("oak")

        view_state = session.view_state
        assert isinstance(view_state, ResultsState)
        assert view_state.query == "oak"
        assert len(view_state.items) == 1

        aggregate = view_state.items[0]
        assert isinstance(aggregate, Aggregate)
        assert aggregate.address == "10 OAK AVE"
        assert [job.id for job in aggregate.jobs] == ["2", "1"]
        assert [c.display_name for c in aggregate.contributors] == ["Ben Okafor", "Ana Ruiz"]
        assert session.result_count == 2
        assert view_state.count == 2

    def test_no_match_scenario(self, session):
        """Test that a failed query is Empty and leaves quick filters alone."""
        idle_filters = session.quick_filters

        session.set_query("zzz-no-match")

        assert session.view_state == EmptyState(query="zzz-no-match")
        assert session.result_count == 0
        assert session.quick_filters == idle_filters
        assert len(idle_filters) == 4

    @pytest.mark.parametrize("query", ["", " ", "   \t  "])
    def test_blank_query_is_idle(self, session, query):
        session.set_query("oak")
        session.set_query(query)

        assert isinstance(session.view_state, IdleState)
        assert session.result_count == 0

    def test_query_is_trimmed_in_state(self, session):
        session.set_query("  OAK  ")

        assert session.view_state.query == "OAK"
        assert session.snapshot.query == "  OAK  "

    def test_unchanged_query_does_not_rebuild(self, session):
        assert session.set_query("oak") is True
        triggers = session.stats.triggers

        assert session.set_query("oak") is False
        assert session.stats.triggers == triggers

    def test_creator_name_matches(self, session):
        session.set_query("ana ruiz")

        assert session.result_count == 1
        assert [job.id for job in session.view_state.items[0].jobs] == ["1"]

    def test_rebuild_is_idempotent(self, session):
        session.set_query("oak")
        first = session.rebuild_now()
        second = session.rebuild_now()

        assert _view_fields(first) == _view_fields(second)
        assert second.generation > first.generation

    def test_quick_filters_cover_full_corpus(self, session):
        session.set_query("oak")

        filters = {(f.kind, f.value): f.count for f in session.quick_filters}

        assert filters == {
            (QuickFilterKind.STATUS, "Done"): 1,
            (QuickFilterKind.STATUS, "Pending"): 1,
            (QuickFilterKind.CREATOR, "Ana Ruiz"): 1,
            (QuickFilterKind.CREATOR, "Ben Okafor"): 1,
        }

    def test_quick_filter_query_round_trip(self, session):
        """Test that applying a filter's query selects the jobs it counted."""
        status_filter = next(f for f in session.quick_filters if f.value == "Pending")

        session.set_query(status_filter.query)

        assert session.result_count == status_filter.count


class TestLookups:
    """Tests for resolve, aggregate, and job."""

    def test_resolve_aggregate_and_member(self, session):
        session.set_query("oak")
        aggregate = session.view_state.items[0]

        assert session.resolve(aggregate.id) is aggregate
        assert session.aggregate(aggregate.id) is aggregate
        assert isinstance(session.resolve("1"), SearchResult)

    def test_resolve_not_found(self, session):
        session.set_query("oak")

        assert session.resolve("missing") is None
        assert session.aggregate("missing") is None
        assert session.aggregate("1") is None

    def test_resolve_after_job_removed(self, session, oak_sources):
        corpus, _ = oak_sources
        session.set_query("oak")

        corpus.remove("2")

        assert session.resolve("2") is None
        assert session.result_count == 1

    def test_job_prefers_live_full_job(self, session, oak_sources):
        corpus, _ = oak_sources

        job = session.job("2")

        assert isinstance(job, Job)
        assert job is corpus.get("2")

    def test_job_from_index_entry_is_partial(self, users):
        entry = IndexEntry(id="idx-9", address="14 Cedar Ln", status="Pending")
        corpus = InMemoryJobCorpus([entry])

        with SearchSession(corpus, InMemoryDirectory(users.values())) as session:
            job = session.job("idx-9")

        assert job.id == "idx-9"
        assert job.date == EPOCH
        assert job.photos == []
        assert job.hours == 0
        assert job.notes == ""

    def test_job_not_found(self, session):
        assert session.job("missing") is None

    @pytest.mark.parametrize("full_first", [True, False])
    def test_job_prefers_full_job_over_index_entry_with_same_id(self, users, full_first):
        """Test that a full Job wins over an IndexEntry sharing its id, in either order."""
        full = Job(
            id="1", address="10 Oak Ave", date=BASE, status="Done", hours=6.5, photos=["a.jpg"]
        )
        entry = IndexEntry(id="1", address="10 Oak Ave", status="Pending")
        records = [full, entry] if full_first else [entry, full]

        with SearchSession(ListCorpus(records), InMemoryDirectory(users.values())) as session:
            job = session.job("1")
            session.set_query("done")
            count = session.result_count

        assert job is full
        assert job.hours == 6.5
        assert job.photos == ["a.jpg"]
        assert count == 1


class TestResultModes:
    """Tests for recents caps and flat results."""

    def test_flat_results(self, oak_sources):
        corpus, directory = oak_sources
        settings = SearchSettings(aggregate_results=False)

        with SearchSession(corpus, directory, settings=settings) as session:
            session.set_query("oak")
            items = session.view_state.items

        assert [item.id for item in items] == ["2", "1"]
        assert all(isinstance(item, SearchResult) for item in items)
        assert session.result_count == 2

    def test_recents_limit(self, make_job, users):
        jobs = [make_job(job_id=f"j{i}", date=BASE + timedelta(days=i)) for i in range(20)]
        corpus = InMemoryJobCorpus(jobs)

        with SearchSession(corpus, InMemoryDirectory(users.values())) as session:
            recents = session.view_state.recents

        assert len(recents) == 12
        assert recents[0].id == "j19"
        assert recents[-1].id == "j8"

    def test_custom_recents_limit(self, make_job, users):
        jobs = [make_job(job_id=f"j{i}", date=BASE + timedelta(days=i)) for i in range(5)]
        settings = SearchSettings(recents_limit=2)

        with SearchSession(InMemoryJobCorpus(jobs), InMemoryDirectory(), settings=settings) as session:
            assert [r.id for r in session.view_state.recents] == ["j4", "j3"]
            assert set(session.snapshot.result_lookup) == {"j4", "j3"}

    def test_quick_filter_cap(self, make_job):
        users = [DirectoryUser(id=f"u{i}", first_name=f"User{i}", last_name="Crew") for i in range(6)]
        jobs = [
            make_job(job_id=f"j{i}", status=f"Status {i % 6}", created_by=f"u{i % 6}", date=BASE + timedelta(hours=i))
            for i in range(30)
        ]

        with SearchSession(InMemoryJobCorpus(jobs), InMemoryDirectory(users)) as session:
            filters = session.quick_filters

        assert len(filters) == 8
        assert [f.kind for f in filters] == [QuickFilterKind.STATUS] * 4 + [QuickFilterKind.CREATOR] * 4


class TestSourceChanges:
    """Tests for rebuilds triggered by sources."""

    def test_corpus_change_rebuilds(self, session, oak_sources, make_job):
        corpus, _ = oak_sources
        session.set_query("oak")

        corpus.upsert(make_job(job_id="3", address="12 Oak Ave", date=BASE + timedelta(days=10)))

        assert session.result_count == 3
        assert session.view_state.items[0].address == "12 Oak Ave"

    def test_directory_change_rebuilds(self, session, oak_sources):
        _, directory = oak_sources
        session.set_query("oak")

        directory.upsert(DirectoryUser(id="u2", first_name="Benjamin", last_name="Okafor"))

        names = [c.display_name for c in session.view_state.items[0].contributors]
        assert names == ["Benjamin Okafor", "Ana Ruiz"]

    def test_missing_creator_is_omitted(self, session, oak_sources):
        _, directory = oak_sources
        directory.remove("u1")

        assert session.resolve("1").creator is None
        session.set_query("ana")
        assert isinstance(session.view_state, EmptyState)

    def test_closed_session_ignores_changes(self, oak_sources, make_job):
        corpus, directory = oak_sources
        session = SearchSession(corpus, directory)
        session.close()
        before = session.snapshot

        corpus.upsert(make_job(job_id="3"))
        session.set_query("oak")

        assert session.snapshot is before


class TestSourceFailures:
    """Tests for degrading to empty input."""

    def test_corpus_failure_is_empty_corpus(self, users):
        mock_logger = Mock()
        corpus = FailingCorpus(SourceUnavailableError("offline", source_name="remote"))

        session = SearchSession(corpus, InMemoryDirectory(users.values()), logger_instance=mock_logger)
        session.set_query("oak")

        assert isinstance(session.view_state, EmptyState)
        assert session.quick_filters == ()
        assert session.stats.source_failures == 2
        events = [c.kwargs["extra"]["event"] for c in mock_logger.warning.call_args_list]
        assert "sources.corpus.failed" in events
        session.close()

    def test_directory_failure_keeps_matching(self, oak_jobs):
        mock_logger = Mock()

        session = SearchSession(
            InMemoryJobCorpus(oak_jobs), FailingDirectory(), logger_instance=mock_logger
        )
        session.set_query("oak")

        assert session.result_count == 2
        assert session.view_state.items[0].contributors == ()
        assert mock_logger.error.call_args.kwargs["extra"]["event"] == "sources.directory.failed"
        session.close()

    def test_job_lookup_with_failing_corpus(self, users):
        session = SearchSession(FailingCorpus(SourceUnavailableError("offline")), InMemoryDirectory())

        assert session.job("1") is None
        session.close()


class TestListeners:
    """Tests for publish notifications."""

    def test_listener_receives_snapshots(self, session):
        received = []
        session.subscribe(received.append)

        session.set_query("oak")
        session.set_query("zzz")

        assert [s.query for s in received] == ["oak", "zzz"]
        assert received[-1] is session.snapshot

    def test_unsubscribe(self, session):
        received = []
        handle = session.subscribe(received.append)

        assert session.unsubscribe(handle) is True
        assert session.unsubscribe(handle) is False
        session.set_query("oak")

        assert received == []

    def test_failing_listener_does_not_block_publication(self, session):
        received = []
        session.subscribe(Mock(side_effect=RuntimeError("boom")))
        session.subscribe(received.append)

        session.set_query("oak")

        assert isinstance(session.view_state, ResultsState)
        assert len(received) == 1


class TestConcurrency:
    """Tests for stale rebuild suppression and debouncing."""

    def test_stale_rebuild_is_discarded(self, make_job, users):
        """Test that a slow rebuild for "a" never overwrites the rebuild for "ab"."""
        jobs = [
            make_job(job_id="1", address="10 Oak Ave", date=BASE),
            make_job(job_id="2", address="3 Abbey Rd", date=BASE + timedelta(days=1)),
        ]
        directory = GatedDirectory(users.values())
        session = SearchSession(InMemoryJobCorpus(jobs), directory)
        published = []
        session.subscribe(published.append)

        directory.armed = True
        slow = threading.Thread(target=session.set_query, args=("a",))
        slow.start()
        assert directory.entered.wait(timeout=5)

        session.set_query("ab")
        directory.release.set()
        slow.join(timeout=5)

        assert session.view_state.query == "ab"
        assert session.result_count == 1
        assert [s.query for s in published] == ["ab"]
        assert session.stats.discarded == 1
        session.close()

    def test_rebuild_in_flight_at_close_is_not_published(self, make_job, users):
        """Test that a rebuild still running when close() is called never publishes."""
        directory = GatedDirectory(users.values())
        session = SearchSession(InMemoryJobCorpus([make_job(job_id="1", address="10 Oak Ave")]), directory)
        before = session.snapshot
        published = []
        session.subscribe(published.append)

        directory.armed = True
        slow = threading.Thread(target=session.set_query, args=("oak",))
        slow.start()
        assert directory.entered.wait(timeout=5)

        session.close()
        directory.release.set()
        slow.join(timeout=5)

        assert published == []
        assert session.snapshot is before
        assert session.stats.discarded == 1

    def test_debounced_session_publishes_latest_query(self, oak_sources):
        corpus, directory = oak_sources
        settings = SearchSettings(debounce="100ms")
        session = SearchSession.from_settings(corpus, directory, settings)
        published = []
        done = threading.Event()

        def on_publish(snapshot):
            published.append(snapshot)
            if snapshot.query == "oak":
                done.set()

        session.subscribe(on_publish)
        try:
            assert session.scheduler is not None
            for text in ("o", "oa", "oak"):
                session.set_query(text)

            assert done.wait(timeout=5)
            assert [s.query for s in published] == ["oak"]
            assert session.result_count == 2
        finally:
            session.close()

        assert not session.scheduler.is_running()

    def test_zero_debounce_is_synchronous(self, oak_sources):
        corpus, directory = oak_sources

        session = SearchSession.from_settings(corpus, directory, SearchSettings(debounce="0ms"))
        session.set_query("oak")

        assert session.scheduler is None
        assert session.result_count == 2
        session.close()


class TestSnapshotBuilder:
    """Tests for SnapshotBuilder directly."""

    def test_build_is_pure(self, oak_jobs, users):
        builder = SnapshotBuilder()

        first = builder.build("oak", oak_jobs, users, generation=1)
        second = builder.build("oak", oak_jobs, users, generation=1)

        assert first == second

    def test_job_lookup_holds_every_record(self, oak_jobs, users):
        entry = IndexEntry(id="idx-1", address="77 Birch Rd")

        snapshot = SnapshotBuilder().build("zzz", [*oak_jobs, entry], users)

        assert set(snapshot.job_lookup) == {"1", "2", "idx-1"}
        assert snapshot.job_lookup["idx-1"] is entry

    def test_job_lookup_keeps_full_job_over_later_entry(self, oak_jobs, users):
        entry = IndexEntry(id="1", address="10 Oak Ave", status="Other")

        snapshot = SnapshotBuilder().build("", [*oak_jobs, entry], users)

        assert snapshot.job_lookup["1"] is oak_jobs[0]
        assert [r.status for r in snapshot.view_state.recents if r.id == "1"] == ["Pending"]

    def test_snapshot_lookups_are_read_only(self, oak_jobs, users):
        snapshot = SnapshotBuilder().build("", oak_jobs, users)

        with pytest.raises(TypeError):
            snapshot.result_lookup["x"] = None
