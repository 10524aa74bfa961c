"""Unit tests for the matching engine.

Tests the JobSearchMatcher for:
- Tokenization (whitespace runs, lowercase)
- Haystack construction over every searchable field
- AND semantics across tokens
- Case and whitespace insensitivity
- Creator name and position matching
- Short date matching
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from jobsearch.domain.models import DirectoryUser, IndexEntry
from jobsearch.matching import JobSearchMatcher, tokenize


@pytest.fixture
def matcher():
    return JobSearchMatcher()


@pytest.fixture
def entry():
    """An entry with every searchable field populated."""
    return IndexEntry(
        id="job-1",
        address=" 123 Main St, Springfield ",
        job_number=" 42A ",
        status="Needs Permit",
        created_by="u1",
        date=datetime(2025, 3, 4, 15, 0, tzinfo=timezone.utc),
        notes="Bore under driveway",
        assignments="1.4.2",
        materials_used="Pedestal, 200ft conduit",
        nid_footage="150",
        can_footage="320",
    )


@pytest.fixture
def creator():
    return DirectoryUser(id="u1", first_name="Ana", last_name="Ruiz", position="Underground")


class TestTokenize:
    """Tests for tokenize."""

    def test_splits_and_lowercases(self):
        assert tokenize("Main ST") == ["main", "st"]

    def test_collapses_whitespace_runs(self):
        assert tokenize("  main \t  st\n ") == ["main", "st"]

    @pytest.mark.parametrize("query", ["", "   ", "\t\n", None])
    def test_empty_queries(self, query):
        assert tokenize(query) == []


class TestBuildHaystack:
    """Tests for JobSearchMatcher.build_haystack."""

    def test_includes_all_fields_normalized(self, entry, creator):
        haystack = JobSearchMatcher.build_haystack(entry, creator)

        for expected in (
            "123 main st, springfield",
            "42a",
            "needs permit",
            "bore under driveway",
            "1.4.2",
            "pedestal, 200ft conduit",
            "150",
            "320",
            "3/4/25",
            "ana ruiz",
            "underground",
        ):
            assert expected in haystack

    def test_skips_empty_fields(self):
        entry = IndexEntry(id="x", address="10 Oak Ave", status="   ", notes="")

        assert JobSearchMatcher.build_haystack(entry) == "10 oak ave"

    def test_creator_without_position(self, entry):
        creator = DirectoryUser(id="u1", first_name="Ben", last_name="Okafor")

        haystack = JobSearchMatcher.build_haystack(entry, creator)

        assert haystack.endswith("ben okafor")


class TestMatches:
    """Tests for JobSearchMatcher.matches."""

    def test_single_token_substring(self, matcher, entry):
        assert matcher.matches(entry, ["mai"])
        assert matcher.matches(entry, ["driveway"])

    def test_all_tokens_required(self, matcher, entry):
        assert matcher.matches(entry, ["main", "permit"])
        assert not matcher.matches(entry, ["main", "aerial"])

    @pytest.mark.parametrize(
        "tokens",
        [["main"], ["permit"], ["aerial"], ["zzz"], ["42a", "bore"], ["ruiz"]],
    )
    def test_and_semantics(self, matcher, entry, creator, tokens):
        """Test that matching a token pair equals matching each token."""
        pair = tokens + ["springfield"]

        assert matcher.matches(entry, pair, creator) == (
            matcher.matches(entry, tokens, creator)
            and matcher.matches(entry, ["springfield"], creator)
        )

    def test_case_and_whitespace_insensitive(self, matcher, entry):
        results = {
            matcher.matches(entry, tokenize(query))
            for query in ("MAIN st", "main ST", "  main   st  ")
        }
        assert results == {True}

    def test_empty_tokens_match_everything(self, matcher, entry):
        assert matcher.matches(entry, [])

    def test_creator_fields_only_with_creator(self, matcher, entry, creator):
        assert matcher.matches(entry, ["ana"], creator)
        assert matcher.matches(entry, ["underground"], creator)
        assert not matcher.matches(entry, ["ana"])

    def test_short_date_matches(self, matcher, entry):
        assert matcher.matches(entry, ["3/4/25"])
        assert not matcher.matches(entry, ["03/04/25"])

    def test_undated_entry(self, matcher):
        entry = IndexEntry(id="x", address="10 Oak Ave")

        assert matcher.matches(entry, ["oak"])
        assert not matcher.matches(entry, ["/"])


class TestMatchesQuery:
    """Tests for JobSearchMatcher.matches_query."""

    def test_tokenizes_query(self, matcher, entry):
        assert matcher.matches_query(entry, "  MAIN  permit ")

    def test_empty_query_matches_nothing(self, matcher, entry):
        assert not matcher.matches_query(entry, "")
        assert not matcher.matches_query(entry, "   ")


class TestFilter:
    """Tests for JobSearchMatcher.filter."""

    def test_filter_preserves_order_and_resolves_creators(self, entry, creator):
        other = IndexEntry(id="job-2", address="9 Pine Rd", created_by="u9")
        third = IndexEntry(id="job-3", address="1 Ruiz Way")
        mock_logger = Mock()
        matcher = JobSearchMatcher(logger_instance=mock_logger)

        matched = matcher.filter([third, other, entry], ["ruiz"], {"u1": creator}.get)

        assert [e.id for e in matched] == ["job-3", "job-1"]
        extra = mock_logger.debug.call_args.kwargs["extra"]
        assert extra["event"] == "matching.filter.completed"
        assert extra["matched_count"] == 2
        assert extra["candidate_count"] == 3
