"""Tests for logging context propagation."""

import pytest

from jobsearch.logging.context import get_log_context, log_context


def test_empty_context():
    """Test that context starts empty."""
    assert get_log_context() == {}


def test_context_manager_sets_and_restores():
    with log_context(session_id="a1b2", generation=3):
        assert get_log_context() == {"session_id": "a1b2", "generation": 3}

    assert get_log_context() == {}


def test_context_manager_nested():
    """Test that inner scopes add and override keys, then restore the outer fields."""
    with log_context(session_id="a1b2", generation=1):
        with log_context(generation=2, reason="query"):
            assert get_log_context() == {"session_id": "a1b2", "generation": 2, "reason": "query"}

        assert get_log_context() == {"session_id": "a1b2", "generation": 1}

    assert get_log_context() == {}


def test_context_manager_exception():
    """Test that context is restored even when exception occurs."""
    with pytest.raises(ValueError):
        with log_context(session_id="a1b2"):
            raise ValueError("rebuild failed")

    assert get_log_context() == {}


def test_context_manager_is_reusable():
    scope = log_context(generation=5)

    with scope:
        assert get_log_context() == {"generation": 5}
    with scope:
        assert get_log_context() == {"generation": 5}

    assert get_log_context() == {}


def test_get_returns_copy():
    """Test that get_log_context returns a copy, not the actual dict."""
    with log_context(session_id="a1b2"):
        context = get_log_context()
        context["generation"] = 99

        assert get_log_context() == {"session_id": "a1b2"}
