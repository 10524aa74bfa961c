"""Query session: debounced rebuilds publishing immutable snapshots.

This package provides:
- SearchSession: owns the query and publishes SessionSnapshots
- SnapshotBuilder: the pure rebuild algorithm
- View models (IdleState, EmptyState, ResultsState, SearchResult)
- Presentation helpers for the command line
"""

from .builder import SnapshotBuilder
from .controller import SearchSession, SnapshotListener
from .models import (
    AddressComponents,
    CreatorSummary,
    EmptyState,
    IdleState,
    ResultItem,
    ResultsState,
    SearchResult,
    SessionSnapshot,
    SessionStats,
    ViewState,
)
from .presenter import ViewStateRenderer, format_view_state, item_to_dict, snapshot_to_dict

__all__ = [
    "SearchSession",
    "SnapshotBuilder",
    "SnapshotListener",
    "AddressComponents",
    "CreatorSummary",
    "SearchResult",
    "ResultItem",
    "IdleState",
    "EmptyState",
    "ResultsState",
    "ViewState",
    "SessionSnapshot",
    "SessionStats",
    "ViewStateRenderer",
    "format_view_state",
    "snapshot_to_dict",
    "item_to_dict",
]
