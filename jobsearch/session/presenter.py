"""Rendering of published snapshots for the command line.

``snapshot_to_dict`` produces a JSON-safe dictionary; ``format_view_state``
renders that dictionary as plain text through a Jinja2 template.
"""

from typing import Any, Dict, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from jobsearch.aggregation.models import Aggregate
from jobsearch.facets.models import QuickFilter
from jobsearch.logging import get_logger
from jobsearch.utils.timestamps import format_short_date, format_timestamp

from .models import IdleState, ResultItem, ResultsState, SearchResult, SessionSnapshot

logger = get_logger(__name__, component="presenter")


def _result_to_dict(result: SearchResult) -> Dict[str, Any]:
    creator = None
    if result.creator is not None:
        creator = {"id": result.creator.id, "name": result.creator.name, "role": result.creator.role}
    return {
        "type": "job",
        "id": result.id,
        "address": {"primary": result.address.primary, "secondary": result.address.secondary},
        "job_number": result.job_number,
        "status": result.status,
        "date": format_timestamp(result.date) or None,
        "short_date": format_short_date(result.date),
        "creator": creator,
    }


def _aggregate_to_dict(aggregate: Aggregate) -> Dict[str, Any]:
    return {
        "type": "aggregate",
        "id": aggregate.id,
        "address": aggregate.address,
        "job_number": aggregate.job_number,
        "result_count": aggregate.result_count,
        "jobs": [
            {
                "id": digest.id,
                "status": digest.status,
                "date": format_timestamp(digest.date) or None,
                "short_date": format_short_date(digest.date),
                "created_by": digest.created_by,
            }
            for digest in aggregate.jobs
        ],
        "contributors": [
            {"id": c.id, "name": c.display_name, "position": c.position}
            for c in aggregate.contributors
        ],
    }


def item_to_dict(item: ResultItem) -> Dict[str, Any]:
    """Convert a SearchResult or Aggregate into a JSON-safe dictionary."""
    if isinstance(item, Aggregate):
        return _aggregate_to_dict(item)
    return _result_to_dict(item)


def _filter_to_dict(quick_filter: QuickFilter) -> Dict[str, Any]:
    return {
        "id": quick_filter.id,
        "kind": quick_filter.kind.value,
        "value": quick_filter.value,
        "count": quick_filter.count,
        "query": quick_filter.query,
    }


def snapshot_to_dict(snapshot: SessionSnapshot) -> Dict[str, Any]:
    """Convert a snapshot into a JSON-safe dictionary.

    Args:
        snapshot: Published session snapshot

    Returns:
        Dictionary with keys:
        - query: Raw query text
        - state: "idle", "empty" or "results"
        - result_count: Matching job count
        - items: Recents (idle) or results, in display order
        - quick_filters: Filter suggestions over the full corpus
        - generation: Rebuild generation that produced the snapshot
    """
    view_state = snapshot.view_state
    if isinstance(view_state, IdleState):
        items = view_state.recents
    elif isinstance(view_state, ResultsState):
        items = view_state.items
    else:
        items = ()

    return {
        "query": snapshot.query,
        "state": view_state.kind,
        "result_count": snapshot.result_count,
        "items": [item_to_dict(item) for item in items],
        "quick_filters": [_filter_to_dict(f) for f in snapshot.quick_filters],
        "generation": snapshot.generation,
    }


class ViewStateRenderer:
    """Renders snapshots as plain text.

    The template is loaded once from the ``jobsearch.session`` package and
    reused for every render.
    """

    def __init__(self, template_name: str = "view_state.txt.j2"):
        """Initialize the renderer.

        Args:
            template_name: Template file within jobsearch/session/templates
        """
        self.template_name = template_name
        self.env = Environment(
            loader=PackageLoader("jobsearch.session", "templates"),
            autoescape=False,  # Terminal output, not HTML
            undefined=StrictUndefined,
            keep_trailing_newline=False,
        )

    def render(self, snapshot: SessionSnapshot, show_filters: bool = True) -> str:
        """Render a snapshot.

        Args:
            snapshot: Snapshot to render
            show_filters: Append the quick filter line

        Returns:
            Rendered text without a trailing newline

        Raises:
            TemplateError: If the template is missing or fails to render
        """
        context = snapshot_to_dict(snapshot)
        if not show_filters:
            context["quick_filters"] = []
        context["query"] = context["query"].strip()

        try:
            return self.env.get_template(self.template_name).render(**context).rstrip()
        except TemplateError as e:
            logger.error(
                f"Failed to render {self.template_name}: {e}",
                extra={"event": "presenter.render.failed", "template": self.template_name},
                exc_info=True,
            )
            raise


_default_renderer: Optional[ViewStateRenderer] = None


def format_view_state(snapshot: SessionSnapshot, show_filters: bool = True) -> str:
    """Render a snapshot with the shared default renderer."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = ViewStateRenderer()
    return _default_renderer.render(snapshot, show_filters=show_filters)
