"""Per-rebuild fields for structured logging.

``SearchSession`` wraps each rebuild in ``log_context(session_id=..., generation=...)``;
``ContextualFilter`` merges the active fields into every record emitted inside
that scope. Backed by a ContextVar, so rebuilds running concurrently on
scheduler worker threads keep their own fields.
"""

from contextvars import ContextVar, Token
from typing import Any, Dict, Optional

_rebuild_fields: ContextVar[Dict[str, Any]] = ContextVar("log_context", default={})


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields active in the current scope."""
    return dict(_rebuild_fields.get())


class log_context:
    """Context manager that layers fields over the enclosing scope's fields.

    Inner scopes override keys of outer ones; leaving a scope restores the
    previous fields even when the body raises.

    Example:
        >>> with log_context(session_id="a1b2", generation=3):
        ...     logger.info("Rebuild started")  # includes session_id and generation
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._token: Optional[Token] = None

    def __enter__(self) -> "log_context":
        self._token = _rebuild_fields.set({**_rebuild_fields.get(), **self.fields})
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if self._token is not None:
            _rebuild_fields.reset(self._token)
            self._token = None
        return False
