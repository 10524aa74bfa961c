"""Exceptions raised by corpus and directory sources."""

from typing import Optional


class SourceError(Exception):
    """Base exception for source failures.

    Attributes:
        message: Human-readable error message
        source_name: Name of the source that failed
    """

    def __init__(self, message: str, source_name: Optional[str] = None):
        self.message = message
        self.source_name = source_name
        super().__init__(self._format())

    def _format(self) -> str:
        if self.source_name:
            return f"[{self.source_name}] {self.message}"
        return self.message


class SourceUnavailableError(SourceError):
    """Raised when a source cannot produce a snapshot right now."""

    pass
