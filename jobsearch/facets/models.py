"""Data models for quick filters."""

from dataclasses import dataclass
from enum import Enum


class QuickFilterKind(str, Enum):
    """Field a quick filter was counted over."""

    STATUS = "status"
    CREATOR = "creator"


@dataclass(frozen=True)
class QuickFilter:
    """One-tap query suggestion derived from corpus frequencies.

    Attributes:
        kind: Whether the value is a status or a creator name
        value: Display value, as spelled on the newest counted entry
        count: Number of entries carrying the value
    """

    kind: QuickFilterKind
    value: str
    count: int

    @property
    def id(self) -> str:
        """Stable identity: kind plus lowercase value."""
        return f"{self.kind.value}:{self.value.lower()}"

    @property
    def query(self) -> str:
        """Query text equivalent to selecting this filter."""
        return self.value
