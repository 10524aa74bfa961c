"""Quick filters: frequency-ranked status and creator shortcuts."""

from .models import QuickFilter, QuickFilterKind
from .service import FrequencyTable, QuickFilterBuilder

__all__ = [
    "QuickFilterBuilder",
    "FrequencyTable",
    "QuickFilter",
    "QuickFilterKind",
]
