"""Free-text matching of search queries against index entries.

This module implements the matching logic that:
1. Splits a query into lowercase whitespace-delimited tokens
2. Builds a haystack from every searchable field of an entry
3. Requires every token to appear in the haystack (AND across tokens)

Matching is substring based, not word based: "main" matches "Mainline".
"""

import logging
from typing import List, Optional, Sequence

from jobsearch.domain.models import CreatorResolver, DirectoryUser, IndexEntry, resolve_creator
from jobsearch.logging import get_logger
from jobsearch.utils.text import normalize_field
from jobsearch.utils.timestamps import format_short_date

logger = get_logger(__name__, component="matching")

# Text fields searched on every entry, in haystack order
SEARCHABLE_FIELDS = (
    "address",
    "job_number",
    "status",
    "notes",
    "assignments",
    "materials_used",
    "nid_footage",
    "can_footage",
)


def tokenize(query: Optional[str]) -> List[str]:
    """Split a query into lowercase tokens.

    Args:
        query: Raw query text as typed

    Returns:
        Tokens in query order; empty for empty or whitespace-only input

    Example:
        >>> tokenize("  Main   ST ")
        ['main', 'st']
    """
    if not query:
        return []
    return [piece.lower() for piece in query.split() if piece]


class JobSearchMatcher:
    """Evaluates index entries against tokenized queries.

    Stateless apart from its logger; one instance is shared by every
    rebuild of a session.
    """

    def __init__(self, logger_instance: Optional[logging.Logger] = None):
        """Initialize JobSearchMatcher.

        Args:
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.logger = logger_instance or logger

    @staticmethod
    def build_haystack(entry: IndexEntry, creator: Optional[DirectoryUser] = None) -> str:
        """Concatenate the normalized searchable text of an entry.

        Each field is trimmed and lowercased; fields that are absent or empty
        after trimming contribute nothing. The entry date is included as a
        short date (``11/4/25``) and, when the creator resolves, the creator's
        display name and position are appended.

        Args:
            entry: Entry to describe
            creator: Resolved creator of the entry, if any

        Returns:
            Space-separated haystack text
        """
        parts = [normalize_field(getattr(entry, name)) for name in SEARCHABLE_FIELDS]
        parts.append(format_short_date(entry.date))

        if creator is not None:
            parts.append(normalize_field(creator.display_name))
            parts.append(normalize_field(creator.position))

        return " ".join(part for part in parts if part)

    def matches(
        self,
        entry: IndexEntry,
        tokens: Sequence[str],
        creator: Optional[DirectoryUser] = None,
    ) -> bool:
        """Check whether every token occurs in the entry's haystack.

        An empty token list matches everything. Only the recents listing
        relies on that; the session never filters with an empty query.

        Args:
            entry: Entry to test
            tokens: Lowercase tokens from ``tokenize``
            creator: Resolved creator of the entry, if any

        Returns:
            True if all tokens are substrings of the haystack
        """
        if not tokens:
            return True

        haystack = self.build_haystack(entry, creator)
        return all(token in haystack for token in tokens)

    def matches_query(
        self,
        entry: IndexEntry,
        query: str,
        creator: Optional[DirectoryUser] = None,
    ) -> bool:
        """Tokenize ``query`` and match it; an empty query matches nothing."""
        tokens = tokenize(query)
        if not tokens:
            return False
        return self.matches(entry, tokens, creator)

    def filter(
        self,
        entries: Sequence[IndexEntry],
        tokens: Sequence[str],
        resolver: CreatorResolver,
    ) -> List[IndexEntry]:
        """Return the entries matching ``tokens``, preserving input order.

        Args:
            entries: Candidate entries
            tokens: Lowercase query tokens
            resolver: CreatorResolver used to look up each entry's creator

        Returns:
            Matching entries
        """
        matched = [
            entry
            for entry in entries
            if self.matches(entry, tokens, resolve_creator(resolver, entry.created_by))
        ]

        self.logger.debug(
            f"Matched {len(matched)} of {len(entries)} entries",
            extra={
                "event": "matching.filter.completed",
                "token_count": len(tokens),
                "candidate_count": len(entries),
                "matched_count": len(matched),
            },
        )
        return matched
