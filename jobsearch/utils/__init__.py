"""Utility functions for time handling and text normalization."""

from .text import casefold_key, clean_optional, normalize_field, split_address
from .timestamps import (
    EPOCH,
    ensure_utc,
    format_short_date,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    # Timestamps
    "EPOCH",
    "utc_now",
    "ensure_utc",
    "parse_iso_datetime",
    "format_timestamp",
    "format_short_date",
    # Text
    "normalize_field",
    "clean_optional",
    "split_address",
    "casefold_key",
]
