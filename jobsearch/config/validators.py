"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

from .duration import DurationParseError, parse_duration


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for settings that are valid but probably unintended.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    search = config_dict.get("search", {})
    if not isinstance(search, dict):
        return warning_messages

    debounce = search.get("debounce")
    if isinstance(debounce, str):
        try:
            if parse_duration(debounce) > 1.0:
                warning_messages.append(
                    f"Long debounce ({debounce}) will make search feel unresponsive"
                )
        except DurationParseError:
            # Reported properly by model validation
            pass

    recents_limit = search.get("recents_limit")
    if isinstance(recents_limit, int) and recents_limit > 100:
        warning_messages.append(
            f"Large recents_limit ({recents_limit}) lists most of the corpus before any query"
        )

    per_kind = search.get("quick_filters_per_kind", 4)
    total = search.get("quick_filters_total", 8)
    if isinstance(per_kind, int) and isinstance(total, int) and total < per_kind:
        warning_messages.append(
            f"quick_filters_total ({total}) is below quick_filters_per_kind ({per_kind}); "
            "creator filters may be crowded out"
        )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
