"""Duration parsing utilities for configuration."""

import re


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed."""

    pass


_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(duration_str: str) -> float:
    """
    Parse a duration string to seconds.

    Supports both human-readable formats and ISO-8601 durations:
    - Human-readable: "200ms", "1.5s", "2m", combinations like "1s500ms"
    - ISO-8601: "PT0.2S", "PT2M"

    Zero is a valid duration ("0ms" disables debouncing).

    Args:
        duration_str: Duration string to parse

    Returns:
        Duration in seconds

    Raises:
        DurationParseError: If the duration string is invalid

    Examples:
        >>> parse_duration("200ms")
        0.2
        >>> parse_duration("PT0.5S")
        0.5
    """
    duration_str = duration_str.strip()

    if not duration_str:
        raise DurationParseError("Duration string cannot be empty")

    if duration_str.upper().startswith("P"):
        return _parse_iso8601_duration(duration_str)

    return _parse_human_readable_duration(duration_str)


def _parse_iso8601_duration(duration_str: str) -> float:
    """
    Parse ISO-8601 duration format (time part only).

    Supports: PT[n]H[n]M[n]S with fractional seconds.
    Examples: PT0.2S, PT1M30S

    Raises:
        DurationParseError: If the format is invalid
    """
    duration_str = duration_str.upper()

    pattern = r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?$"
    match = re.match(pattern, duration_str)

    if not match or duration_str == "PT":
        raise DurationParseError(
            f"Invalid ISO-8601 duration format: '{duration_str}'. "
            "Expected format like 'PT0.2S', 'PT1S', or 'PT1M30S'"
        )

    hours, minutes, seconds = match.groups()

    total_seconds = 0.0
    if hours:
        total_seconds += int(hours) * 3600
    if minutes:
        total_seconds += int(minutes) * 60
    if seconds:
        total_seconds += float(seconds)

    return total_seconds


def _parse_human_readable_duration(duration_str: str) -> float:
    """
    Parse human-readable duration format.

    Supports: 200ms, 1.5s, 2m, 1h and combinations like 1s500ms.

    Raises:
        DurationParseError: If the format is invalid
    """
    # "ms" must come before "m" and "s" in the alternation
    pattern = r"(\d+(?:\.\d+)?)\s*(ms|s|m|h)"
    matches = re.findall(pattern, duration_str.lower())

    if not matches:
        raise DurationParseError(
            f"Invalid duration format: '{duration_str}'. "
            "Expected format like '200ms', '1s', '2m', or combinations like '1s500ms'"
        )

    # Reject trailing garbage the regex skipped over
    parsed_str = "".join(f"{num}{unit}" for num, unit in matches)
    cleaned_input = re.sub(r"\s+", "", duration_str.lower())
    if parsed_str != cleaned_input:
        raise DurationParseError(
            f"Invalid characters in duration: '{duration_str}'. "
            "Use only digits and units: ms, s, m, h"
        )

    total_seconds = sum(float(num) * _UNIT_SECONDS[unit] for num, unit in matches)
    return round(total_seconds, 6)


def validate_duration_range(
    duration_seconds: float,
    min_seconds: float = 0.0,
    max_seconds: float = 5.0,
) -> None:
    """
    Validate that a duration is within acceptable range.

    Args:
        duration_seconds: Duration in seconds to validate
        min_seconds: Minimum allowed duration (default: 0)
        max_seconds: Maximum allowed duration (default: 5 seconds)

    Raises:
        DurationParseError: If duration is outside the valid range
    """
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"Duration too short: {_seconds_to_human_readable(duration_seconds)}. "
            f"Minimum is {_seconds_to_human_readable(min_seconds)}."
        )

    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"Duration too long: {_seconds_to_human_readable(duration_seconds)}. "
            f"Maximum is {_seconds_to_human_readable(max_seconds)}."
        )


def _seconds_to_human_readable(seconds: float) -> str:
    """Convert seconds to a short human-readable string (e.g. "200 ms", "2 seconds")."""
    if seconds < 1:
        return f"{int(round(seconds * 1000))} ms"
    if seconds < 60:
        whole = int(seconds) if float(seconds).is_integer() else seconds
        return f"{whole} second{'s' if whole != 1 else ''}"
    minutes = int(seconds // 60)
    return f"{minutes} minute{'s' if minutes != 1 else ''}"
