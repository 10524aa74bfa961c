"""Text helpers shared by matching, aggregation, and quick filters."""

from typing import Optional, Tuple


def normalize_field(value: Optional[str]) -> str:
    """Trim and lowercase a field value.

    Args:
        value: Raw field value (may be None)

    Returns:
        Normalized text, empty string for None or whitespace-only input

    Example:
        >>> normalize_field("  123 MAIN St ")
        '123 main st'
    """
    if not value:
        return ""
    return value.strip().lower()


def clean_optional(value: Optional[str]) -> Optional[str]:
    """Trim a value, mapping empty results to None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def split_address(address: str) -> Tuple[str, Optional[str]]:
    """Split an address into its first component and the remainder.

    The first comma-separated component is the street line shown as the
    result title; whatever follows (city, state, zip) becomes the secondary
    line.

    Args:
        address: Full address text

    Returns:
        Tuple of (primary, secondary). Secondary is None when the address
        has no comma or nothing meaningful follows it.

    Example:
        >>> split_address("10 Oak Ave, Springfield, IL")
        ('10 Oak Ave', 'Springfield, IL')
    """
    primary, sep, rest = address.partition(",")
    primary = primary.strip()
    if not sep:
        return primary, None

    components = [part.strip() for part in rest.split(",") if part.strip()]
    secondary = ", ".join(components) if components else None
    return primary or address.strip(), secondary


def casefold_key(value: Optional[str]) -> str:
    """Case-insensitive sort key used for address and name ordering."""
    return (value or "").casefold()
