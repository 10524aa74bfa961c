"""Custom exceptions for configuration management."""

from typing import List, Optional


class ConfigurationError(Exception):
    """
    Exception raised when configuration or corpus fixture loading fails.

    Stores multiple validation errors and formats them with helpful
    suggestions.
    """

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        """
        Initialize ConfigurationError.

        Args:
            message: Primary error message
            errors: List of specific validation errors
            suggestions: List of helpful suggestions to fix the errors
        """
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]

        if self.errors:
            parts.append("\nValidation Errors:")
            for i, error in enumerate(self.errors, 1):
                parts.append(f"  {i}. {error}")

        if self.suggestions:
            parts.append("\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"  - {suggestion}")

        return "\n".join(parts)


def format_validation_errors(raw_errors: List[dict]) -> List[str]:
    """Turn pydantic ``ValidationError.errors()`` entries into readable lines.

    Args:
        raw_errors: Output of ``ValidationError.errors()``

    Returns:
        One message per error, prefixed with the field path
    """
    errors = []
    for error in raw_errors:
        field_path = " -> ".join(str(loc) for loc in error["loc"])
        error_type = error["type"]

        if error_type == "missing":
            errors.append(f"Missing required field: {field_path}")
        elif error_type in ("string_type", "int_type", "bool_type", "list_type", "float_type"):
            expected_type = error_type.replace("_type", "")
            errors.append(
                f"Invalid type for '{field_path}': expected {expected_type}, got {error.get('input')!r}"
            )
        else:
            errors.append(f"{field_path}: {error['msg']}")
    return errors
