"""
Validation functions for configuration values and command-line input.
"""

import re
from typing import Any, Iterable, List, Optional

from .exceptions import ValidationError

# Characters never accepted in a trace or report filename.
_UNSAFE_FILENAME = re.compile(r"[<>|\x00-\x1f\x7f]")


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate that a value is an integer within bounds.

    Args:
        value: Value to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive), None for no limit
        field_name: Name of the field being validated

    Returns:
        Validated integer value

    Raises:
        ValidationError: If validation fails
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    try:
        int_value = int(value)
    except (ValueError, TypeError):
        raise ValidationError(
            f"{field_name} must be a valid integer, got {value}",
            field_name=field_name,
            value=value
        )
    if int_value < min_value:
        raise ValidationError(
            f"{field_name} must be >= {min_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    if max_value is not None and int_value > max_value:
        raise ValidationError(
            f"{field_name} must be <= {max_value}, got {int_value}",
            field_name=field_name,
            value=value
        )
    return int_value


def validate_filename(filename: str, field_name: str = "filename") -> str:
    """
    Reject filenames that look like options or carry control characters.

    Raises:
        ValidationError: If the name is empty, starts with '-' or holds
            control characters or any of '<>|'.
    """
    if not filename:
        raise ValidationError(f"{field_name} must not be empty",
                              field_name=field_name, value=filename)
    if filename.startswith("-"):
        raise ValidationError(
            f"{field_name} must not start with '-': {filename}",
            field_name=field_name,
            value=filename
        )
    if _UNSAFE_FILENAME.search(filename):
        raise ValidationError(
            f"{field_name} contains invalid characters: {filename!r}",
            field_name=field_name,
            value=filename
        )
    return filename


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of the allowed choices.

    Args:
        value: Value to validate
        choices: List of allowed choices
        field_name: Name of the field being validated
        case_sensitive: Whether the comparison should be case-sensitive

    Returns:
        Validated choice, in the spelling used by ``choices``

    Raises:
        ValidationError: If value is not in choices
    """
    str_value = str(value)

    if case_sensitive:
        if str_value not in choices:
            raise ValidationError(
                f"{field_name} must be one of {choices}, got {value}",
                field_name=field_name,
                value=value
            )
        return str_value

    lower_choices = [choice.lower() for choice in choices]
    lower_value = str_value.lower()
    if lower_value not in lower_choices:
        raise ValidationError(
            f"{field_name} must be one of {choices}, got {value}",
            field_name=field_name,
            value=value
        )
    return choices[lower_choices.index(lower_value)]


def validate_display_flags(
    values: Iterable[str],
    choices: List[str],
    field_name: str = "display"
) -> List[str]:
    """
    Validate a list of display selections, keeping their first-seen order.

    Raises:
        ValidationError: If the list is empty or holds an unknown entry
    """
    if isinstance(values, str):
        values = [values]
    result: List[str] = []
    for value in values:
        choice = validate_enum_choice(value, choices, field_name=field_name,
                                      case_sensitive=False)
        if choice not in result:
            result.append(choice)
    if not result:
        raise ValidationError(f"{field_name} must select at least one of {choices}",
                              field_name=field_name, value=values)
    return result
