"""
Value validators.

Small, single-purpose checks used by the configuration layer, the
termination policy and the CLI. Each returns the normalised value or raises
ValidationError naming the offending field.
"""

import math
from typing import Any, Callable, List, Optional, TypeVar

from .exceptions import ValidationError

N = TypeVar('N', int, float)


def _convert(value: Any, kind: Callable[[Any], N], noun: str, field_name: str) -> N:
    # bool is an int subclass; True as a timeout or PID is always a mistake
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be {noun}, got {value!r}", field_name, value)
    try:
        converted = kind(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be {noun}, got {value!r}", field_name, value)
    if isinstance(converted, float) and math.isnan(converted):
        raise ValidationError(f"{field_name} must be {noun}, got NaN", field_name, value)
    return converted


def _check_range(number: N, value: Any, min_value: N, max_value: Optional[N], field_name: str) -> N:
    if number < min_value:
        raise ValidationError(f"{field_name} must be >= {min_value}, got {number}", field_name, value)
    if max_value is not None and number > max_value:
        raise ValidationError(f"{field_name} must be <= {max_value}, got {number}", field_name, value)
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate an integer within ``[min_value, max_value]``.

    Strings holding an integer are accepted; booleans are not.
    """
    number = _convert(value, int, "an integer", field_name)
    return _check_range(number, value, min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate a number of seconds (or any float) within ``[min_value, max_value]``.

    Integers are widened to float. Booleans and NaN are rejected.
    """
    number = _convert(value, float, "a number", field_name)
    return _check_range(number, value, min_value, max_value, field_name)


def validate_pid(value: Any, field_name: str = "pid") -> int:
    """Validate a process identifier (a strictly positive integer)."""
    return validate_positive_integer(value, min_value=1, field_name=field_name)


def validate_enum_choice(
    value: Any,
    choices: List[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that ``value`` is one of ``choices``.

    Returns:
        The matching entry of ``choices``, so a case-insensitive match on
        "debug" returns "DEBUG" when that is how the choice is spelled.
    """
    text = str(value)
    if case_sensitive:
        matches = [choice for choice in choices if choice == text]
    else:
        matches = [choice for choice in choices if choice.lower() == text.lower()]
    if not matches:
        raise ValidationError(
            f"{field_name} must be one of {choices}, got {value!r}",
            field_name=field_name,
            value=value,
        )
    return matches[0]
