"""
Value validation functions.

Validators for job parameters and configuration values. Each one returns the
normalised value or raises ValidationError carrying the offending field name.
Booleans are never accepted where a number is expected, even though Python
treats them as integers.
"""

import codecs
from pathlib import Path
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

from .exceptions import ValidationError

N = TypeVar("N", int, float)


def _validate_number(
    value: Any,
    convert: Callable[[Any], N],
    kind: str,
    min_value: N,
    max_value: Optional[N],
    field_name: str,
) -> N:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be {kind}, got {value!r}", field_name=field_name, value=value)
    try:
        number = convert(value)
    except (TypeError, ValueError):
        raise ValidationError(
            f"{field_name} must be {kind}, got {value!r}", field_name=field_name, value=value
        ) from None

    if number < min_value or (max_value is not None and number > max_value):
        upper = "" if max_value is None else f" and <= {max_value}"
        raise ValidationError(
            f"{field_name} must be >= {min_value}{upper}, got {number}",
            field_name=field_name,
            value=value,
        )
    return number


def validate_positive_integer(
    value: Any,
    min_value: int = 1,
    max_value: Optional[int] = None,
    field_name: str = "value"
) -> int:
    """
    Validate an integer in ``[min_value, max_value]``.

    Strings holding an integer are accepted and converted.

    Raises:
        ValidationError: If the value is not an integer or out of range
    """
    return _validate_number(value, int, "an integer", min_value, max_value, field_name)


def validate_positive_float(
    value: Any,
    min_value: float = 0.0,
    max_value: Optional[float] = None,
    field_name: str = "value"
) -> float:
    """
    Validate a number of seconds, or any other float, in ``[min_value, max_value]``.

    Raises:
        ValidationError: If the value is not a number or out of range
    """
    return _validate_number(value, float, "a number", min_value, max_value, field_name)


def validate_directory(path: Union[str, Path], field_name: str = "directory") -> Path:
    """Return ``path`` as a Path if it names an existing directory."""
    dir_path = Path(path)
    if not dir_path.is_dir():
        raise ValidationError(
            f"{field_name} '{dir_path.absolute()}' does not exist or is not a directory",
            field_name=field_name,
            value=str(path),
        )
    return dir_path


def validate_non_empty_string(value: Any, field_name: str = "value") -> str:
    """Validate that a value is a string with non-whitespace content."""
    if isinstance(value, str) and value.strip():
        return value
    raise ValidationError(f"{field_name} must be a non-empty string", field_name=field_name, value=value)


def validate_encoding(value: Any, field_name: str = "encoding") -> str:
    """Validate that a value names a codec known to Python."""
    encoding = validate_non_empty_string(value, field_name=field_name)
    try:
        codecs.lookup(encoding)
    except LookupError:
        raise ValidationError(
            f"{field_name} is not a known text encoding: {encoding}", field_name=field_name, value=value
        ) from None
    return encoding


def validate_enum_choice(
    value: Any,
    choices: Sequence[str],
    field_name: str = "value",
    case_sensitive: bool = True
) -> str:
    """
    Validate that a value is one of ``choices``.

    Returns:
        The matching entry of ``choices``, so a case-insensitive match comes
        back in its canonical spelling

    Raises:
        ValidationError: If nothing in ``choices`` matches
    """
    text = str(value)
    for choice in choices:
        if choice == text or (not case_sensitive and choice.lower() == text.lower()):
            return choice
    raise ValidationError(f"{field_name} must be one of {list(choices)}, got {value}", field_name=field_name, value=value)
