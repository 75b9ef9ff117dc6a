"""Core utility functions for the application"""

import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union


def utcnow() -> datetime:
    """
    Current UTC time as a naive datetime.

    SQLite drops tzinfo on write, so all stored timestamps are naive UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def round2(value: Union[int, float]) -> float:
    """
    Round a number to 2 decimal places, half away from zero.

    Args:
        value: The number to round

    Returns:
        float: The rounded value

    Raises:
        ValueError: If the value is NaN or infinite
    """
    if not math.isfinite(value):
        raise ValueError(f"Cannot round non-finite value {value!r}")
    try:
        return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        # Beyond Decimal precision a float has no fractional digits left
        return float(value)


def is_number(value: Any) -> bool:
    """True for finite int/float values, excluding bools."""
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    return math.isfinite(value)


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a form value to a float.

    Accepts numbers and numeric strings. Returns None for anything else
    (including bools, blanks, NaN and infinities).
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def is_yes(value: Any) -> bool:
    """Interpret a Yes/No form flag. Booleans from AI output are accepted too."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "y", "true")
    return False


def is_blank(value: Any) -> bool:
    """True when a form value is missing or an empty/"Not Provided" string."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == "" or value.strip().lower() == "not provided"
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False
