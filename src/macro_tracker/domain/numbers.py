"""Numeric coercion shared by summation and target resolution."""

import math


def coerce_number(value: object) -> float | None:
    """Return a finite float for numeric-looking values, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def coerce_non_negative_number(value: object) -> float:
    """Return the value as a float, treating missing or invalid input as zero.

    Negative numbers are clamped to zero.
    """
    number = coerce_number(value)
    if number is None:
        return 0.0
    return max(0.0, number)
