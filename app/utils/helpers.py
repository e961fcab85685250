"""
Utility helper functions for safe handling of provider payloads.
"""
from typing import Any


def safe_lower(value: Any) -> str:
    """Lowercase and trim a value, treating None as an empty string."""
    if value is None:
        return ""
    return str(value).strip().lower()


def safe_strip(value: Any) -> str:
    """
    Safely strip whitespace from a value, handling None.

    Args:
        value: Any value to strip

    Returns:
        Stripped string or empty string if None
    """
    if value is None:
        return ""
    return str(value).strip()


def safe_int(value: Any, default: int = 0) -> int:
    """
    Safely convert value to int, handling None and invalid values.

    Args:
        value: Any value to convert
        default: Default int if conversion fails

    Returns:
        Integer or default
    """
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def safe_ratio(numerator: Any, denominator: Any) -> float:
    """Divide two counts, returning 0.0 when the denominator is 0 or missing."""
    denominator = safe_int(denominator)
    if denominator <= 0:
        return 0.0
    return safe_int(numerator) / denominator
