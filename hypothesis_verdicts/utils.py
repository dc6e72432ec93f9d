"""
Validation and formatting helpers shared by the hypothesis test cores.

Nothing in this module depends on KNIME, so the cores stay importable and
testable on their own.
"""

import math

import numpy as np
import pandas as pd

from .errors import InvalidInputError


def validate_alpha(alpha) -> float:
    """
    Check that the significance level lies strictly between 0 and 1.

    Args:
        alpha: Significance level (probability of rejecting a true null hypothesis)

    Returns:
        The significance level as a float

    Raises:
        InvalidInputError: If alpha is not a finite number in (0, 1)
    """
    try:
        value = float(alpha)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Significance level must be numeric, got {alpha!r}.") from exc

    if not math.isfinite(value) or not 0.0 < value < 1.0:
        raise InvalidInputError(f"Significance level must be between 0.0 and 1.0 (exclusive), got {value}.")
    return value


def to_finite_array(values, name: str, min_size: int = 1) -> np.ndarray:
    """
    Copy ``values`` into a 1-D float array and reject missing or non-finite entries.

    Args:
        values: Array-like of numbers
        name: Human-readable name used in error messages
        min_size: Minimum number of entries required

    Returns:
        New 1-D float array

    Raises:
        InvalidInputError: If the values are not numeric, contain NaN/Inf,
            or there are fewer than ``min_size`` of them
    """
    try:
        array = np.array(values, dtype=float).ravel()
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must contain only numeric values.") from exc

    if array.size < min_size:
        raise InvalidInputError(f"{name} must contain at least {min_size} value(s), found {array.size}.")

    n_bad = int(np.count_nonzero(~np.isfinite(array)))
    if n_bad:
        raise InvalidInputError(f"{name} contains {n_bad} missing or non-finite value(s).")

    return array


def to_frequency_array(values, name: str) -> np.ndarray:
    """Like :func:`to_finite_array` but additionally requires non-negative counts."""
    array = to_finite_array(values, name)
    negative = np.flatnonzero(array < 0)
    if negative.size:
        raise InvalidInputError(f"{name} must be non-negative; negative count at position(s) {negative.tolist()}.")
    return array


def format_p_value(p):
    """
    Format p-value to avoid scientific notation (e.g., E-22) in output.

    Example:
        >>> format_p_value(0.0456)
        '0.0456'
        >>> format_p_value(1.23e-22)
        '< 0.001'
        >>> format_p_value(None)
        '?'
    """
    if p is None or pd.isna(p):
        return "?"
    if p < 0.001:
        return "< 0.001"
    return f"{p:.4f}"


__all__ = ["validate_alpha", "to_finite_array", "to_frequency_array", "format_p_value"]
