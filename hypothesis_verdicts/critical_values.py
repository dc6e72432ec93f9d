"""
Critical-value sources for the F and chi-squared reference distributions.

Both tests take the critical value from an injected lookup so they never
depend on a particular table:

- ``FCriticalLookup(df1, df2, alpha) -> float``
- ``ChiSquaredCriticalLookup(df, alpha) -> float``

Each returns the upper-tail critical value ``c`` with ``P(X > c) = alpha``.
Two families of lookups are provided: exact quantiles from ``scipy.stats``
and printed-table style lookups (:class:`FCriticalTable`,
:class:`ChiSquaredCriticalTable`) that answer only for the degrees of
freedom they hold and interpolate across significance levels.
"""

import math
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence, Tuple

import numpy as np
from scipy import stats

from .errors import UnsupportedDegreesOfFreedomError
from .utils import validate_alpha

FCriticalLookup = Callable[[float, float, float], float]
ChiSquaredCriticalLookup = Callable[[float, float], float]

# Upper-tail levels found in common printed tables, ascending.
STANDARD_LEVELS: Tuple[float, ...] = (0.001, 0.005, 0.01, 0.025, 0.05, 0.10)

CRITICAL_POLICIES = ("interpolate", "nearest")


def _check_degrees_of_freedom(**dofs: float) -> None:
    for name, value in dofs.items():
        if value is None or not math.isfinite(value) or value <= 0:
            raise UnsupportedDegreesOfFreedomError(f"Degrees of freedom {name}={value} must be a positive finite number.")


def f_critical_value(df1: float, df2: float, alpha: float) -> float:
    """
    Exact upper-tail critical value of the F (Fisher-Snedecor) distribution.

    Args:
        df1: Numerator degrees of freedom
        df2: Denominator degrees of freedom
        alpha: Upper-tail probability

    Returns:
        ``f`` such that ``P(F(df1, df2) > f) = alpha``
    """
    alpha = validate_alpha(alpha)
    _check_degrees_of_freedom(df1=df1, df2=df2)
    return float(stats.f.isf(alpha, df1, df2))


def chi_squared_critical_value(df: float, alpha: float) -> float:
    """Exact upper-tail critical value ``x`` with ``P(Chi2(df) > x) = alpha``."""
    alpha = validate_alpha(alpha)
    _check_degrees_of_freedom(df=df)
    return float(stats.chi2.isf(alpha, df))


def interpolate_critical_value(
    levels: np.ndarray, crits: np.ndarray, alpha: float, policy: str = "interpolate"
) -> float:
    """
    Return the critical value at alpha from a row of tabulated values.

    If alpha is not one of the tabulated levels:
      - 'interpolate': linear interpolation between the neighbouring levels
      - 'nearest': value of the nearest tabulated level

    Alpha outside the tabulated range cannot be answered; a wider table is needed.
    """
    if policy not in CRITICAL_POLICIES:
        raise ValueError(f"Unknown critical-value policy '{policy}'. Expected one of {CRITICAL_POLICIES}.")

    levels = np.asarray(levels, dtype=float)
    crits = np.asarray(crits, dtype=float)
    order = np.argsort(levels)
    levels, crits = levels[order], crits[order]

    exact = np.flatnonzero(np.isclose(levels, alpha, rtol=0.0, atol=1e-12))
    if exact.size:
        return float(crits[exact[0]])

    if alpha < levels[0] or alpha > levels[-1]:
        raise UnsupportedDegreesOfFreedomError(
            f"Significance {alpha:g} is outside the tabulated range [{levels[0]:g}, {levels[-1]:g}]."
        )

    if policy == "nearest":
        idx = int(np.argmin(np.abs(levels - alpha)))
        return float(crits[idx])

    idx_hi = int(np.searchsorted(levels, alpha, side="left"))
    idx_lo = idx_hi - 1
    a0, a1 = levels[idx_lo], levels[idx_hi]
    c0, c1 = crits[idx_lo], crits[idx_hi]
    t = (alpha - a0) / (a1 - a0)
    return float(c0 + t * (c1 - c0))


def _table_key(value: float, name: str) -> int:
    if value is None or not math.isfinite(value) or not float(value).is_integer():
        raise UnsupportedDegreesOfFreedomError(f"Tables are indexed by whole degrees of freedom, got {name}={value}.")
    return int(value)


def _normalise_levels(levels: Sequence[float]) -> Tuple[float, ...]:
    normalised = tuple(float(level) for level in levels)
    if not normalised:
        raise ValueError("A critical-value table needs at least one significance level.")
    if any(not 0.0 < level < 1.0 for level in normalised):
        raise ValueError("Tabulated significance levels must lie in (0, 1).")
    if any(b <= a for a, b in zip(normalised, normalised[1:])):
        raise ValueError("Tabulated significance levels must be strictly increasing.")
    return normalised


@dataclass(frozen=True)
class ChiSquaredCriticalTable:
    """
    Chi-squared critical values indexed by whole degrees of freedom.

    ``values[df]`` holds one critical value per entry of ``levels``.
    Instances are callable and can be passed wherever a
    :data:`ChiSquaredCriticalLookup` is expected.
    """

    levels: Tuple[float, ...]
    values: Mapping[int, Tuple[float, ...]]
    policy: str = "interpolate"

    def __post_init__(self):
        object.__setattr__(self, "levels", _normalise_levels(self.levels))
        for df, row in self.values.items():
            if len(row) != len(self.levels):
                raise ValueError(f"Row for df={df} has {len(row)} values, expected {len(self.levels)}.")
        if self.policy not in CRITICAL_POLICIES:
            raise ValueError(f"Unknown critical-value policy '{self.policy}'.")

    def __call__(self, df: float, alpha: float) -> float:
        alpha = validate_alpha(alpha)
        key = _table_key(df, "df")
        row = self.values.get(key)
        if row is None:
            raise UnsupportedDegreesOfFreedomError(f"Chi-squared table has no row for df={key}.")
        return interpolate_critical_value(np.asarray(self.levels), np.asarray(row), alpha, self.policy)

    @classmethod
    def standard(cls, max_df: int = 30, levels: Sequence[float] = STANDARD_LEVELS, policy: str = "interpolate"):
        """Build the usual textbook table for df = 1..max_df."""
        levels = _normalise_levels(levels)
        dfs = np.arange(1, max_df + 1, dtype=float)
        grid = stats.chi2.isf(np.asarray(levels)[None, :], dfs[:, None])
        values = {int(df): tuple(float(v) for v in row) for df, row in zip(dfs, grid)}
        return cls(levels=levels, values=values, policy=policy)


@dataclass(frozen=True)
class FCriticalTable:
    """
    F critical values indexed by whole ``(df1, df2)`` pairs.

    ``values[(df1, df2)]`` holds one critical value per entry of ``levels``.
    """

    levels: Tuple[float, ...]
    values: Mapping[Tuple[int, int], Tuple[float, ...]]
    policy: str = "interpolate"

    def __post_init__(self):
        object.__setattr__(self, "levels", _normalise_levels(self.levels))
        for key, row in self.values.items():
            if len(row) != len(self.levels):
                raise ValueError(f"Row for df={key} has {len(row)} values, expected {len(self.levels)}.")
        if self.policy not in CRITICAL_POLICIES:
            raise ValueError(f"Unknown critical-value policy '{self.policy}'.")

    def __call__(self, df1: float, df2: float, alpha: float) -> float:
        alpha = validate_alpha(alpha)
        key = (_table_key(df1, "df1"), _table_key(df2, "df2"))
        row = self.values.get(key)
        if row is None:
            raise UnsupportedDegreesOfFreedomError(f"F table has no entry for (df1, df2)={key}.")
        return interpolate_critical_value(np.asarray(self.levels), np.asarray(row), alpha, self.policy)

    @classmethod
    def standard(
        cls,
        max_df1: int = 30,
        max_df2: int = 30,
        levels: Sequence[float] = STANDARD_LEVELS,
        policy: str = "interpolate",
    ):
        """Build a table for every pair with 1 <= df1 <= max_df1 and 1 <= df2 <= max_df2."""
        levels = _normalise_levels(levels)
        d1 = np.arange(1, max_df1 + 1, dtype=float)
        d2 = np.arange(1, max_df2 + 1, dtype=float)
        grid = stats.f.isf(np.asarray(levels)[None, None, :], d1[:, None, None], d2[None, :, None])
        values = {
            (int(a), int(b)): tuple(float(v) for v in grid[i, j])
            for i, a in enumerate(d1)
            for j, b in enumerate(d2)
        }
        return cls(levels=levels, values=values, policy=policy)


__all__ = [
    "FCriticalLookup",
    "ChiSquaredCriticalLookup",
    "STANDARD_LEVELS",
    "CRITICAL_POLICIES",
    "f_critical_value",
    "chi_squared_critical_value",
    "interpolate_critical_value",
    "ChiSquaredCriticalTable",
    "FCriticalTable",
]
