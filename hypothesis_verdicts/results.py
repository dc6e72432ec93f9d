"""
Result record shared by the variance-equality and normality tests.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class TestResult:
    """
    Outcome of a single hypothesis test run.

    Attributes:
        test: Name of the procedure, e.g. "F-Test (Equal Variances)"
        statistic: Observed test statistic
        critical_value: Upper-tail critical value the statistic was compared with
        degrees_of_freedom: ``(df1, df2)`` for F, ``(df,)`` for chi-squared
        alpha: Significance level requested by the caller
        not_rejected: True when the null hypothesis is plausible (statistic <= critical value)
        null_hypothesis: Short description of H0 used to phrase the decision
        details: Supporting values (variances, fitted parameters, buckets, p-value)
        notes: Warnings collected while preparing the data
    """

    test: str
    statistic: float
    critical_value: float
    degrees_of_freedom: Tuple[float, ...]
    alpha: float
    not_rejected: bool
    null_hypothesis: str
    details: Mapping[str, object] = field(default_factory=dict)
    notes: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))
        object.__setattr__(self, "notes", tuple(self.notes))

    @property
    def rejected(self) -> bool:
        return not self.not_rejected

    @property
    def decision(self) -> str:
        if self.not_rejected:
            return f"Do not reject {self.null_hypothesis}"
        return f"Reject {self.null_hypothesis}"


__all__ = ["TestResult"]
