"""
Hypothesis verdicts: equal-variance F-test and chi-squared normality test.

The computational cores are importable without KNIME. The KNIME nodes are
registered from ``hypothesis_verdicts.extension``.
"""

from .errors import HypothesisTestError, InvalidInputError, UnsupportedDegreesOfFreedomError
from .normality import run_normality_test
from .results import TestResult
from .variance_equality import run_variance_equality_test

__all__ = [
    "run_variance_equality_test",
    "run_normality_test",
    "TestResult",
    "HypothesisTestError",
    "InvalidInputError",
    "UnsupportedDegreesOfFreedomError",
]
