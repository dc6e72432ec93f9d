"""
Variance equality (F-test) package.

Exported Functions:
-------------------
- run_variance_equality_test: Two-sided F-test on two samples
- unbiased_variance: Sample variance with ddof=1

KNIME parameters live in ``parameters.py`` and are imported by the node only.
"""

from .f_test_core import run_variance_equality_test, unbiased_variance

__all__ = ["run_variance_equality_test", "unbiased_variance"]
