"""
Chi-squared normality test package.

Key Components:
---------------
- buckets: Paired observed/expected bucket records and the merging policy
- fitting: Normal parameter estimation and expected counts from ranges
- chi_squared_core: The goodness-of-fit test itself

KNIME parameters live in ``parameters.py`` and are imported by the node only.
"""

from .buckets import Bucket, buckets_to_frame, merge_sparse_buckets, pair_buckets
from .chi_squared_core import chi_squared_statistic, run_normality_test
from .fitting import estimate_normal_parameters, normal_theoretical_frequencies

__all__ = [
    "run_normality_test",
    "chi_squared_statistic",
    "Bucket",
    "pair_buckets",
    "merge_sparse_buckets",
    "buckets_to_frame",
    "estimate_normal_parameters",
    "normal_theoretical_frequencies",
]
