"""
Chi-squared goodness-of-fit test for normality of grouped data.

Two input modes:

- Theoretical frequencies: the expected count of every bucket is given
  directly and paired with the empirical count at the same position.
- Value ranges: a Normal distribution is fitted to the empirical data and
  the expected count of each range is derived from its CDF.

Buckets with a small expected count are merged with their neighbours
before the statistic is computed, to keep the chi-squared approximation
valid. The hypothesis of normality is not rejected when the statistic
does not exceed the upper critical value at the requested significance.
"""

import math
from typing import List, Optional, Sequence

from scipy import stats

from ..critical_values import ChiSquaredCriticalLookup, chi_squared_critical_value
from ..errors import InvalidInputError, UnsupportedDegreesOfFreedomError
from ..results import TestResult
from ..utils import to_frequency_array, validate_alpha
from .buckets import DEFAULT_MIN_EXPECTED, Bucket, merge_sparse_buckets, pair_buckets
from .fitting import estimate_normal_parameters, normal_theoretical_frequencies, open_tail_ranges, validate_ranges

TEST_NAME = "Chi-Squared Goodness-of-Fit (Normal)"
NULL_HYPOTHESIS = "normality"

# Parameters estimated when fitting from ranges: mean and standard deviation.
FITTED_PARAMETERS = 2


def chi_squared_statistic(buckets: Sequence[Bucket]) -> float:
    """Sum of (observed - expected)^2 / expected over all buckets."""
    return float(sum(bucket.contribution for bucket in buckets))


def _expected_from_theoretical(theoretical, observed, estimated_parameters, sample, notes: List[str]):
    if sample is not None:
        raise InvalidInputError("A raw sample is only used when fitting from value ranges.")
    expected = to_frequency_array(theoretical, "Theoretical frequencies")
    if expected.size != observed.size:
        raise InvalidInputError(
            f"Lengths of samples are different: {observed.size} empirical vs {expected.size} theoretical frequencies."
        )

    k = 0 if estimated_parameters is None else int(estimated_parameters)
    if k < 0:
        raise InvalidInputError(f"Number of estimated parameters cannot be negative, got {k}.")

    observed_total, expected_total = float(observed.sum()), float(expected.sum())
    if not math.isclose(observed_total, expected_total, rel_tol=1e-3):
        notes.append(
            f"Theoretical frequencies sum to {expected_total:g} while empirical frequencies sum to {observed_total:g}."
        )
    return expected, k


def run_normality_test(
    empirical,
    theoretical=None,
    *,
    ranges=None,
    alpha: float = 0.05,
    labels: Optional[Sequence[str]] = None,
    sample=None,
    estimated_parameters: Optional[int] = None,
    min_expected: float = DEFAULT_MIN_EXPECTED,
    open_tails: bool = False,
    chi_squared_critical: ChiSquaredCriticalLookup = chi_squared_critical_value,
) -> TestResult:
    """
    Run the chi-squared goodness-of-fit test against a Normal distribution.

    Exactly one of ``theoretical`` and ``ranges`` must be supplied.

    Args:
        empirical: Observed count per bucket
        theoretical: Expected count per bucket, aligned with ``empirical``
        ranges: (lower, upper) per bucket, aligned with ``empirical``; the
            Normal parameters are then estimated from the data
        alpha: Significance level for the decision (default 0.05)
        labels: Optional bucket labels used in the bucket table
        sample: Raw observations behind ``empirical``; with ``ranges`` they
            give exact mean/std instead of the midpoint reconstruction
        estimated_parameters: Parameters fitted from the data; defaults to 0
            for theoretical frequencies, always 2 for ranges
        min_expected: Buckets are merged until every expected count reaches
            this value; 0 disables merging
        open_tails: With ranges, extend the outermost ranges to -inf/+inf
        chi_squared_critical: Lookup returning the upper-tail chi-squared
            critical value for (df, alpha)

    Returns:
        TestResult whose details hold the merged buckets, the bucket counts,
        totals, fitted mean/std (ranges mode) and an informative p-value

    Raises:
        InvalidInputError: For mismatched lengths, negative or missing
            counts, invalid ranges, or an expected count of zero that
            merging cannot remove
        UnsupportedDegreesOfFreedomError: If fewer than one degree of
            freedom remains or the lookup cannot answer
    """
    alpha = validate_alpha(alpha)
    if theoretical is None and ranges is None:
        raise InvalidInputError("Provide either theoretical frequencies or value ranges.")
    if theoretical is not None and ranges is not None:
        raise InvalidInputError("Provide theoretical frequencies or value ranges, not both.")

    observed = to_frequency_array(empirical, "Empirical frequencies")
    observed_total = float(observed.sum())
    if observed_total <= 0:
        raise InvalidInputError("Empirical frequencies must contain at least one observation.")

    notes: List[str] = []
    details = {}
    bucket_ranges = None

    if theoretical is not None:
        expected, k = _expected_from_theoretical(theoretical, observed, estimated_parameters, sample, notes)
    else:
        if estimated_parameters not in (None, FITTED_PARAMETERS):
            raise InvalidInputError(
                f"Fitting from ranges always estimates {FITTED_PARAMETERS} parameters, got {estimated_parameters}."
            )
        bounds = validate_ranges(ranges)
        if len(bounds) != observed.size:
            raise InvalidInputError(f"Got {len(bounds)} ranges for {observed.size} empirical frequencies.")

        mu, sigma = estimate_normal_parameters(observed, ranges=bounds, sample=sample)
        bucket_ranges = open_tail_ranges(bounds) if open_tails else [(float(lo), float(hi)) for lo, hi in bounds]
        expected = normal_theoretical_frequencies(bucket_ranges, observed_total, mu, sigma)
        k = FITTED_PARAMETERS
        details["mean"] = mu
        details["std"] = sigma

        outside = 1.0 - float(expected.sum()) / observed_total
        if outside > 1e-3:
            notes.append(f"{outside:.1%} of the fitted Normal probability lies outside the given ranges.")

    buckets = pair_buckets(observed, expected, labels=labels, ranges=bucket_ranges)
    # Keep at least one degree of freedom: df = buckets - 1 - k.
    merged = merge_sparse_buckets(buckets, min_expected, min_buckets=k + 2)
    if len(merged) < len(buckets):
        notes.append(
            f"Merged {len(buckets)} buckets into {len(merged)} so that every expected count is at least {min_expected:g}."
        )
    sparse = [bucket.label for bucket in merged if bucket.expected < min_expected]
    if sparse and len(merged) >= k + 2:
        notes.append(
            f"Expected count stays below {min_expected:g} in bucket(s) {sparse}; "
            "merging further would leave no degrees of freedom."
        )

    empty = [bucket.label for bucket in merged if bucket.expected <= 0]
    if empty:
        raise InvalidInputError(f"Expected frequency is zero in bucket(s) {empty} and cannot be merged away.")

    df = len(merged) - 1 - k
    if df < 1:
        raise UnsupportedDegreesOfFreedomError(
            f"{len(merged)} bucket(s) with {k} estimated parameter(s) leave {df} degrees of freedom; at least 1 is needed."
        )

    statistic = chi_squared_statistic(merged)
    critical_value = float(chi_squared_critical(float(df), alpha))
    not_rejected = bool(statistic <= critical_value)

    details.update(
        {
            "buckets": tuple(merged),
            "bucket_count": len(buckets),
            "merged_bucket_count": len(merged),
            "estimated_parameters": k,
            "observed_total": observed_total,
            "expected_total": float(sum(bucket.expected for bucket in merged)),
            "p_value": float(stats.chi2.sf(statistic, df)),
        }
    )

    return TestResult(
        test=TEST_NAME,
        statistic=statistic,
        critical_value=critical_value,
        degrees_of_freedom=(float(df),),
        alpha=alpha,
        not_rejected=not_rejected,
        null_hypothesis=NULL_HYPOTHESIS,
        details=details,
        notes=tuple(notes),
    )


__all__ = ["run_normality_test", "chi_squared_statistic", "TEST_NAME", "FITTED_PARAMETERS"]
