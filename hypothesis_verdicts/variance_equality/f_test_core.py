"""
F-test for equality of two variances.

What it does:
-------------
Given two samples X and Y, decides whether it is plausible that
Var(X) = Var(Y).

How it works:
-------------
1. Compute the unbiased sample variance of each sample
2. Divide the larger variance by the smaller one, so F >= 1
3. Look up the upper critical value at alpha / 2; forcing F >= 1 folds
   the two-sided test onto the upper tail
4. Equal variances are plausible when F <= F_crit

Interpretation:
---------------
- F <= F_crit: Do not reject equal variances
- F >  F_crit: Reject equal variances
"""

from typing import Tuple

import numpy as np
from scipy import stats

from ..critical_values import FCriticalLookup, f_critical_value
from ..errors import InvalidInputError
from ..results import TestResult
from ..utils import to_finite_array, validate_alpha

TEST_NAME = "F-Test (Equal Variances)"
NULL_HYPOTHESIS = "equal variances"


def unbiased_variance(sample: np.ndarray) -> float:
    """Sample variance with Bessel's correction (ddof=1)."""
    return float(np.var(sample, ddof=1))


def _numerator_and_dofs(var_x: float, var_y: float, n_x: int, n_y: int) -> Tuple[str, float, float]:
    # Ties put X in the numerator.
    if var_x >= var_y:
        return "x", float(n_x - 1), float(n_y - 1)
    return "y", float(n_y - 1), float(n_x - 1)


def run_variance_equality_test(
    sample_x,
    sample_y,
    alpha: float = 0.05,
    *,
    f_critical: FCriticalLookup = f_critical_value,
) -> TestResult:
    """
    Run the two-sided F-test for equality of variances.

    Args:
        sample_x: Observations of the first random variable (at least 2)
        sample_y: Observations of the second random variable (at least 2)
        alpha: Significance level for the decision (default 0.05)
        f_critical: Lookup returning the upper-tail F critical value for
            (df1, df2, tail probability)

    Returns:
        TestResult whose details hold the two variances, the sample sizes,
        which sample formed the numerator, and a two-sided p-value

    Raises:
        InvalidInputError: If a sample has fewer than 2 finite values, has
            zero variance, or alpha is outside (0, 1)
        UnsupportedDegreesOfFreedomError: If ``f_critical`` cannot answer
    """
    alpha = validate_alpha(alpha)
    x = to_finite_array(sample_x, "Sample X", min_size=2)
    y = to_finite_array(sample_y, "Sample Y", min_size=2)

    var_x = unbiased_variance(x)
    var_y = unbiased_variance(y)

    zero_variance = [name for name, var in (("X", var_x), ("Y", var_y)) if var == 0.0]
    if zero_variance:
        raise InvalidInputError(
            f"Sample(s) {', '.join(zero_variance)} contain only constant values; "
            "the variance ratio is undefined."
        )

    numerator, df1, df2 = _numerator_and_dofs(var_x, var_y, x.size, y.size)
    f_statistic = max(var_x, var_y) / min(var_x, var_y)

    critical_value = float(f_critical(df1, df2, alpha / 2.0))
    not_rejected = bool(f_statistic <= critical_value)

    # Informative only; the verdict comes from the critical value.
    p_value = float(min(1.0, 2.0 * stats.f.sf(f_statistic, df1, df2)))

    return TestResult(
        test=TEST_NAME,
        statistic=float(f_statistic),
        critical_value=critical_value,
        degrees_of_freedom=(df1, df2),
        alpha=alpha,
        not_rejected=not_rejected,
        null_hypothesis=NULL_HYPOTHESIS,
        details={
            "variance_x": var_x,
            "variance_y": var_y,
            "n_x": int(x.size),
            "n_y": int(y.size),
            "numerator": numerator,
            "p_value": p_value,
        },
    )


__all__ = ["run_variance_equality_test", "unbiased_variance", "TEST_NAME"]
