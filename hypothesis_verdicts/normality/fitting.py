"""
Fitting a Normal distribution to grouped data.

Mean and standard deviation are taken from the raw sample when it is
available, otherwise reconstructed from bucket midpoints weighted by the
observed counts. Expected counts per bucket then follow from the Normal
CDF: ``N * (Phi((upper - mu) / sigma) - Phi((lower - mu) / sigma))``.
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.stats import norm

from ..errors import InvalidInputError
from ..utils import to_finite_array, to_frequency_array


def validate_ranges(ranges) -> np.ndarray:
    """
    Check bucket ranges and return them as an ``(k, 2)`` float array.

    Ranges must be ascending and non-overlapping, each with lower < upper.
    ``-inf`` is only allowed as the first lower bound and ``+inf`` only as
    the last upper bound.
    """
    try:
        bounds = np.array(ranges, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("Ranges must be a sequence of numeric (lower, upper) pairs.") from exc

    if bounds.ndim != 2 or bounds.shape[1] != 2 or bounds.shape[0] == 0:
        raise InvalidInputError("Ranges must be a non-empty sequence of (lower, upper) pairs.")
    if np.isnan(bounds).any():
        raise InvalidInputError("Ranges contain missing bounds.")

    lower, upper = bounds[:, 0], bounds[:, 1]
    if np.isinf(lower[1:]).any() or np.isinf(upper[:-1]).any() or lower[0] == np.inf or upper[-1] == -np.inf:
        raise InvalidInputError("Only the first lower bound may be -inf and only the last upper bound may be +inf.")

    bad = np.flatnonzero(lower >= upper)
    if bad.size:
        raise InvalidInputError(f"Each range needs lower < upper; violated at position(s) {bad.tolist()}.")

    overlap = np.flatnonzero(lower[1:] < upper[:-1])
    if overlap.size:
        raise InvalidInputError(
            f"Ranges must be ascending and non-overlapping; range {int(overlap[0]) + 1} starts before the previous one ends."
        )
    return bounds


def bucket_midpoints(ranges) -> np.ndarray:
    """
    Midpoint of each range.

    An open tail bucket is represented by its finite bound moved outward by
    half the width of the neighbouring bucket.
    """
    bounds = validate_ranges(ranges)
    lower, upper = bounds[:, 0], bounds[:, 1]
    with np.errstate(invalid="ignore"):
        mids = (lower + upper) / 2.0

    k = len(bounds)
    if math.isinf(lower[0]):
        if k < 2 or math.isinf(upper[1]):
            raise InvalidInputError("Cannot place an open lower tail without a finite neighbouring bucket.")
        mids[0] = upper[0] - (upper[1] - lower[1]) / 2.0
    if math.isinf(upper[-1]):
        if k < 2 or math.isinf(lower[-2]):
            raise InvalidInputError("Cannot place an open upper tail without a finite neighbouring bucket.")
        mids[-1] = lower[-1] + (upper[-2] - lower[-2]) / 2.0
    return mids


def estimate_normal_parameters(counts, ranges=None, sample=None) -> Tuple[float, float]:
    """
    Estimate (mean, standard deviation) of the Normal distribution.

    Args:
        counts: Observed count per bucket
        ranges: (lower, upper) pairs used to reconstruct values from midpoints
        sample: Raw observations; preferred over midpoints when given

    Returns:
        (mu, sigma) with sigma computed using ddof=1

    Raises:
        InvalidInputError: If neither ranges nor sample are usable, the
            counts do not sum to the sample size, or sigma is not positive
    """
    counts = to_frequency_array(counts, "Empirical frequencies")
    total = float(counts.sum())

    if sample is not None:
        values = to_finite_array(sample, "Sample", min_size=2)
        if not math.isclose(values.size, total, rel_tol=0.0, abs_tol=1e-9):
            raise InvalidInputError(
                f"Empirical frequencies sum to {total:g} but the sample has {values.size} observations."
            )
        mu = float(np.mean(values))
        sigma = float(np.std(values, ddof=1))
    elif ranges is not None:
        mids = bucket_midpoints(ranges)
        if mids.size != counts.size:
            raise InvalidInputError(f"Got {mids.size} ranges for {counts.size} buckets.")
        if total <= 1:
            raise InvalidInputError("At least 2 observations are needed to estimate a standard deviation.")
        mu = float(np.sum(counts * mids) / total)
        sigma = math.sqrt(float(np.sum(counts * (mids - mu) ** 2)) / (total - 1))
    else:
        raise InvalidInputError("Either bucket ranges or the raw sample are needed to estimate the distribution.")

    if not math.isfinite(sigma) or sigma <= 0:
        raise InvalidInputError("Estimated standard deviation is non-positive; cannot fit a Normal distribution.")
    return mu, sigma


def normal_theoretical_frequencies(ranges, total: float, mean: float, std: float) -> np.ndarray:
    """
    Expected count per range under Normal(mean, std) for ``total`` observations.

    Pass the ranges through :func:`open_tail_ranges` first for expected
    counts that sum to ``total``.
    """
    if not math.isfinite(std) or std <= 0:
        raise InvalidInputError(f"Standard deviation must be positive, got {std}.")
    bounds = validate_ranges(ranges)
    # norm.cdf maps -inf/+inf to 0/1.
    probabilities = norm.cdf(bounds[:, 1], loc=mean, scale=std) - norm.cdf(bounds[:, 0], loc=mean, scale=std)
    return float(total) * probabilities


def open_tail_ranges(ranges) -> Sequence[Tuple[float, float]]:
    """Copy of ``ranges`` with the outermost bounds replaced by -inf and +inf."""
    bounds = validate_ranges(ranges).copy()
    bounds[0, 0] = -np.inf
    bounds[-1, 1] = np.inf
    return [(float(lo), float(hi)) for lo, hi in bounds]


__all__ = [
    "validate_ranges",
    "bucket_midpoints",
    "estimate_normal_parameters",
    "normal_theoretical_frequencies",
    "open_tail_ranges",
]
