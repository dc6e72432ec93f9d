"""
Paired observed/expected buckets for the chi-squared goodness-of-fit test.

Observed and expected counts always travel together as :class:`Bucket`
records, so merging sparse buckets changes both sides identically.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import pandas as pd

from ..errors import InvalidInputError

DEFAULT_MIN_EXPECTED = 5.0


@dataclass(frozen=True)
class Bucket:
    """One bucket of a frequency distribution."""

    label: str
    observed: float
    expected: float
    lower: Optional[float] = None
    upper: Optional[float] = None

    @property
    def contribution(self) -> float:
        """This bucket's term of the chi-squared sum. Caller must ensure expected > 0."""
        return (self.observed - self.expected) ** 2 / self.expected


def range_label(lower: float, upper: float) -> str:
    left = "(-inf" if math.isinf(lower) else f"[{lower:g}"
    right = "+inf)" if math.isinf(upper) else f"{upper:g})"
    return f"{left}, {right}"


def pair_buckets(observed, expected, labels: Optional[Sequence[str]] = None, ranges=None) -> List[Bucket]:
    """
    Zip observed and expected counts into bucket records.

    Args:
        observed: Observed counts, one per bucket
        expected: Expected counts, aligned with ``observed``
        labels: Optional bucket labels; defaults to range labels or 1..k
        ranges: Optional (lower, upper) pairs aligned with ``observed``

    Raises:
        InvalidInputError: If any of the sequences differ in length
    """
    observed = list(observed)
    expected = list(expected)
    if len(observed) != len(expected):
        raise InvalidInputError(
            f"Lengths of samples are different: {len(observed)} observed vs {len(expected)} expected buckets."
        )
    if ranges is not None and len(ranges) != len(observed):
        raise InvalidInputError(f"Got {len(ranges)} ranges for {len(observed)} buckets.")
    if labels is not None and len(labels) != len(observed):
        raise InvalidInputError(f"Got {len(labels)} labels for {len(observed)} buckets.")

    buckets = []
    for i, (obs, exp) in enumerate(zip(observed, expected)):
        lower, upper = (float(ranges[i][0]), float(ranges[i][1])) if ranges is not None else (None, None)
        if labels is not None:
            label = str(labels[i])
        elif ranges is not None:
            label = range_label(lower, upper)
        else:
            label = str(i + 1)
        buckets.append(Bucket(label=label, observed=float(obs), expected=float(exp), lower=lower, upper=upper))
    return buckets


def combine_buckets(first: Bucket, second: Bucket) -> Bucket:
    """Merge two adjacent buckets; ``first`` must precede ``second``."""
    if first.lower is not None and second.upper is not None:
        lower, upper = first.lower, second.upper
        label = range_label(lower, upper)
    else:
        lower, upper = None, None
        label = f"{first.label} + {second.label}"
    return Bucket(
        label=label,
        observed=first.observed + second.observed,
        expected=first.expected + second.expected,
        lower=lower,
        upper=upper,
    )


def merge_sparse_buckets(
    buckets: Sequence[Bucket], min_expected: float = DEFAULT_MIN_EXPECTED, min_buckets: int = 1
) -> List[Bucket]:
    """
    Merge neighbouring buckets until each expected count reaches ``min_expected``.

    Buckets are scanned left to right and accumulated until the running
    expected count reaches the threshold. A trailing group that never
    reaches it is folded into the previous group. ``min_expected=0``
    leaves the buckets untouched.

    Merging stops once it would leave fewer than ``min_buckets`` buckets;
    the remaining sparse buckets are then kept as they are.
    """
    if min_expected < 0 or not math.isfinite(min_expected):
        raise InvalidInputError(f"Minimum expected count must be a non-negative number, got {min_expected}.")

    merges_left = max(len(buckets) - int(min_buckets), 0)
    merged: List[Bucket] = []
    pending: Optional[Bucket] = None
    for bucket in buckets:
        if pending is None:
            pending = bucket
        elif merges_left > 0:
            pending = combine_buckets(pending, bucket)
            merges_left -= 1
        else:
            merged.append(pending)
            pending = bucket
        if pending.expected >= min_expected:
            merged.append(pending)
            pending = None

    if pending is not None:
        if merged and merges_left > 0:
            merged[-1] = combine_buckets(merged[-1], pending)
        else:
            merged.append(pending)
    return merged


def buckets_to_frame(buckets: Sequence[Bucket]) -> pd.DataFrame:
    """Tabulate buckets with their chi-squared contributions."""
    return pd.DataFrame(
        {
            "Bucket": [b.label for b in buckets],
            "Observed": [b.observed for b in buckets],
            "Expected": [b.expected for b in buckets],
            "Contribution": [b.contribution if b.expected > 0 else float("nan") for b in buckets],
        }
    )


__all__ = [
    "Bucket",
    "DEFAULT_MIN_EXPECTED",
    "pair_buckets",
    "combine_buckets",
    "merge_sparse_buckets",
    "buckets_to_frame",
    "range_label",
]
