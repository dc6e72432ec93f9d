"""
KNIME parameters and helpers shared by both hypothesis test nodes.
"""

from typing import Tuple

import knime.extension as knext

from .critical_values import (
    ChiSquaredCriticalLookup,
    ChiSquaredCriticalTable,
    FCriticalLookup,
    FCriticalTable,
    chi_squared_critical_value,
    f_critical_value,
)


def is_numeric(col: knext.Column) -> bool:
    """Helper function to filter for numeric columns."""
    return col.ktype in (knext.double(), knext.int32(), knext.int64())


class CriticalValueSource(knext.EnumParameterOptions):
    """Where the critical value of the reference distribution comes from."""

    EXACT = (
        "Exact",
        "Exact quantile of the F or chi-squared distribution (SciPy). Works for any degrees of freedom.",
    )
    TABLE_INTERPOLATE = (
        "Table (interpolated)",
        "Standard printed table (df up to 30, levels 0.001 to 0.10), linear interpolation between significance levels.",
    )
    TABLE_NEAREST = (
        "Table (nearest level)",
        "Standard printed table (df up to 30), using the nearest tabulated significance level.",
    )


alpha_param = knext.DoubleParameter(
    label="Significance Level (α)",
    description="Probability of rejecting a true null hypothesis (default: 0.05).",
    default_value=0.05,
    min_value=0.001,
    max_value=0.2,
)

critical_source_param = knext.EnumParameter(
    label="Critical Values",
    description=(
        "Source of the critical value the test statistic is compared with. "
        "Tables fail when the degrees of freedom or significance level fall outside their range."
    ),
    enum=CriticalValueSource,
    default_value=CriticalValueSource.EXACT.name,
)


def build_critical_lookups(source: str, max_df: int = 30) -> Tuple[FCriticalLookup, ChiSquaredCriticalLookup]:
    """Return the (F, chi-squared) lookups for a :class:`CriticalValueSource` name."""
    if source == CriticalValueSource.EXACT.name:
        return f_critical_value, chi_squared_critical_value
    if source == CriticalValueSource.TABLE_INTERPOLATE.name:
        policy = "interpolate"
    elif source == CriticalValueSource.TABLE_NEAREST.name:
        policy = "nearest"
    else:
        raise ValueError(f"Unknown critical value source: {source}")
    return (
        FCriticalTable.standard(max_df1=max_df, max_df2=max_df, policy=policy),
        ChiSquaredCriticalTable.standard(max_df=max_df, policy=policy),
    )
