"""
KNIME parameters for the Chi-Squared Normality Test node.
"""

import knime.extension as knext

from ..parameters import is_numeric
from .buckets import DEFAULT_MIN_EXPECTED


class InputMode(knext.EnumParameterOptions):
    """How the expected frequencies are obtained."""

    THEORETICAL = (
        "Theoretical frequencies",
        "Each row holds an observed count and the expected count for the same bucket.",
    )
    RANGES = (
        "Value ranges",
        "Each row holds an observed count and the lower/upper bound of its bucket. "
        "A Normal distribution is fitted to the grouped data (mean and standard deviation).",
    )


input_mode_param = knext.EnumParameter(
    label="Input Mode",
    description="Choose whether expected frequencies are given directly or derived from bucket ranges.",
    enum=InputMode,
    default_value=InputMode.THEORETICAL.name,
)

observed_column_param = knext.ColumnParameter(
    label="Observed Frequencies",
    description="Numeric column with the empirical count of each bucket, in bucket order.",
    column_filter=is_numeric,
)

expected_column_param = knext.ColumnParameter(
    label="Theoretical Frequencies",
    description="Numeric column with the expected count of each bucket. Used in 'Theoretical frequencies' mode.",
    column_filter=is_numeric,
)

lower_column_param = knext.ColumnParameter(
    label="Lower Bound",
    description="Numeric column with the lower bound of each bucket. Used in 'Value ranges' mode.",
    column_filter=is_numeric,
)

upper_column_param = knext.ColumnParameter(
    label="Upper Bound",
    description="Numeric column with the upper bound of each bucket. Used in 'Value ranges' mode.",
    column_filter=is_numeric,
)

min_expected_param = knext.DoubleParameter(
    label="Minimum Expected Count",
    description=(
        "Neighbouring buckets are merged until every expected count reaches this value "
        "(default: 5). Set to 0 to disable merging."
    ),
    default_value=DEFAULT_MIN_EXPECTED,
    min_value=0.0,
)

open_tails_param = knext.BoolParameter(
    label="Open Outer Ranges",
    description=(
        "Treat the first lower bound as -∞ and the last upper bound as +∞, so the expected "
        "counts add up to the sample size. Used in 'Value ranges' mode."
    ),
    default_value=False,
)

estimated_parameters_param = knext.IntParameter(
    label="Estimated Parameters",
    description=(
        "Number of distribution parameters that were estimated from the data when the theoretical "
        "frequencies were computed (2 if mean and standard deviation were fitted). "
        "Each one removes a degree of freedom. Used in 'Theoretical frequencies' mode."
    ),
    default_value=0,
    min_value=0,
    max_value=2,
)
