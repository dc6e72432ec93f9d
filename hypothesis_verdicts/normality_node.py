"""
Chi-Squared Normality Test Node for KNIME.

Each input row is one bucket of a frequency distribution. The node compares
the observed counts with expected counts under a Normal distribution, either
given directly or derived from the bucket ranges, using Pearson's
chi-squared goodness-of-fit test.
"""

import knime.extension as knext
import numpy as np
import pandas as pd

from .normality import buckets_to_frame, run_normality_test
from .normality.parameters import (
    InputMode,
    estimated_parameters_param,
    expected_column_param,
    input_mode_param,
    lower_column_param,
    min_expected_param,
    observed_column_param,
    open_tails_param,
    upper_column_param,
)
from .parameters import alpha_param, build_critical_lookups, critical_source_param
from .utils import format_p_value

hypothesis_category = knext.category(
    path="/community",
    level_id="utd_development",
    name="University of Texas at Dallas Development",
    description="Statistical analysis tools developed by the University of Texas at Dallas",
    icon="./icons/utd.png",
)

SUMMARY_COLUMNS = [
    ("Test", knext.string()),
    ("Input Mode", knext.string()),
    ("Buckets", knext.int32()),
    ("Buckets Used", knext.int32()),
    ("Estimated Parameters", knext.int32()),
    ("Degrees of Freedom", knext.double()),
    ("Chi-Squared Statistic", knext.double()),
    ("Critical Value", knext.double()),
    ("P-Value", knext.string()),
    ("Significance Level", knext.double()),
    ("Fitted Mean", knext.double()),
    ("Fitted Std Dev", knext.double()),
    ("Statistical Decision", knext.string()),
]

BUCKET_COLUMNS = [
    ("Bucket", knext.string()),
    ("Observed", knext.double()),
    ("Expected", knext.double()),
    ("Contribution", knext.double()),
]


@knext.node(
    name="Chi-Squared Normality Test",
    node_type=knext.NodeType.MANIPULATOR,
    icon_path="./icons/curve.jpg",
    category=hypothesis_category,
)
@knext.input_table(name="Frequency table", description="One row per bucket, in bucket order.")
@knext.output_table(name="Results", description="Chi-squared statistic, critical value and normality decision.")
@knext.output_table(name="Buckets", description="Observed and expected counts per bucket after merging sparse buckets.")
class ChiSquaredNormalityNode:
    """Tests whether grouped data plausibly follows a Normal distribution.

    Expected counts are either read from a column or computed from bucket
    ranges after fitting the mean and standard deviation. Buckets with small
    expected counts are merged with their neighbours before the statistic is
    computed.
    """

    input_mode = input_mode_param
    observed_column = observed_column_param
    expected_column = expected_column_param
    lower_column = lower_column_param
    upper_column = upper_column_param
    alpha = alpha_param
    min_expected = min_expected_param
    open_tails = open_tails_param
    estimated_parameters = estimated_parameters_param
    critical_source = critical_source_param

    def _column_values(self, df, col_name, role):
        # Column existence, then numeric conversion; missing cells stay NaN
        # so the caller decides whether they are allowed.
        if col_name is None:
            raise ValueError(f"No {role} column selected. Please configure the node.")
        if col_name not in df.columns:
            raise ValueError(f"Column '{col_name}' not found in input data.")
        return pd.to_numeric(df[col_name], errors="coerce").to_numpy(dtype=float)

    def _complete_values(self, df, col_name, role):
        values = self._column_values(df, col_name, role)
        null_count = int(np.isnan(values).sum())
        if null_count:
            raise ValueError(
                f"Column '{col_name}' contains {null_count} null/missing values. "
                f"The {role} column must be complete."
            )
        return values

    def _ranges(self, df):
        """Read (lower, upper) pairs; a missing outermost bound means an open tail."""
        lower = self._column_values(df, self.lower_column, "lower bound")
        upper = self._column_values(df, self.upper_column, "upper bound")
        if lower.size and np.isnan(lower[0]):
            lower[0] = -np.inf
        if upper.size and np.isnan(upper[-1]):
            upper[-1] = np.inf
        if np.isnan(lower).any() or np.isnan(upper).any():
            raise ValueError("Only the first lower bound and the last upper bound may be missing.")
        return list(zip(lower.tolist(), upper.tolist()))

    def configure(self, cfg_ctx, input_spec):
        """Configure the node's two output table schemas."""
        summary_schema = knext.Schema.from_columns([knext.Column(ktype, name) for name, ktype in SUMMARY_COLUMNS])
        bucket_schema = knext.Schema.from_columns([knext.Column(ktype, name) for name, ktype in BUCKET_COLUMNS])
        return summary_schema, bucket_schema

    def _build_results(self, exec_ctx, df):
        if len(df) == 0:
            raise ValueError("Input table is empty. Provide one row per bucket.")

        observed = self._complete_values(df, self.observed_column, "observed frequency")
        _, chi_lookup = build_critical_lookups(self.critical_source)

        if self.input_mode == InputMode.RANGES.name:
            mode_name = "Value ranges"
            result = run_normality_test(
                observed,
                ranges=self._ranges(df),
                alpha=self.alpha,
                min_expected=self.min_expected,
                open_tails=self.open_tails,
                chi_squared_critical=chi_lookup,
            )
        else:
            mode_name = "Theoretical frequencies"
            expected = self._complete_values(df, self.expected_column, "theoretical frequency")
            result = run_normality_test(
                observed,
                expected,
                alpha=self.alpha,
                labels=[str(row_id) for row_id in df.index],
                estimated_parameters=self.estimated_parameters,
                min_expected=self.min_expected,
                chi_squared_critical=chi_lookup,
            )

        # Propagate notes to KNIME console
        for note in result.notes:
            knext.LOGGER.warning(note)
        if result.notes:
            exec_ctx.set_warning(" ".join(result.notes))

        (df_used,) = result.degrees_of_freedom
        summary = pd.DataFrame(
            [
                {
                    "Test": result.test,
                    "Input Mode": mode_name,
                    "Buckets": np.int32(result.details["bucket_count"]),
                    "Buckets Used": np.int32(result.details["merged_bucket_count"]),
                    "Estimated Parameters": np.int32(result.details["estimated_parameters"]),
                    "Degrees of Freedom": df_used,
                    "Chi-Squared Statistic": result.statistic,
                    "Critical Value": result.critical_value,
                    "P-Value": format_p_value(result.details["p_value"]),
                    "Significance Level": result.alpha,
                    "Fitted Mean": result.details.get("mean", np.nan),
                    "Fitted Std Dev": result.details.get("std", np.nan),
                    "Statistical Decision": result.decision,
                }
            ]
        )
        buckets = buckets_to_frame(result.details["buckets"])
        return summary, buckets

    def execute(self, exec_ctx, input_table):
        """Run the chi-squared normality test on the frequency table."""
        df = input_table.to_pandas()
        summary, buckets = self._build_results(exec_ctx, df)
        return knext.Table.from_pandas(summary), knext.Table.from_pandas(buckets)
