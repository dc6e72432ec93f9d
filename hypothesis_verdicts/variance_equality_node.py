"""
Variance Equality F-Test Node for KNIME.

Takes two numeric columns as the samples X and Y and tests whether their
population variances can be assumed equal (two-sided F-test).
"""

import knime.extension as knext
import numpy as np
import pandas as pd

from .parameters import alpha_param, build_critical_lookups, critical_source_param
from .utils import format_p_value
from .variance_equality import run_variance_equality_test
from .variance_equality.parameters import x_column_param, y_column_param

hypothesis_category = knext.category(
    path="/community",
    level_id="utd_development",
    name="University of Texas at Dallas Development",
    description="Statistical analysis tools developed by the University of Texas at Dallas",
    icon="./icons/utd.png",
)

RESULT_COLUMNS = [
    ("Sample X", knext.string()),
    ("Sample Y", knext.string()),
    ("n (X)", knext.int32()),
    ("n (Y)", knext.int32()),
    ("Variance X", knext.double()),
    ("Variance Y", knext.double()),
    ("df1", knext.double()),
    ("df2", knext.double()),
    ("F Statistic", knext.double()),
    ("Critical Value", knext.double()),
    ("P-Value", knext.string()),
    ("Significance Level", knext.double()),
    ("Statistical Decision", knext.string()),
]


@knext.node(
    name="Variance Equality F-Test",
    node_type=knext.NodeType.MANIPULATOR,
    icon_path="./icons/bell_curve.png",
    category=hypothesis_category,
)
@knext.input_table(name="Input data", description="Table containing the two numeric sample columns.")
@knext.output_table(name="Results", description="F statistic, critical value and decision on equal variances.")
class VarianceEqualityNode:
    """Tests whether two samples come from populations with the same variance.

    The larger unbiased sample variance is divided by the smaller one and the
    ratio is compared with the upper critical value of the F distribution at
    α/2, which gives a two-sided test at level α.
    """

    x_column = x_column_param
    y_column = y_column_param
    alpha = alpha_param
    critical_source = critical_source_param

    def _extract_sample(self, df, col_name, role):
        """Return the non-missing values of ``col_name`` and how many cells were dropped."""
        if col_name is None:
            raise ValueError(f"No column selected for sample {role}. Please configure the node.")
        if col_name not in df.columns:
            raise ValueError(f"Column '{col_name}' not found in input data.")

        data = pd.to_numeric(df[col_name], errors="coerce")
        n_missing = int(data.isnull().sum())
        return data.dropna().to_numpy(dtype=float), n_missing

    def configure(self, cfg_ctx, input_spec):
        """Configure the node's output table schema."""
        return knext.Schema.from_columns([knext.Column(ktype, name) for name, ktype in RESULT_COLUMNS])

    def _build_results(self, exec_ctx, df):
        if self.x_column is not None and self.x_column == self.y_column:
            raise ValueError("Sample X and Sample Y must be different columns.")

        x, x_missing = self._extract_sample(df, self.x_column, "X")
        y, y_missing = self._extract_sample(df, self.y_column, "Y")

        if x_missing or y_missing:
            message = f"Ignored missing cells: {x_missing} in '{self.x_column}', {y_missing} in '{self.y_column}'."
            knext.LOGGER.warning(message)
            exec_ctx.set_warning(message)

        f_lookup, _ = build_critical_lookups(self.critical_source)
        result = run_variance_equality_test(x, y, alpha=self.alpha, f_critical=f_lookup)
        df1, df2 = result.degrees_of_freedom

        return pd.DataFrame(
            [
                {
                    "Sample X": self.x_column,
                    "Sample Y": self.y_column,
                    "n (X)": np.int32(result.details["n_x"]),
                    "n (Y)": np.int32(result.details["n_y"]),
                    "Variance X": result.details["variance_x"],
                    "Variance Y": result.details["variance_y"],
                    "df1": df1,
                    "df2": df2,
                    "F Statistic": result.statistic,
                    "Critical Value": result.critical_value,
                    "P-Value": format_p_value(result.details["p_value"]),
                    "Significance Level": result.alpha,
                    "Statistical Decision": result.decision,
                }
            ]
        )

    def execute(self, exec_ctx, input_table):
        """Run the F-test on the selected columns."""
        df = input_table.to_pandas()
        return knext.Table.from_pandas(self._build_results(exec_ctx, df))
