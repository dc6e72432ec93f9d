"""
KNIME parameters for the Variance Equality F-Test node.
"""

import knime.extension as knext

from ..parameters import is_numeric

x_column_param = knext.ColumnParameter(
    label="Sample X",
    description="Numeric column holding the first sample. Missing cells are ignored.",
    column_filter=is_numeric,
)

y_column_param = knext.ColumnParameter(
    label="Sample Y",
    description=(
        "Numeric column holding the second sample. The samples may differ in size; "
        "pad the shorter one with missing cells."
    ),
    column_filter=is_numeric,
)
