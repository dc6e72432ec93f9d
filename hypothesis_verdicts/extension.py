"""
KNIME Extension entry point.

This module imports and registers the hypothesis test nodes.
"""

from .normality_node import ChiSquaredNormalityNode
from .variance_equality_node import VarianceEqualityNode

__all__ = ["ChiSquaredNormalityNode", "VarianceEqualityNode"]
