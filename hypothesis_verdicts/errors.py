"""
Exception types raised by the hypothesis test cores.

All errors derive from ``ValueError`` so the KNIME nodes report them the
same way as any other validation failure.
"""


class HypothesisTestError(ValueError):
    """Base error type for hypothesis test failures."""


class InvalidInputError(HypothesisTestError):
    """Raised when samples, frequencies, ranges or alpha are malformed or mismatched."""


class UnsupportedDegreesOfFreedomError(HypothesisTestError):
    """Raised when a critical-value source cannot answer for the requested parameters."""


__all__ = ["HypothesisTestError", "InvalidInputError", "UnsupportedDegreesOfFreedomError"]
