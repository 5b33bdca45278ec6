"""
Engine Errors
Structural input failures raised by the estimator.

Numeric edge cases (flat series, |r| = 1, tiny samples) are NOT errors;
they resolve to defined values inside the estimator.
"""


class EngineError(Exception):
    """Base class for covariance engine errors"""


class InsufficientDataError(EngineError):
    """Sample count below the configured minimum"""

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(
            f"Insufficient data: need at least {required} samples, got {actual}"
        )


class InputMismatchError(EngineError):
    """Primary and hedge sequences have different lengths"""

    def __init__(self, primary_len: int, hedge_len: int):
        self.primary_len = primary_len
        self.hedge_len = hedge_len
        super().__init__(
            f"Price arrays must have equal length (primary={primary_len}, hedge={hedge_len})"
        )
