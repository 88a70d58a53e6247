"""
Exception hierarchy for the fusion tracker.

Numerical failures that make a single filter step meaningless are raised as
exceptions so the caller can decide whether to abort the run. Degradations the
filter can absorb locally (a near-singular Jacobian, a zero time step) are
logged instead and never raised.
"""

import numpy as np


class FusionTrackerError(Exception):
    """Base class for all errors raised by fusion_tracker."""


class MalformedMeasurementError(FusionTrackerError, ValueError):
    """
    A measurement does not match the layout of its sensor type.

    Raised by whoever builds measurement records (the record constructor and
    the log reader), never by the filter itself.

    Attributes:
        line_number: 1-based line in the source log, if known
    """

    def __init__(self, message: str, line_number: int = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class SingularInnovationError(FusionTrackerError, np.linalg.LinAlgError):
    """
    Innovation covariance S = HPHᵀ + R could not be inverted.

    The filter state is left exactly as it was before the failed update.
    """
