"""
Accuracy and consistency metrics for the fusion filter.

Accuracy is the root mean squared error of the estimate against ground truth,
computed per state component:

    RMSE_i = √( (1/N) Σₖ (x̂ₖ,ᵢ - xₖ,ᵢ)² ),   i ∈ {px, py, vx, vy}

Consistency uses the normalized innovation squared (NIS) of every update,

    ε = yᵀ S⁻¹ y

which for a consistent filter follows a χ² distribution with as many degrees
of freedom as the measurement has components (2 for laser, 3 for radar).
About 5% of the NIS values should exceed the 95% χ² quantile; many more means
the filter underestimates its uncertainty, many fewer that it overestimates it.
"""

import logging
from typing import List, Sequence

import numpy as np
import pandas as pd
from scipy import stats

logger = logging.getLogger(__name__)

STATE_LABELS = ['px', 'py', 'vx', 'vy']


def calculate_rmse(estimations: Sequence[np.ndarray], ground_truth: Sequence[np.ndarray]) -> np.ndarray:
    """
    Per-component RMSE between estimates and ground truth.

    Args:
        estimations: Sequence of estimated state vectors
        ground_truth: Sequence of true state vectors, same length

    Returns:
        RMSE vector with one entry per state component

    Raises:
        ValueError: If the inputs are empty or differ in length or width
    """
    estimations = np.asarray(estimations, dtype=float)
    ground_truth = np.asarray(ground_truth, dtype=float)

    if estimations.size == 0:
        raise ValueError("Cannot compute RMSE of an empty estimate sequence")
    if estimations.shape != ground_truth.shape:
        raise ValueError(
            f"Estimations {estimations.shape} and ground truth {ground_truth.shape} must have the same shape"
        )

    residuals = estimations - ground_truth
    return np.sqrt(np.mean(residuals ** 2, axis=0))


class AccuracyTracker:
    """
    Accumulates estimate/ground-truth pairs over a run.

    Estimates without ground truth are not recorded.
    """

    def __init__(self):
        self._estimates: List[np.ndarray] = []
        self._truths: List[np.ndarray] = []

    def add(self, estimate: np.ndarray, truth: np.ndarray) -> None:
        estimate = np.asarray(estimate, dtype=float).copy()
        truth = np.asarray(truth, dtype=float).copy()
        if estimate.shape != truth.shape:
            raise ValueError(f"Estimate {estimate.shape} and truth {truth.shape} shapes differ")
        self._estimates.append(estimate)
        self._truths.append(truth)

    @property
    def count(self) -> int:
        return len(self._estimates)

    def rmse(self) -> np.ndarray:
        """RMSE over everything added so far."""
        return calculate_rmse(self._estimates, self._truths)

    def errors(self) -> np.ndarray:
        """Absolute per-component error of every recorded pair, shape (N, 4)."""
        if not self._estimates:
            return np.empty((0, len(STATE_LABELS)))
        return np.abs(np.array(self._estimates) - np.array(self._truths))

    def to_dataframe(self) -> pd.DataFrame:
        """Estimates and ground truth side by side, one row per pair."""
        estimates = np.array(self._estimates).reshape(-1, len(STATE_LABELS))
        truths = np.array(self._truths).reshape(-1, len(STATE_LABELS))
        frame = pd.DataFrame(estimates, columns=[f"est_{label}" for label in STATE_LABELS])
        for i, label in enumerate(STATE_LABELS):
            frame[f"gt_{label}"] = truths[:, i]
        return frame

    def summary(self) -> dict:
        rmse = self.rmse()
        return {label: float(value) for label, value in zip(STATE_LABELS, rmse)}


def nis_threshold(dof: int, confidence: float = 0.95) -> float:
    """χ² quantile the NIS of a dof-dimensional measurement should stay under."""
    if dof <= 0:
        raise ValueError(f"Degrees of freedom must be positive, got {dof}")
    if not 0.0 < confidence < 1.0:
        raise ValueError(f"Confidence must be in (0, 1), got {confidence}")
    return float(stats.chi2.ppf(confidence, dof))


def nis_consistency(nis_values: Sequence[float], dof: int, confidence: float = 0.95) -> float:
    """
    Fraction of NIS values above the χ² threshold.

    Args:
        nis_values: NIS of each update for one sensor type
        dof: Measurement dimension of that sensor
        confidence: χ² quantile to compare against

    Returns:
        Fraction in [0, 1]; close to 1 - confidence for a consistent filter
    """
    values = np.asarray(nis_values, dtype=float)
    if values.size == 0:
        raise ValueError("Cannot assess consistency of an empty NIS sequence")
    threshold = nis_threshold(dof, confidence)
    fraction = float(np.mean(values > threshold))
    logger.debug(f"NIS above χ²({dof}, {confidence}) = {threshold:.3f}: {fraction:.1%}")
    return fraction
