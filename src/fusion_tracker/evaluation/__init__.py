"""
Accuracy and consistency evaluation of the fusion filter.
"""

from .metrics import AccuracyTracker, calculate_rmse, nis_consistency, nis_threshold

__all__ = [
    "AccuracyTracker",
    "calculate_rmse",
    "nis_consistency",
    "nis_threshold"
]
