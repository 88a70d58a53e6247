"""
Sensor fusion algorithms for fusion tracker.

This module implements the Extended Kalman Filter core, the radar
linearization helpers and the laser/radar fusion orchestrator.
"""

from .kalman import KalmanFilter, FilterDiagnostics, normalize_angle
from .tools import calculate_jacobian, cartesian_to_polar, polar_to_cartesian
from .fusion_ekf import FusionEKF, MeasurementModel, StepOutcome, TrackerState

__all__ = [
    "KalmanFilter",
    "FilterDiagnostics",
    "normalize_angle",
    "calculate_jacobian",
    "cartesian_to_polar",
    "polar_to_cartesian",
    "FusionEKF",
    "MeasurementModel",
    "StepOutcome",
    "TrackerState"
]
