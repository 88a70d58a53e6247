"""
Fusion Tracker: Laser/Radar Object Tracking with an Extended Kalman Filter

A scientific Python package for estimating the 2D position and velocity of a
moving object from two heterogeneous sensors:

- Laser: Cartesian position [px, py] (linear observation model)
- Radar: range, bearing and range rate [ρ, φ, ρ̇] (nonlinear observation model,
  linearized with a Jacobian at every update)

This package implements:
- Kalman filter core with linear and extended (EKF) update steps
- Fusion orchestrator managing initialization, time steps and sensor dispatch
- Measurement log reading/writing and RMSE / NIS evaluation
- Synthetic laser/radar scenario generation and trajectory plots
"""

from .config import FusionConfig
from .exceptions import FusionTrackerError, MalformedMeasurementError, SingularInnovationError
from .measurement import SensorType, MeasurementPackage, GroundTruthPackage
from .fusion.kalman import KalmanFilter, normalize_angle
from .fusion.tools import calculate_jacobian
from .fusion.fusion_ekf import FusionEKF, StepOutcome, TrackerState
from .evaluation.metrics import AccuracyTracker, calculate_rmse

__version__ = "1.0.0"
__author__ = "Fusion Tracker Team"

__all__ = [
    "FusionConfig",
    "FusionTrackerError",
    "MalformedMeasurementError",
    "SingularInnovationError",
    "SensorType",
    "MeasurementPackage",
    "GroundTruthPackage",
    "KalmanFilter",
    "normalize_angle",
    "calculate_jacobian",
    "FusionEKF",
    "StepOutcome",
    "TrackerState",
    "AccuracyTracker",
    "calculate_rmse"
]
