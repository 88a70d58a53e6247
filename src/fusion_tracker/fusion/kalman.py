"""
Kalman Filter Core for Laser/Radar Object Tracking

This module holds the sensor-agnostic part of the Extended Kalman Filter: the
state, its covariance and the model matrices, plus the prediction and the two
correction variants. Which matrices to use for a given measurement is decided
by the caller (see fusion_ekf.FusionEKF).

Mathematical Foundation:

State Evolution (constant velocity):
    x(k+1) = F(Δt) x(k) + w(k),     w(k) ~ N(0, Q(Δt))
    z(k)   = h(x(k)) + v(k),        v(k) ~ N(0, R)

Prediction:
    x̂(k|k-1) = F x̂(k-1|k-1)
    P(k|k-1) = F P(k-1|k-1) Fᵀ + Q

Update:
    y = z - H x̂               (linear sensor)
    y = z - h(x̂)              (nonlinear sensor, H = ∂h/∂x at x̂)
    S = H P Hᵀ + R
    K = P Hᵀ S⁻¹
    x̂ = x̂ + K y
    P = (I - K H) P

State Vector Definition:
    x = [px, py, vx, vy]ᵀ

Where:
    - [px, py]: Position in the sensor frame (m)
    - [vx, vy]: Velocity in the sensor frame (m/s)
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..exceptions import SingularInnovationError
from .tools import cartesian_to_polar

logger = logging.getLogger(__name__)

STATE_SIZE = 4


def normalize_angle(angle: float) -> float:
    """
    Wrap an angle into (-π, π].

    The IEEE remainder is exact and lands in [-π, π] in one step for any
    finite input, however large; -π is then moved to π so both 3π and -3π
    map to π. Angles already inside the interval are returned unchanged.
    """
    angle = math.remainder(angle, 2.0 * math.pi)
    if angle <= -math.pi:
        angle += 2.0 * math.pi
    return angle


@dataclass
class FilterDiagnostics:
    """Container for filter diagnostic information."""
    condition_number: float
    innovation_magnitude: float
    normalized_innovation_squared: Optional[float]
    prediction_count: int
    update_count: int


class KalmanFilter:
    """
    Four-state Kalman filter with a linear and a linearized correction step.

    The filter owns fixed-size arrays that are allocated once and then
    overwritten in place by every step:

        x (4,)   state estimate
        P (4, 4) state covariance
        F (4, 4) state transition
        Q (4, 4) process noise covariance
        H (m, 4) observation matrix or Jacobian, m = 2 (laser) or 3 (radar)
        R (m, m) observation noise covariance

    F, Q, H and R are assigned by the caller before each call; the filter has
    no knowledge of sensor types.

    Attributes:
        joseph_form: Use the Joseph form for the covariance correction
        last_innovation: Residual y of the most recent update
        last_nis: Normalized innovation squared yᵀS⁻¹y of the most recent update
    """

    # Innovation covariances with a larger condition number are treated as singular
    MAX_CONDITION_NUMBER = 1e12

    def __init__(self, joseph_form: bool = False, range_threshold: float = 1e-4):
        """
        Initialize the filter with a zero state and identity covariance.

        Args:
            joseph_form: Covariance update form, see class docstring
            range_threshold: Range below which the radar range rate is not
                             predicted (avoids dividing by ρ ≈ 0)
        """
        self.x = np.zeros(STATE_SIZE)
        self.P = np.eye(STATE_SIZE)
        self.F = np.eye(STATE_SIZE)
        self.Q = np.zeros((STATE_SIZE, STATE_SIZE))
        self.H = np.zeros((2, STATE_SIZE))
        self.R = np.eye(2)

        self.joseph_form = joseph_form
        self.range_threshold = range_threshold

        self._identity = np.eye(STATE_SIZE)

        self.last_innovation: Optional[np.ndarray] = None
        self.last_nis: Optional[float] = None
        self.prediction_count = 0
        self.update_count = 0

    def init(self, x: np.ndarray, P: np.ndarray) -> None:
        """
        Overwrite state and covariance.

        Raises:
            ValueError: If either array has the wrong shape
        """
        x = np.asarray(x, dtype=float)
        P = np.asarray(P, dtype=float)
        if x.shape != (STATE_SIZE,):
            raise ValueError(f"State must have {STATE_SIZE} elements, got shape {x.shape}")
        if P.shape != (STATE_SIZE, STATE_SIZE):
            raise ValueError(f"Covariance must be {STATE_SIZE}x{STATE_SIZE}, got shape {P.shape}")

        self.x[:] = x
        self.P[:] = P

    def predict(self) -> None:
        """
        Propagate state and covariance through the process model.

        Implements:
            x = F x
            P = F P Fᵀ + Q
        """
        self.x[:] = self.F @ self.x
        self.P[:] = self.F @ self.P @ self.F.T + self.Q
        self.prediction_count += 1

    def update(self, z: np.ndarray) -> None:
        """
        Correct the estimate with a measurement from a linear sensor.

        Args:
            z: Measurement vector, same length as the rows of H

        Raises:
            ValueError: If z does not match H
            SingularInnovationError: If S cannot be inverted
        """
        z = self._check_measurement(z)
        y = z - self.H @ self.x
        self._correct(y)

    def update_ekf(self, z: np.ndarray) -> None:
        """
        Correct the estimate with a radar measurement [ρ, φ, ρ̇].

        The predicted measurement is h(x) evaluated directly; H must hold the
        Jacobian of h at the current state. The bearing residual is wrapped
        into (-π, π] so a target crossing the ±π boundary does not produce a
        residual of almost 2π.

        Args:
            z: Radar measurement [ρ, φ, ρ̇]

        Raises:
            ValueError: If z is not a 3-vector or H is not 3x4
            SingularInnovationError: If S cannot be inverted
        """
        z = self._check_measurement(z)
        if z.shape != (3,):
            raise ValueError(f"Radar measurement must have 3 elements, got {z.shape[0]}")

        y = z - cartesian_to_polar(self.x, self.range_threshold)
        y[1] = normalize_angle(y[1])
        self._correct(y)

    def _check_measurement(self, z: np.ndarray) -> np.ndarray:
        z = np.asarray(z, dtype=float)
        if z.shape != (self.H.shape[0],):
            raise ValueError(
                f"Measurement of shape {z.shape} does not match observation matrix {self.H.shape}"
            )
        return z

    def _correct(self, y: np.ndarray) -> None:
        """Shared Kalman correction for a residual y. State is untouched on failure."""
        H = self.H
        R = self.R
        PHt = self.P @ H.T
        S = H @ PHt + R
        S_inv = self._invert_innovation(S)

        K = PHt @ S_inv
        I_KH = self._identity - K @ H

        self.x[:] = self.x + K @ y
        if self.joseph_form:
            self.P[:] = I_KH @ self.P @ I_KH.T + K @ R @ K.T
        else:
            self.P[:] = I_KH @ self.P

        self.last_innovation = y
        self.last_nis = float(y @ S_inv @ y)
        self.update_count += 1

        logger.debug(f"Update applied: |y|={np.linalg.norm(y):.4f}, NIS={self.last_nis:.3f}")

    def _invert_innovation(self, S: np.ndarray) -> np.ndarray:
        """
        Invert the innovation covariance.

        Raises:
            SingularInnovationError: If S is non-finite, ill-conditioned or singular
        """
        if not np.all(np.isfinite(S)):
            raise SingularInnovationError("Innovation covariance contains NaN or infinite values")

        condition_number = np.linalg.cond(S)
        if not condition_number < self.MAX_CONDITION_NUMBER:
            raise SingularInnovationError(
                f"Innovation covariance is ill-conditioned: κ={condition_number:.2e}"
            )

        try:
            return np.linalg.inv(S)
        except np.linalg.LinAlgError as e:
            raise SingularInnovationError(f"Innovation covariance is singular: {e}") from e

    def get_diagnostics(self) -> FilterDiagnostics:
        """Snapshot of numerical health and step counters."""
        try:
            condition_number = float(np.linalg.cond(self.P))
        except np.linalg.LinAlgError:
            condition_number = float('inf')

        return FilterDiagnostics(
            condition_number=condition_number,
            innovation_magnitude=(
                float(np.linalg.norm(self.last_innovation)) if self.last_innovation is not None else 0.0
            ),
            normalized_innovation_squared=self.last_nis,
            prediction_count=self.prediction_count,
            update_count=self.update_count,
        )
