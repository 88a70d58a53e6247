"""
Laser/radar fusion orchestrator.

FusionEKF turns a time-ordered stream of MeasurementPackage records into a
single belief state. It owns one KalmanFilter and decides, for every record:

    1. Whether tracking has started (first record initializes the state)
    2. The elapsed time Δt and the matching process model F(Δt), Q(Δt)
    3. Which observation model to load into the filter before the update

Process Model (discretized constant acceleration noise):

         ⎡1 0 Δt 0 ⎤          ⎡Δt⁴/4·σ²ax  0           Δt³/2·σ²ax  0         ⎤
    F =  ⎢0 1 0  Δt⎥     Q =  ⎢0           Δt⁴/4·σ²ay  0           Δt³/2·σ²ay⎥
         ⎢0 0 1  0 ⎥          ⎢Δt³/2·σ²ax  0           Δt²·σ²ax    0         ⎥
         ⎣0 0 0  1 ⎦          ⎣0           Δt³/2·σ²ay  0           Δt²·σ²ay  ⎦

Known limitation: the near-origin clamp is applied to the first fix only. If
later updates drive the position estimate back to the origin, the radar
Jacobian degenerates and radar updates are skipped until a laser update moves
the estimate away again.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

import numpy as np

from ..config import FusionConfig
from ..measurement import MeasurementPackage, SensorType
from .kalman import KalmanFilter, STATE_SIZE
from .tools import calculate_jacobian, polar_to_cartesian

logger = logging.getLogger(__name__)

MICROSECONDS_PER_SECOND = 1_000_000.0


class TrackerState(Enum):
    """Lifecycle of a FusionEKF instance."""
    UNINITIALIZED = "uninitialized"
    TRACKING = "tracking"


class StepOutcome(Enum):
    """What process_measurement did with a record."""
    INITIALIZED = "initialized"     # First record, state created, no predict/update
    UPDATED = "updated"             # Measurement update applied
    DEGRADED = "degraded"           # Update skipped, measurement carried no usable information


@dataclass(frozen=True, eq=False)
class MeasurementModel:
    """
    Observation model for one sensor type.

    Attributes:
        sensor_type: Sensor the model belongs to
        noise: Measurement noise covariance R
        observation_matrix: Fixed H for linear sensors; None when H must be
                            recomputed as a Jacobian at every update
    """
    sensor_type: SensorType
    noise: np.ndarray
    observation_matrix: Optional[np.ndarray] = None

    @property
    def is_linear(self) -> bool:
        return self.observation_matrix is not None


class FusionEKF:
    """
    Extended Kalman Filter fusing laser and radar measurements of one object.

    Usage:
        fusion = FusionEKF()
        for package in packages:
            fusion.process_measurement(package)
            estimate = fusion.state      # [px, py, vx, vy]

    A FusionEKF is not thread-safe and cannot be re-initialized; build a new
    instance to track a new object.
    """

    def __init__(self, config: Optional[FusionConfig] = None):
        """
        Args:
            config: Filter tuning, defaults to FusionConfig()
        """
        self.config = config if config is not None else FusionConfig()

        self.ekf = KalmanFilter(
            joseph_form=self.config.joseph_form,
            range_threshold=self.config.position_epsilon,
        )

        laser_h = np.zeros((2, STATE_SIZE))
        laser_h[0, 0] = 1.0
        laser_h[1, 1] = 1.0

        self.models = {
            SensorType.LASER: MeasurementModel(
                SensorType.LASER, self.config.laser_noise_matrix(), laser_h
            ),
            SensorType.RADAR: MeasurementModel(
                SensorType.RADAR, self.config.radar_noise_matrix()
            ),
        }

        self._tracker_state = TrackerState.UNINITIALIZED
        self.previous_timestamp = 0
        self.skipped_updates = 0
        self.skipped_predictions = 0

    @property
    def tracker_state(self) -> TrackerState:
        return self._tracker_state

    @property
    def is_initialized(self) -> bool:
        return self._tracker_state is TrackerState.TRACKING

    @property
    def state(self) -> np.ndarray:
        """Copy of the current estimate [px, py, vx, vy]."""
        return self.ekf.x.copy()

    @property
    def covariance(self) -> np.ndarray:
        """Copy of the current 4x4 state covariance."""
        return self.ekf.P.copy()

    def process_measurement(self, package: MeasurementPackage) -> StepOutcome:
        """
        Run one filter cycle for a measurement.

        Args:
            package: Measurement record; timestamps must be non-decreasing

        Returns:
            StepOutcome describing what happened

        Raises:
            SingularInnovationError: If the update could not invert S; the
                                     prediction for this record has already
                                     been applied
        """
        if self._tracker_state is TrackerState.UNINITIALIZED:
            self._initialize(package)
            return StepOutcome.INITIALIZED

        # Prediction
        dt = (package.timestamp - self.previous_timestamp) / MICROSECONDS_PER_SECOND
        self.previous_timestamp = package.timestamp

        self._update_process_model(dt)

        if dt >= self.config.dt_epsilon:
            self.ekf.predict()
        else:
            self.skipped_predictions += 1
            logger.debug(f"Skipping prediction, dt={dt:.3e}s below {self.config.dt_epsilon:.0e}s")

        # Update
        model = self.models[package.sensor_type]
        if model.is_linear:
            self.ekf.H = model.observation_matrix
            self.ekf.R = model.noise
            self.ekf.update(package.raw_measurements)
        else:
            Hj = calculate_jacobian(self.ekf.x, self.config.jacobian_threshold)
            if not Hj.any():
                self.skipped_updates += 1
                logger.warning(
                    f"Radar update at t={package.timestamp} skipped: estimate too close to the sensor"
                )
                return StepOutcome.DEGRADED
            self.ekf.H = Hj
            self.ekf.R = model.noise
            self.ekf.update_ekf(package.raw_measurements)

        return StepOutcome.UPDATED

    def _initialize(self, package: MeasurementPackage) -> None:
        """Create the state from the first measurement and start tracking."""
        z = package.raw_measurements

        if package.sensor_type is SensorType.RADAR:
            # Range rate alone cannot resolve a 2-D velocity
            px, py = polar_to_cartesian(z[0], z[1])
        else:
            px, py = z[0], z[1]

        eps = self.config.position_epsilon
        if abs(px) < eps and abs(py) < eps:
            px = eps
            py = eps

        self.ekf.init(np.array([px, py, 0.0, 0.0]), self.config.initial_covariance())

        self.previous_timestamp = package.timestamp
        self._tracker_state = TrackerState.TRACKING

        logger.info(f"EKF initialized from {package.sensor_type.name}: x={self.ekf.x}")

    def _update_process_model(self, dt: float) -> None:
        """Rewrite F and Q in place for a time step of dt seconds."""
        F = self.ekf.F
        F[0, 2] = dt
        F[1, 3] = dt

        dt_2 = dt * dt
        dt_3 = dt_2 * dt
        dt_4 = dt_3 * dt
        noise_ax = self.config.noise_ax
        noise_ay = self.config.noise_ay

        Q = self.ekf.Q
        Q[0, 0] = dt_4 / 4 * noise_ax
        Q[0, 2] = dt_3 / 2 * noise_ax
        Q[1, 1] = dt_4 / 4 * noise_ay
        Q[1, 3] = dt_3 / 2 * noise_ay
        Q[2, 0] = dt_3 / 2 * noise_ax
        Q[2, 2] = dt_2 * noise_ax
        Q[3, 1] = dt_3 / 2 * noise_ay
        Q[3, 3] = dt_2 * noise_ay

    def get_position_uncertainty(self) -> np.ndarray:
        """Position standard deviations [σpx, σpy] in meters."""
        return np.sqrt(np.diag(self.ekf.P)[0:2])

    def get_velocity_uncertainty(self) -> np.ndarray:
        """Velocity standard deviations [σvx, σvy] in m/s."""
        return np.sqrt(np.diag(self.ekf.P)[2:4])

    def get_state_dict(self) -> Dict[str, Any]:
        """
        Get comprehensive state information as dictionary.

        Returns:
            Dictionary containing state, uncertainty and diagnostic information
        """
        diagnostics = self.ekf.get_diagnostics()
        return {
            'tracker_state': self._tracker_state.value,
            'timestamp': self.previous_timestamp,
            'position': self.ekf.x[0:2].tolist(),
            'velocity': self.ekf.x[2:4].tolist(),
            'position_uncertainty': self.get_position_uncertainty().tolist(),
            'velocity_uncertainty': self.get_velocity_uncertainty().tolist(),
            'covariance_trace': float(np.trace(self.ekf.P)),
            'condition_number': diagnostics.condition_number,
            'last_nis': diagnostics.normalized_innovation_squared,
            'prediction_count': diagnostics.prediction_count,
            'update_count': diagnostics.update_count,
            'skipped_predictions': self.skipped_predictions,
            'skipped_updates': self.skipped_updates,
        }
