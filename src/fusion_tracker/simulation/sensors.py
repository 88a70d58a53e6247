"""
Laser and radar sensor simulation.

Both sensors sit at the origin of the tracking frame and report the true
object state corrupted by zero-mean Gaussian noise:

    Laser:  z = [px, py] + n,             n ~ N(0, diag(σx², σy²))
    Radar:  z = [ρ, φ, ρ̇] + n,            n ~ N(0, diag(σρ², σφ², σρ̇²))

The default standard deviations match the variances the filter is tuned for
(see fusion_tracker.config), so simulated runs are statistically consistent.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..data.reader import LogEntry
from ..fusion.kalman import normalize_angle
from ..measurement import GroundTruthPackage, MeasurementPackage, SensorType
from .trajectory import TrajectoryGenerator, TrajectoryParameters

logger = logging.getLogger(__name__)


class LaserSensor:
    """
    Cartesian position sensor.

    Attributes:
        noise_std: Standard deviation of [x, y] noise (meters)
    """

    def __init__(self, noise_std: Tuple[float, float] = (0.15, 0.15),
                 rng: Optional[np.random.Generator] = None):
        if len(noise_std) != 2 or any(s < 0 for s in noise_std):
            raise ValueError(f"Laser noise needs 2 non-negative std devs, got {noise_std}")
        self.noise_std = np.asarray(noise_std, dtype=float)
        self.rng = rng if rng is not None else np.random.default_rng()

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> MeasurementPackage:
        """Noisy [px, py] of a true state [px, py, vx, vy]."""
        z = np.asarray(true_state[0:2], dtype=float) + self.rng.normal(0.0, self.noise_std)
        return MeasurementPackage(SensorType.LASER, z, timestamp)

    def get_measurement_covariance(self) -> np.ndarray:
        return np.diag(self.noise_std ** 2)


class RadarSensor:
    """
    Polar range / bearing / range-rate sensor.

    Attributes:
        noise_std: Standard deviation of [ρ, φ, ρ̇] noise (m, rad, m/s)
    """

    def __init__(self, noise_std: Tuple[float, float, float] = (0.3, 0.03, 0.3),
                 rng: Optional[np.random.Generator] = None):
        if len(noise_std) != 3 or any(s < 0 for s in noise_std):
            raise ValueError(f"Radar noise needs 3 non-negative std devs, got {noise_std}")
        self.noise_std = np.asarray(noise_std, dtype=float)
        self.rng = rng if rng is not None else np.random.default_rng()

    def get_measurement(self, true_state: np.ndarray, timestamp: int) -> MeasurementPackage:
        """
        Noisy [ρ, φ, ρ̇] of a true state [px, py, vx, vy].

        Raises:
            ValueError: If the object sits on the sensor (ρ = 0)
        """
        px, py, vx, vy = (float(v) for v in true_state[0:4])
        rho = np.hypot(px, py)
        if rho == 0.0:
            raise ValueError("Radar cannot observe an object located at the sensor origin")

        phi = np.arctan2(py, px)
        rho_dot = (px * vx + py * vy) / rho

        noise = self.rng.normal(0.0, self.noise_std)
        z = np.array([
            max(rho + noise[0], 0.0),
            normalize_angle(phi + noise[1]),
            rho_dot + noise[2],
        ])
        return MeasurementPackage(SensorType.RADAR, z, timestamp)

    def get_measurement_covariance(self) -> np.ndarray:
        return np.diag(self.noise_std ** 2)


@dataclass
class ScenarioParameters:
    """Settings for a synthetic laser/radar log."""

    duration: float = 25.0                          # Scenario length [s]
    rate: float = 20.0                              # Measurements per second, both sensors combined
    start_timestamp: int = 1477010443000000         # First timestamp [µs]
    seed: Optional[int] = None
    laser_std: Tuple[float, float] = (0.15, 0.15)
    radar_std: Tuple[float, float, float] = (0.3, 0.03, 0.3)
    trajectory: TrajectoryParameters = field(default_factory=TrajectoryParameters)

    def __post_init__(self):
        if self.duration <= 0:
            raise ValueError(f"Duration must be positive, got {self.duration}")
        if self.rate <= 0:
            raise ValueError(f"Rate must be positive, got {self.rate}")


def generate_scenario(params: Optional[ScenarioParameters] = None) -> List[LogEntry]:
    """
    Simulate an alternating laser/radar measurement log with ground truth.

    The first measurement is a laser reading, then sensors alternate.

    Args:
        params: Scenario settings, defaults to ScenarioParameters()

    Returns:
        Time-ordered LogEntry list
    """
    params = params if params is not None else ScenarioParameters()
    rng = np.random.default_rng(params.seed)

    trajectory = TrajectoryGenerator(params.trajectory)
    laser = LaserSensor(params.laser_std, rng)
    radar = RadarSensor(params.radar_std, rng)

    step_us = int(round(1_000_000 / params.rate))
    count = int(round(params.duration * params.rate))

    entries = []
    for k in range(count):
        timestamp = params.start_timestamp + k * step_us
        t = k * step_us / 1_000_000
        truth = trajectory.get_state(t)

        sensor = laser if k % 2 == 0 else radar
        measurement = sensor.get_measurement(truth, timestamp)
        entries.append(LogEntry(measurement, GroundTruthPackage(*truth), k + 1))

    logger.info(f"Simulated {len(entries)} measurements over {params.duration:.1f}s ({trajectory})")
    return entries
