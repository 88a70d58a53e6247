"""
Tuning parameters for the laser/radar fusion filter.

All noise values are variances, not standard deviations. The defaults are the
values the filter was tuned with on the synthetic laser/radar benchmark data:

    Process noise:   σ²_ax = σ²_ay = 9 (m/s²)²
    Laser noise:     σ²_x = σ²_y = 0.0225 m²          (0.15 m std dev)
    Radar noise:     σ²_ρ = 0.09 m², σ²_φ = 0.0009 rad², σ²_ρ̇ = 0.09 (m/s)²
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass
class FusionConfig:
    """Filter tuning and numerical guard thresholds, validated on creation."""

    noise_ax: float = 9.0                       # Acceleration noise intensity x [(m/s²)²]
    noise_ay: float = 9.0                       # Acceleration noise intensity y [(m/s²)²]
    laser_noise: Tuple[float, float] = (0.0225, 0.0225)
    radar_noise: Tuple[float, float, float] = (0.09, 0.0009, 0.09)
    initial_position_variance: float = 1.0
    initial_velocity_variance: float = 1000.0
    position_epsilon: float = 1e-4              # Clamp for a first fix at the origin [m]
    dt_epsilon: float = 1e-6                    # Smallest time step that triggers a prediction [s]
    jacobian_threshold: float = 1e-4            # Smallest px² + py² the radar Jacobian accepts [m²]
    joseph_form: bool = False                   # Use (I-KH)P(I-KH)ᵀ + KRKᵀ for the covariance update

    def __post_init__(self):
        if self.noise_ax < 0 or self.noise_ay < 0:
            raise ValueError(
                f"Acceleration noise must be non-negative, got ({self.noise_ax}, {self.noise_ay})"
            )
        if len(self.laser_noise) != 2:
            raise ValueError(f"Laser noise needs 2 variances, got {len(self.laser_noise)}")
        if len(self.radar_noise) != 3:
            raise ValueError(f"Radar noise needs 3 variances, got {len(self.radar_noise)}")
        if any(v <= 0 for v in self.laser_noise) or any(v <= 0 for v in self.radar_noise):
            raise ValueError("Measurement noise variances must be positive")
        if self.initial_position_variance <= 0 or self.initial_velocity_variance <= 0:
            raise ValueError("Initial variances must be positive")
        for name in ("position_epsilon", "dt_epsilon", "jacobian_threshold"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

    def laser_noise_matrix(self) -> np.ndarray:
        """2x2 laser measurement covariance R_laser."""
        return np.diag(np.asarray(self.laser_noise, dtype=float))

    def radar_noise_matrix(self) -> np.ndarray:
        """3x3 radar measurement covariance R_radar."""
        return np.diag(np.asarray(self.radar_noise, dtype=float))

    def initial_covariance(self) -> np.ndarray:
        """Diagonal 4x4 covariance used when tracking starts."""
        return np.diag([
            self.initial_position_variance,
            self.initial_position_variance,
            self.initial_velocity_variance,
            self.initial_velocity_variance,
        ])
