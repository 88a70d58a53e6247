"""
2D Ground-Truth Trajectory Generation for Tracking Scenarios

This module generates smooth planar object trajectories with analytic
velocities, used as ground truth when synthesizing laser and radar logs.

Mathematical Framework:
    Parametric trajectories with closed-form first derivatives, offset from the
    sensor origin so the object never passes through the radar's blind spot.

    figure8:  p(t) = c + [R sin(ωt), (R/2) sin(2ωt)]
    circle:   p(t) = c + [R cos(ωt), R sin(ωt)]
    linear:   p(t) = c + [Rω t, (Rω/2) t]

    where c is the center, R the radius, ω = 2π/T and T the period.
"""

import numpy as np
from typing import Dict, Optional, Tuple
from dataclasses import dataclass


@dataclass
class TrajectoryParameters:
    """Physical parameters for trajectory generation with validation."""

    radius: float = 10.0                            # Primary trajectory radius [m]
    period: float = 30.0                            # Trajectory completion period [s]
    center: Tuple[float, float] = (20.0, 10.0)      # Offset from the sensor origin [m]
    trajectory_type: str = "figure8"                # Trajectory pattern type

    def __post_init__(self):
        """Validate trajectory parameters."""
        if self.radius <= 0:
            raise ValueError(f"Trajectory radius must be positive, got {self.radius}")
        if self.period <= 0:
            raise ValueError(f"Period must be positive, got {self.period}")
        if len(self.center) != 2:
            raise ValueError(f"Center must be a 2D point, got {self.center}")
        if self.trajectory_type not in ["figure8", "circle", "linear"]:
            raise ValueError(f"Unknown trajectory type: {self.trajectory_type}")


class TrajectoryGenerator:
    """
    Planar ground-truth trajectory with analytic velocity.

    Attributes:
        params (TrajectoryParameters): Physical trajectory parameters
    """

    def __init__(self, params: Optional[TrajectoryParameters] = None):
        """
        Initialize trajectory generator.

        Args:
            params: Trajectory generation parameters. If None, uses defaults.
        """
        self.params = params if params is not None else TrajectoryParameters()
        self._omega = 2 * np.pi / self.params.period
        self._center = np.asarray(self.params.center, dtype=np.float64)

    def get_position(self, t: float) -> np.ndarray:
        """
        Position [px, py] in meters at time t [s].

        Raises:
            TypeError: If t is not numeric
        """
        if not isinstance(t, (int, float, np.number)):
            raise TypeError(f"Time must be numeric, got {type(t)}")

        R = self.params.radius
        wt = self._omega * t
        kind = self.params.trajectory_type

        if kind == "figure8":
            offset = [R * np.sin(wt), R * np.sin(2 * wt) / 2]
        elif kind == "circle":
            offset = [R * np.cos(wt), R * np.sin(wt)]
        else:
            speed = R * self._omega
            offset = [speed * t, speed * t / 2]

        return self._center + np.array(offset, dtype=np.float64)

    def get_velocity(self, t: float) -> np.ndarray:
        """
        Velocity [vx, vy] in m/s at time t [s], the analytic derivative of get_position.

        Raises:
            TypeError: If t is not numeric
        """
        if not isinstance(t, (int, float, np.number)):
            raise TypeError(f"Time must be numeric, got {type(t)}")

        R = self.params.radius
        w = self._omega
        wt = w * t
        kind = self.params.trajectory_type

        if kind == "figure8":
            velocity = [R * w * np.cos(wt), R * w * np.cos(2 * wt)]
        elif kind == "circle":
            velocity = [-R * w * np.sin(wt), R * w * np.cos(wt)]
        else:
            velocity = [R * w, R * w / 2]

        return np.array(velocity, dtype=np.float64)

    def get_state(self, t: float) -> np.ndarray:
        """Full ground-truth state [px, py, vx, vy] at time t."""
        return np.concatenate([self.get_position(t), self.get_velocity(t)])

    def sample_trajectory(self, num_points: int = 100) -> Dict[str, np.ndarray]:
        """
        Sample one period at regular intervals.

        Returns:
            Dictionary with 'time', 'position' (N, 2) and 'velocity' (N, 2)
        """
        if num_points < 2:
            raise ValueError("Number of points must be at least 2")

        t_samples = np.linspace(0, self.params.period, num_points)
        return {
            'time': t_samples,
            'position': np.array([self.get_position(t) for t in t_samples]),
            'velocity': np.array([self.get_velocity(t) for t in t_samples]),
        }

    def __repr__(self) -> str:
        return (f"TrajectoryGenerator(type={self.params.trajectory_type}, "
                f"radius={self.params.radius:.2f}m, period={self.params.period:.2f}s)")
