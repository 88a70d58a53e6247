"""
Trajectory plots for fusion filter runs.

Draws the estimated track against ground truth and the raw laser/radar
measurements, with an optional position error panel. Figures are written to
disk; nothing here opens a window.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class TrajectoryPlotter:
    """
    Collects 2D tracks and measurement clouds and renders them in one figure.

    Attributes:
        trajectories (List[Dict]): Line series with styling
        measurements (List[Dict]): Scatter series with styling
        figure (matplotlib.figure.Figure): Last rendered figure
    """

    def __init__(self, figure_size: Tuple[int, int] = (14, 6)):
        """
        Args:
            figure_size: Matplotlib figure size in inches (width, height)
        """
        self.figure_size = figure_size
        self.trajectories: List[Dict[str, Any]] = []
        self.measurements: List[Dict[str, Any]] = []
        self.figure = None
        self._errors: Optional[np.ndarray] = None
        self._times: Optional[np.ndarray] = None

    @staticmethod
    def _as_points(positions: Union[np.ndarray, List[List[float]]]) -> np.ndarray:
        points = np.asarray(positions, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"Positions must be Nx2 array, got shape {points.shape}")
        return points

    def add_trajectory(self,
                       positions: Union[np.ndarray, List[List[float]]],
                       label: str = "Trajectory",
                       color: str = 'blue',
                       linestyle: str = '-') -> None:
        """
        Add a track drawn as a line.

        Raises:
            ValueError: If positions is not Nx2 or has fewer than 2 finite points
        """
        points = self._as_points(positions)
        if len(points) < 2:
            raise ValueError("Trajectory must contain at least 2 points")
        if not np.all(np.isfinite(points)):
            raise ValueError("Trajectory contains invalid values (inf/nan)")

        self.trajectories.append({
            'positions': points.copy(), 'label': label, 'color': color, 'linestyle': linestyle
        })
        logger.debug(f"Added trajectory '{label}' with {len(points)} points")

    def add_measurements(self,
                         positions: Union[np.ndarray, List[List[float]]],
                         label: str = "Measurements",
                         color: str = 'gray',
                         marker: str = '.') -> None:
        """Add a measurement cloud drawn as a scatter plot."""
        points = self._as_points(positions)
        self.measurements.append({
            'positions': points.copy(), 'label': label, 'color': color, 'marker': marker
        })

    def set_position_errors(self, times: np.ndarray, errors: np.ndarray) -> None:
        """Position error magnitude over time, shown in a second panel."""
        times = np.asarray(times, dtype=np.float64)
        errors = np.asarray(errors, dtype=np.float64)
        if times.shape != errors.shape:
            raise ValueError(f"Times {times.shape} and errors {errors.shape} must match")
        self._times = times
        self._errors = errors

    def plot(self, title: str = "Laser/Radar EKF Tracking"):
        """
        Render everything added so far.

        Returns:
            The matplotlib Figure
        """
        if not self.trajectories and not self.measurements:
            raise ValueError("Nothing to plot")

        show_errors = self._errors is not None and self._errors.size > 0
        self.figure, axes = plt.subplots(1, 2 if show_errors else 1, figsize=self.figure_size,
                                         squeeze=False)
        ax = axes[0, 0]

        for series in self.measurements:
            points = series['positions']
            ax.scatter(points[:, 0], points[:, 1], s=12, color=series['color'],
                       marker=series['marker'], label=series['label'], alpha=0.6)

        for series in self.trajectories:
            points = series['positions']
            ax.plot(points[:, 0], points[:, 1], color=series['color'], linestyle=series['linestyle'],
                    label=series['label'], linewidth=2)

        ax.set_xlabel('X Position (m)')
        ax.set_ylabel('Y Position (m)')
        ax.set_title(title)
        ax.set_aspect('equal', adjustable='datalim')
        ax.grid(True, alpha=0.3)
        ax.legend()

        if show_errors:
            err_ax = axes[0, 1]
            err_ax.plot(self._times, self._errors, 'b-', linewidth=1)
            err_ax.set_xlabel('Time (s)')
            err_ax.set_ylabel('Position Error (m)')
            err_ax.set_title('Position Error Over Time')
            err_ax.grid(True, alpha=0.3)

        self.figure.tight_layout()
        return self.figure

    def save(self, path: Union[str, Path], dpi: int = 120) -> None:
        """Render (if needed), write the figure to path and release it."""
        if self.figure is None:
            self.plot()
        self.figure.savefig(path, dpi=dpi)
        plt.close(self.figure)
        self.figure = None
        logger.info(f"Saved trajectory plot to {path}")

    @classmethod
    def from_results(cls, frame: pd.DataFrame, **kwargs) -> 'TrajectoryPlotter':
        """
        Build a plotter from the table produced by data.writer.build_results_frame.
        """
        plotter = cls(**kwargs)

        for code, label, color, marker in (('L', 'Laser', 'tab:orange', '.'),
                                           ('R', 'Radar', 'tab:purple', 'x')):
            subset = frame[frame['sensor'] == code]
            if len(subset):
                plotter.add_measurements(subset[['meas_px', 'meas_py']].to_numpy(), label, color, marker)

        truth = frame[['gt_px', 'gt_py']].dropna()
        if len(truth) >= 2:
            plotter.add_trajectory(truth.to_numpy(), 'Ground Truth', 'green', '--')

        if len(frame) >= 2:
            plotter.add_trajectory(frame[['est_px', 'est_py']].to_numpy(), 'EKF Estimate', 'red')

        with_truth = frame.dropna(subset=['gt_px', 'gt_py'])
        if len(with_truth):
            errors = np.hypot(with_truth['est_px'] - with_truth['gt_px'],
                              with_truth['est_py'] - with_truth['gt_py']).to_numpy()
            times = (with_truth['timestamp'] - frame['timestamp'].iloc[0]).to_numpy() / 1e6
            plotter.set_position_errors(times, errors)

        return plotter
