"""
Visualization components for fusion tracker.
"""

from .plotter import TrajectoryPlotter

__all__ = [
    "TrajectoryPlotter"
]
