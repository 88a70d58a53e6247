"""
Simulation components for fusion tracker.

This module generates ground-truth trajectories and noisy laser/radar
measurements for testing and demonstrating the fusion filter.

Components:
    - TrajectoryGenerator: 2D parametric ground truth with analytic velocity
    - LaserSensor, RadarSensor: Gaussian sensor models
    - generate_scenario: Alternating laser/radar measurement log
"""

from .trajectory import TrajectoryGenerator, TrajectoryParameters
from .sensors import LaserSensor, RadarSensor, ScenarioParameters, generate_scenario

__all__ = [
    "TrajectoryGenerator",
    "TrajectoryParameters",
    "LaserSensor",
    "RadarSensor",
    "ScenarioParameters",
    "generate_scenario"
]
