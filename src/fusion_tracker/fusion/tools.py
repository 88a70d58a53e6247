"""
Radar observation model and its linearization.

The radar measures the object in polar coordinates relative to the sensor:

    h(x) = [ρ, φ, ρ̇]ᵀ
    ρ  = √(px² + py²)
    φ  = atan2(py, px)
    ρ̇  = (px·vx + py·vy) / ρ

The EKF linearizes h around the current estimate with the Jacobian

          ⎡ px/ρ                 py/ρ                 0     0    ⎤
    Hj =  ⎢ -py/ρ²               px/ρ²                0     0    ⎥
          ⎣ py(vx·py − vy·px)/ρ³ px(vy·px − vx·py)/ρ³ px/ρ  py/ρ ⎦

Both functions are stateless; every call depends only on its arguments.
"""

import logging
from typing import Tuple

import numpy as np

logger = logging.getLogger(__name__)


def calculate_jacobian(state: np.ndarray, threshold: float = 1e-4) -> np.ndarray:
    """
    Jacobian of the radar observation function at the given state.

    Args:
        state: State estimate [px, py, vx, vy]
        threshold: Smallest px² + py² accepted before the Jacobian is
                   considered singular

    Returns:
        3x4 Jacobian matrix, or a 3x4 zero matrix when px² + py² is below
        threshold. A zero Jacobian means a radar update at this state
        carries no usable information.
    """
    px, py, vx, vy = state[0], state[1], state[2], state[3]

    c1 = px * px + py * py
    Hj = np.zeros((3, 4))

    if c1 < threshold:
        logger.warning(f"CalculateJacobian: division by zero (px²+py²={c1:.2e}), returning zero Jacobian")
        return Hj

    c2 = np.sqrt(c1)
    c3 = c1 * c2

    Hj[0, 0] = px / c2
    Hj[0, 1] = py / c2

    Hj[1, 0] = -py / c1
    Hj[1, 1] = px / c1

    Hj[2, 0] = py * (vx * py - vy * px) / c3
    Hj[2, 1] = px * (vy * px - vx * py) / c3
    Hj[2, 2] = px / c2
    Hj[2, 3] = py / c2

    return Hj


def cartesian_to_polar(state: np.ndarray, threshold: float = 1e-4) -> np.ndarray:
    """
    Map a state [px, py, vx, vy] to the radar measurement space [ρ, φ, ρ̇].

    Args:
        state: State estimate
        threshold: Range below which ρ̇ is reported as 0 instead of dividing by ρ

    Returns:
        Predicted radar measurement, always finite for a finite state
    """
    px, py, vx, vy = state[0], state[1], state[2], state[3]

    rho = np.sqrt(px * px + py * py)
    phi = np.arctan2(py, px)
    rho_dot = (px * vx + py * vy) / rho if rho >= threshold else 0.0

    return np.array([rho, phi, rho_dot])


def polar_to_cartesian(rho: float, phi: float) -> Tuple[float, float]:
    """Convert a radar range/bearing pair to a Cartesian position (px, py)."""
    return rho * np.cos(phi), rho * np.sin(phi)
