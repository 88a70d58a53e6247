"""
Measurement records exchanged between the log reader and the filter.

Two sensor modalities are supported:

    Laser (linear):     z = [px, py]                  in meters
    Radar (nonlinear):  z = [ρ, φ, ρ̇]                 range [m], bearing [rad], range rate [m/s]

Records are immutable once built. The constructor is the one place where the
vector length is checked against the sensor type; the filter trusts it.
"""

from dataclasses import dataclass
from enum import Enum

import numpy as np

from .exceptions import MalformedMeasurementError


class SensorType(Enum):
    """Sensor modality, valued by the letter used in measurement logs."""
    LASER = "L"
    RADAR = "R"

    @property
    def measurement_size(self) -> int:
        """Length of the raw measurement vector for this sensor."""
        return 2 if self is SensorType.LASER else 3

    @property
    def is_linear(self) -> bool:
        """True when the observation model is linear in the state."""
        return self is SensorType.LASER

    @classmethod
    def from_code(cls, code: str) -> 'SensorType':
        """
        Look up a sensor type from its log letter ('L' or 'R').

        Raises:
            MalformedMeasurementError: If the code is unknown
        """
        try:
            return cls(code.strip().upper())
        except ValueError:
            raise MalformedMeasurementError(f"Unknown sensor type code {code!r}") from None


@dataclass(frozen=True, eq=False)
class MeasurementPackage:
    """
    One sensor observation.

    Attributes:
        sensor_type: Which sensor produced the measurement
        raw_measurements: Read-only float array, [px, py] or [ρ, φ, ρ̇]
        timestamp: Acquisition time in microseconds
    """
    sensor_type: SensorType
    raw_measurements: np.ndarray
    timestamp: int

    def __post_init__(self):
        if not isinstance(self.sensor_type, SensorType):
            raise MalformedMeasurementError(f"Invalid sensor type {self.sensor_type!r}")

        values = np.array(self.raw_measurements, dtype=float).ravel()
        expected = self.sensor_type.measurement_size
        if values.shape != (expected,):
            raise MalformedMeasurementError(
                f"{self.sensor_type.name} measurement must have {expected} values, got {values.size}"
            )
        if not np.all(np.isfinite(values)):
            raise MalformedMeasurementError(f"{self.sensor_type.name} measurement contains NaN or inf")

        timestamp = self.timestamp
        if not isinstance(timestamp, (int, np.integer)) and not float(timestamp).is_integer():
            raise MalformedMeasurementError(
                f"Timestamp must be a whole number of microseconds, got {timestamp!r}"
            )

        values.setflags(write=False)
        object.__setattr__(self, 'raw_measurements', values)
        object.__setattr__(self, 'timestamp', int(timestamp))

    @classmethod
    def laser(cls, px: float, py: float, timestamp: int) -> 'MeasurementPackage':
        return cls(SensorType.LASER, np.array([px, py]), timestamp)

    @classmethod
    def radar(cls, rho: float, phi: float, rho_dot: float, timestamp: int) -> 'MeasurementPackage':
        return cls(SensorType.RADAR, np.array([rho, phi, rho_dot]), timestamp)

    def __repr__(self) -> str:
        values = ", ".join(f"{v:.4f}" for v in self.raw_measurements)
        return f"MeasurementPackage({self.sensor_type.name}, [{values}], t={self.timestamp})"


@dataclass(frozen=True)
class GroundTruthPackage:
    """True object state accompanying a measurement, [px, py, vx, vy]."""
    px: float
    py: float
    vx: float
    vy: float

    def as_array(self) -> np.ndarray:
        return np.array([self.px, self.py, self.vx, self.vy])
