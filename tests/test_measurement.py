import dataclasses
import pytest
import numpy as np
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fusion_tracker.config import FusionConfig
from fusion_tracker.exceptions import FusionTrackerError, MalformedMeasurementError
from fusion_tracker.measurement import GroundTruthPackage, MeasurementPackage, SensorType


class TestSensorType:
    """Test sensor type lookup and properties"""

    def test_codes(self):
        assert SensorType.from_code("L") is SensorType.LASER
        assert SensorType.from_code("R") is SensorType.RADAR
        assert SensorType.from_code(" r ") is SensorType.RADAR

    def test_unknown_code(self):
        with pytest.raises(MalformedMeasurementError, match="Unknown sensor type"):
            SensorType.from_code("X")

    def test_measurement_sizes(self):
        assert SensorType.LASER.measurement_size == 2
        assert SensorType.RADAR.measurement_size == 3
        assert SensorType.LASER.is_linear
        assert not SensorType.RADAR.is_linear


class TestMeasurementPackage:
    """Test measurement record construction and validation"""

    def test_laser_package(self):
        package = MeasurementPackage.laser(0.3, -1.2, 1477010443000000)

        assert package.sensor_type is SensorType.LASER
        np.testing.assert_array_equal(package.raw_measurements, [0.3, -1.2])
        assert package.timestamp == 1477010443000000
        assert isinstance(package.timestamp, int)

    def test_radar_package_from_list(self):
        package = MeasurementPackage(SensorType.RADAR, [1.0, 0.5, -0.2], 100)

        assert package.raw_measurements.dtype == np.float64
        assert package.raw_measurements.shape == (3,)

    def test_length_must_match_sensor(self):
        with pytest.raises(MalformedMeasurementError):
            MeasurementPackage(SensorType.LASER, [1.0, 2.0, 3.0], 0)
        with pytest.raises(MalformedMeasurementError):
            MeasurementPackage(SensorType.RADAR, [1.0, 2.0], 0)

    def test_non_finite_values_rejected(self):
        with pytest.raises(MalformedMeasurementError, match="NaN"):
            MeasurementPackage(SensorType.LASER, [np.nan, 2.0], 0)

    def test_fractional_timestamp_rejected(self):
        with pytest.raises(MalformedMeasurementError, match="whole number"):
            MeasurementPackage.laser(1.0, 2.0, 1.9)
        with pytest.raises(MalformedMeasurementError):
            MeasurementPackage.laser(1.0, 2.0, float('nan'))

    def test_integral_timestamps_accepted(self):
        assert MeasurementPackage.laser(1.0, 2.0, 100.0).timestamp == 100
        assert MeasurementPackage.laser(1.0, 2.0, np.int64(1477010443000000)).timestamp == 1477010443000000

    def test_invalid_sensor_type(self):
        with pytest.raises(MalformedMeasurementError):
            MeasurementPackage("L", [1.0, 2.0], 0)

    def test_malformed_error_is_value_error(self):
        """Callers catching ValueError also see malformed measurements"""
        with pytest.raises(ValueError):
            MeasurementPackage(SensorType.RADAR, [1.0], 0)

    def test_package_is_immutable(self):
        package = MeasurementPackage.laser(1.0, 2.0, 5)

        with pytest.raises(dataclasses.FrozenInstanceError):
            package.timestamp = 10
        with pytest.raises(ValueError):
            package.raw_measurements[0] = 99.0

    def test_input_array_is_copied(self):
        values = np.array([1.0, 2.0])
        package = MeasurementPackage(SensorType.LASER, values, 0)

        values[0] = 50.0

        assert package.raw_measurements[0] == 1.0

    def test_repr(self):
        package = MeasurementPackage.radar(1.0, 0.5, 0.25, 42)
        assert repr(package) == "MeasurementPackage(RADAR, [1.0000, 0.5000, 0.2500], t=42)"


class TestGroundTruthPackage:

    def test_as_array(self):
        truth = GroundTruthPackage(1.0, 2.0, 3.0, 4.0)
        np.testing.assert_array_equal(truth.as_array(), [1.0, 2.0, 3.0, 4.0])


class TestErrors:

    def test_line_number_prefix(self):
        error = MalformedMeasurementError("bad field", line_number=7)

        assert str(error) == "line 7: bad field"
        assert error.line_number == 7
        assert isinstance(error, FusionTrackerError)

    def test_without_line_number(self):
        error = MalformedMeasurementError("bad field")

        assert str(error) == "bad field"
        assert error.line_number is None


class TestFusionConfig:
    """Test filter tuning validation"""

    def test_defaults(self):
        config = FusionConfig()

        assert config.noise_ax == 9.0
        assert config.noise_ay == 9.0
        np.testing.assert_array_equal(config.laser_noise_matrix(), np.diag([0.0225, 0.0225]))
        np.testing.assert_array_equal(config.radar_noise_matrix(), np.diag([0.09, 0.0009, 0.09]))
        np.testing.assert_array_equal(config.initial_covariance(), np.diag([1.0, 1.0, 1000.0, 1000.0]))
        assert not config.joseph_form

    @pytest.mark.parametrize("kwargs", [
        {"noise_ax": -1.0},
        {"laser_noise": (0.1,)},
        {"radar_noise": (0.1, 0.1)},
        {"radar_noise": (0.1, 0.0, 0.1)},
        {"initial_velocity_variance": 0.0},
        {"dt_epsilon": 0.0},
        {"jacobian_threshold": -1e-4},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            FusionConfig(**kwargs)


if __name__ == "__main__":
    pytest.main([__file__])
