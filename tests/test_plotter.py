import pytest
import numpy as np
import sys
import os

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for testing
import matplotlib.pyplot as plt

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fusion_tracker.data import build_results_frame
from fusion_tracker.simulation import ScenarioParameters, generate_scenario
from fusion_tracker.visualization import TrajectoryPlotter


class TestTrajectoryPlotter:
    """Test trajectory plotting"""

    def setup_method(self):
        self.plotter = TrajectoryPlotter()

    def teardown_method(self):
        plt.close('all')

    def test_add_trajectory(self):
        positions = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 0.5]])

        self.plotter.add_trajectory(positions, label="Track", color='red')

        assert len(self.plotter.trajectories) == 1
        assert self.plotter.trajectories[0]['label'] == "Track"
        np.testing.assert_array_equal(self.plotter.trajectories[0]['positions'], positions)

    def test_invalid_trajectories(self):
        with pytest.raises(ValueError):
            self.plotter.add_trajectory(np.array([[0.0, 0.0]]))
        with pytest.raises(ValueError):
            self.plotter.add_trajectory(np.array([[0.0, 0.0], [np.nan, 1.0]]))
        with pytest.raises(ValueError):
            self.plotter.add_trajectory(np.zeros((5, 3)))

    def test_error_series_shapes_must_match(self):
        with pytest.raises(ValueError):
            self.plotter.set_position_errors(np.arange(3), np.arange(4))

    def test_plot_empty(self):
        with pytest.raises(ValueError):
            self.plotter.plot()

    def test_plot_with_error_panel(self):
        self.plotter.add_trajectory([[0.0, 0.0], [1.0, 1.0]])
        self.plotter.add_measurements([[0.1, 0.0], [0.9, 1.1]])
        self.plotter.set_position_errors(np.array([0.0, 0.05]), np.array([0.1, 0.2]))

        figure = self.plotter.plot("Test")

        assert len(figure.axes) == 2
        assert figure.axes[0].get_title() == "Test"

    def test_from_results_and_save(self, tmp_path):
        entries = generate_scenario(ScenarioParameters(duration=2.0, seed=5))
        estimates = [entry.ground_truth.as_array() for entry in entries]
        frame = build_results_frame(estimates, entries)

        plotter = TrajectoryPlotter.from_results(frame)

        labels = [series['label'] for series in plotter.trajectories]
        assert labels == ['Ground Truth', 'EKF Estimate']
        assert [series['label'] for series in plotter.measurements] == ['Laser', 'Radar']

        path = tmp_path / "track.png"
        plotter.save(path)

        assert path.exists()
        assert path.stat().st_size > 0
        assert plotter.figure is None


if __name__ == "__main__":
    pytest.main([__file__])
