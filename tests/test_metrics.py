import pytest
import numpy as np
import sys
import os

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fusion_tracker.evaluation import AccuracyTracker, calculate_rmse, nis_consistency, nis_threshold


ESTIMATES = [np.array([1.0, 1.0, 0.2, 0.1]),
             np.array([2.0, 2.0, 0.3, 0.2]),
             np.array([3.0, 3.0, 0.4, 0.3])]
TRUTHS = [np.array([1.1, 1.1, 0.3, 0.0]),
          np.array([2.1, 2.1, 0.5, 0.1]),
          np.array([2.9, 3.0, 0.5, 0.2])]


class TestRMSE:
    """Test root mean squared error"""

    def test_hand_computed(self):
        rmse = calculate_rmse(ESTIMATES, TRUTHS)

        np.testing.assert_allclose(rmse, [0.1, np.sqrt(0.02 / 3), np.sqrt(0.06 / 3), 0.1])

    def test_perfect_estimate(self):
        rmse = calculate_rmse(TRUTHS, TRUTHS)
        np.testing.assert_array_equal(rmse, np.zeros(4))

    def test_empty_input(self):
        with pytest.raises(ValueError, match="empty"):
            calculate_rmse([], [])

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            calculate_rmse(ESTIMATES, TRUTHS[:2])

    def test_width_mismatch(self):
        with pytest.raises(ValueError):
            calculate_rmse([np.zeros(4)], [np.zeros(3)])


class TestAccuracyTracker:
    """Test accumulation of estimate/ground-truth pairs"""

    def test_accumulates(self):
        tracker = AccuracyTracker()
        for estimate, truth in zip(ESTIMATES, TRUTHS):
            tracker.add(estimate, truth)

        assert tracker.count == 3
        np.testing.assert_allclose(tracker.rmse(), calculate_rmse(ESTIMATES, TRUTHS))
        assert tracker.errors().shape == (3, 4)
        np.testing.assert_allclose(tracker.errors()[0], [0.1, 0.1, 0.1, 0.1])

    def test_stores_copies(self):
        tracker = AccuracyTracker()
        estimate = np.zeros(4)
        tracker.add(estimate, np.zeros(4))

        estimate[0] = 10.0

        np.testing.assert_array_equal(tracker.rmse(), np.zeros(4))

    def test_empty_tracker(self):
        tracker = AccuracyTracker()

        assert tracker.count == 0
        assert tracker.errors().shape == (0, 4)
        with pytest.raises(ValueError):
            tracker.rmse()

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            AccuracyTracker().add(np.zeros(4), np.zeros(2))

    def test_dataframe_and_summary(self):
        tracker = AccuracyTracker()
        for estimate, truth in zip(ESTIMATES, TRUTHS):
            tracker.add(estimate, truth)

        frame = tracker.to_dataframe()
        summary = tracker.summary()

        assert len(frame) == 3
        assert list(frame.columns) == ['est_px', 'est_py', 'est_vx', 'est_vy',
                                       'gt_px', 'gt_py', 'gt_vx', 'gt_vy']
        assert frame['gt_vx'].tolist() == pytest.approx([0.3, 0.5, 0.5])
        assert set(summary) == {'px', 'py', 'vx', 'vy'}
        assert summary['px'] == pytest.approx(0.1)


class TestNISConsistency:
    """Test χ² consistency checks"""

    def test_thresholds(self):
        assert nis_threshold(2) == pytest.approx(5.991, abs=1e-3)
        assert nis_threshold(3) == pytest.approx(7.815, abs=1e-3)
        assert nis_threshold(2, confidence=0.05) == pytest.approx(0.103, abs=1e-3)

    def test_invalid_threshold_arguments(self):
        with pytest.raises(ValueError):
            nis_threshold(0)
        with pytest.raises(ValueError):
            nis_threshold(2, confidence=1.0)

    def test_fraction_above_threshold(self):
        assert nis_consistency([1.0, 2.0, 10.0, 3.0], dof=2) == pytest.approx(0.25)

    def test_consistent_samples(self):
        rng = np.random.default_rng(0)
        samples = rng.chisquare(3, size=20000)

        assert nis_consistency(samples, dof=3) == pytest.approx(0.05, abs=0.01)

    def test_empty_sequence(self):
        with pytest.raises(ValueError):
            nis_consistency([], dof=2)


if __name__ == "__main__":
    pytest.main([__file__])
