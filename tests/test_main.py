import pytest
import numpy as np
import pandas as pd
import sys
import os
from unittest.mock import patch

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for testing

# Add the src directory to Python path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from fusion_tracker.data import read_measurement_log
from fusion_tracker.fusion import StepOutcome
from fusion_tracker.main import build_parser, main, run_filter
from fusion_tracker.measurement import SensorType
from fusion_tracker.simulation import ScenarioParameters, generate_scenario


class TestRunFilter:
    """Test running the filter over a list of log entries"""

    def test_outcomes_and_statistics(self):
        entries = generate_scenario(ScenarioParameters(duration=5.0, seed=21))

        run = run_filter(entries)

        assert len(run.estimates) == len(entries)
        assert run.outcomes[StepOutcome.INITIALIZED] == 1
        assert run.outcomes[StepOutcome.UPDATED] == len(entries) - 1
        assert run.outcomes[StepOutcome.DEGRADED] == 0
        assert run.accuracy.count == len(entries)
        assert len(run.nis[SensorType.LASER]) + len(run.nis[SensorType.RADAR]) == len(entries) - 1
        assert all(np.isfinite(run.nis[SensorType.RADAR]))


class TestCommandLine:
    """Test the fusion-tracker command line"""

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_simulate_then_run(self, tmp_path, capsys):
        log_path = tmp_path / "synthetic.txt"
        estimates_path = tmp_path / "estimates.tsv"
        plot_path = tmp_path / "track.png"

        assert main(['simulate', str(log_path), '--duration', '5', '--seed', '3']) == 0
        assert len(read_measurement_log(log_path)) == 100

        exit_code = main(['run', str(log_path), '--output', str(estimates_path),
                          '--plot', str(plot_path), '--joseph'])

        assert exit_code == 0
        output = capsys.readouterr().out
        assert "RMSE:" in output
        assert "px=" in output
        assert "NIS laser" in output

        frame = pd.read_csv(estimates_path, sep='\t')
        assert len(frame) == 100
        assert plot_path.exists()

    def test_malformed_input_fails(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("L 1.0 2.0 100\nQ 1.0 2.0 200\n")

        assert main(['run', str(path)]) == 1

    def test_missing_input_fails(self, tmp_path):
        assert main(['run', str(tmp_path / "missing.txt")]) == 1

    def test_empty_input_fails(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("# nothing here\n")

        assert main(['run', str(path)]) == 1

    @pytest.mark.parametrize("flag, value", [
        ('--duration', '0'), ('--duration', '-3'), ('--rate', 'fast'), ('--rate', 'nan'),
    ])
    def test_simulate_rejects_bad_numbers(self, tmp_path, flag, value):
        with pytest.raises(SystemExit) as excinfo:
            main(['simulate', str(tmp_path / "out.txt"), flag, value])

        assert excinfo.value.code == 2
        assert not (tmp_path / "out.txt").exists()

    def test_unexpected_value_error_propagates(self, tmp_path):
        """Only input and numerical failures become exit code 1"""
        path = tmp_path / "input.txt"
        path.write_text("L 1.0 2.0 0\n")

        with patch('fusion_tracker.main.run_filter', side_effect=ValueError("bug")):
            with pytest.raises(ValueError, match="bug"):
                main(['run', str(path)])

    def test_run_without_ground_truth(self, tmp_path, capsys):
        path = tmp_path / "no_truth.txt"
        path.write_text("L 1.0 2.0 0\nR 2.3 1.1 0.0 50000\nL 1.05 2.0 100000\n")

        assert main(['run', str(path)]) == 0
        assert "no ground truth" in capsys.readouterr().out


if __name__ == "__main__":
    pytest.main([__file__])
