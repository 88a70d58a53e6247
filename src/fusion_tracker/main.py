#!/usr/bin/env python3
"""
Laser/Radar EKF tracking from the command line.

    fusion-tracker run data/input.txt --output estimates.tsv --plot track.png
    fusion-tracker simulate data/synthetic.txt --duration 30 --seed 7
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from .config import FusionConfig
from .data.reader import LogEntry, read_measurement_log
from .data.writer import build_results_frame, write_estimates, write_measurement_log
from .evaluation.metrics import AccuracyTracker, STATE_LABELS, nis_consistency
from .exceptions import FusionTrackerError
from .fusion.fusion_ekf import FusionEKF, StepOutcome
from .measurement import SensorType
from .simulation.sensors import ScenarioParameters, generate_scenario
from .simulation.trajectory import TrajectoryParameters
from .visualization.plotter import TrajectoryPlotter

logger = logging.getLogger(__name__)


@dataclass
class TrackingRun:
    """Everything produced by running the filter over a log."""
    estimates: List[np.ndarray] = field(default_factory=list)
    accuracy: AccuracyTracker = field(default_factory=AccuracyTracker)
    nis: Dict[SensorType, List[float]] = field(
        default_factory=lambda: {SensorType.LASER: [], SensorType.RADAR: []}
    )
    outcomes: Dict[StepOutcome, int] = field(default_factory=lambda: {o: 0 for o in StepOutcome})


def run_filter(entries: Sequence[LogEntry], config: Optional[FusionConfig] = None) -> TrackingRun:
    """
    Feed log entries through a fresh FusionEKF.

    Raises:
        SingularInnovationError: If an update fails numerically
    """
    fusion = FusionEKF(config)
    run = TrackingRun()

    for entry in entries:
        outcome = fusion.process_measurement(entry.measurement)
        run.outcomes[outcome] += 1

        estimate = fusion.state
        run.estimates.append(estimate)

        if outcome is StepOutcome.UPDATED:
            run.nis[entry.measurement.sensor_type].append(fusion.ekf.last_nis)
        if entry.ground_truth is not None:
            run.accuracy.add(estimate, entry.ground_truth.as_array())

    return run


def report(run: TrackingRun) -> None:
    """Print accuracy and consistency statistics."""
    print(f"Processed {len(run.estimates)} measurements "
          f"({run.outcomes[StepOutcome.UPDATED]} updates, "
          f"{run.outcomes[StepOutcome.DEGRADED]} skipped)")

    if run.accuracy.count:
        rmse = run.accuracy.rmse()
        print("RMSE: " + "  ".join(f"{label}={value:.4f}" for label, value in zip(STATE_LABELS, rmse)))
    else:
        print("RMSE: no ground truth in input")

    for sensor_type, values in run.nis.items():
        if values:
            fraction = nis_consistency(values, sensor_type.measurement_size)
            print(f"NIS {sensor_type.name.lower()}: {fraction:.1%} above 95% χ² threshold")


def command_run(args: argparse.Namespace) -> int:
    config = FusionConfig(joseph_form=args.joseph)
    entries = read_measurement_log(args.input)
    if not entries:
        logger.error(f"No measurements in {args.input}")
        return 1

    run = run_filter(entries, config)
    report(run)

    if args.output:
        write_estimates(args.output, run.estimates, entries)
    if args.plot:
        frame = build_results_frame(run.estimates, entries)
        TrajectoryPlotter.from_results(frame).save(args.plot)
    return 0


def command_simulate(args: argparse.Namespace) -> int:
    params = ScenarioParameters(
        duration=args.duration,
        rate=args.rate,
        seed=args.seed,
        trajectory=TrajectoryParameters(trajectory_type=args.trajectory),
    )
    entries = generate_scenario(params)
    write_measurement_log(args.output, entries)
    print(f"Wrote {len(entries)} simulated measurements to {args.output}")
    return 0


def positive_float(text: str) -> float:
    """argparse type for durations and rates."""
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}") from None
    if not value > 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Laser/Radar Extended Kalman Filter tracking')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging verbosity (default: WARNING)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    run_parser = subparsers.add_parser('run', help='Track an object through a measurement log')
    run_parser.add_argument('input', help='Measurement log file')
    run_parser.add_argument('--output', help='Write estimates as a tab separated table')
    run_parser.add_argument('--plot', help='Save a trajectory plot (e.g. track.png)')
    run_parser.add_argument('--joseph', action='store_true',
                            help='Use the Joseph form covariance update')
    run_parser.set_defaults(handler=command_run)

    sim_parser = subparsers.add_parser('simulate', help='Write a synthetic laser/radar log')
    sim_parser.add_argument('output', help='Destination log file')
    sim_parser.add_argument('--duration', type=positive_float, default=25.0,
                            help='Scenario duration in seconds (default: 25)')
    sim_parser.add_argument('--rate', type=positive_float, default=20.0,
                            help='Measurements per second (default: 20)')
    sim_parser.add_argument('--seed', type=int, default=None, help='Random seed')
    sim_parser.add_argument('--trajectory', default='figure8', choices=['figure8', 'circle', 'linear'],
                            help='Ground truth trajectory shape (default: figure8)')
    sim_parser.set_defaults(handler=command_simulate)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        return args.handler(args)
    except (FusionTrackerError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
