"""
Writers for measurement logs and filter output.
"""

import logging
from pathlib import Path
from typing import Iterable, Sequence, Union

import numpy as np
import pandas as pd

from ..fusion.tools import polar_to_cartesian
from ..measurement import SensorType
from .reader import LogEntry

logger = logging.getLogger(__name__)

ESTIMATE_COLUMNS = [
    'timestamp', 'sensor',
    'est_px', 'est_py', 'est_vx', 'est_vy',
    'meas_px', 'meas_py',
    'gt_px', 'gt_py', 'gt_vx', 'gt_vy',
]


def format_entry(entry: LogEntry) -> str:
    """Render a LogEntry as a tab separated log line."""
    package = entry.measurement
    fields = [package.sensor_type.value]
    fields += [f"{v:.10g}" for v in package.raw_measurements]
    fields.append(str(package.timestamp))
    if entry.ground_truth is not None:
        fields += [f"{v:.10g}" for v in entry.ground_truth.as_array()]
    return "\t".join(fields)


def write_measurement_log(path: Union[str, Path], entries: Iterable[LogEntry]) -> int:
    """
    Write entries in the format read by read_measurement_log.

    Returns:
        Number of lines written
    """
    count = 0
    with open(path, 'w', encoding='utf-8') as f:
        for entry in entries:
            f.write(format_entry(entry) + "\n")
            count += 1
    logger.info(f"Wrote {count} measurements to {path}")
    return count


def build_results_frame(estimates: Sequence[np.ndarray], entries: Sequence[LogEntry]) -> pd.DataFrame:
    """
    Tabulate estimates next to the measurement and ground truth that produced them.

    Radar measurements are converted to Cartesian coordinates in the meas_*
    columns. Missing ground truth is reported as NaN.

    Raises:
        ValueError: If the two sequences differ in length
    """
    if len(estimates) != len(entries):
        raise ValueError(f"Got {len(estimates)} estimates for {len(entries)} log entries")

    rows = []
    for estimate, entry in zip(estimates, entries):
        package = entry.measurement
        z = package.raw_measurements
        if package.sensor_type is SensorType.RADAR:
            meas_px, meas_py = polar_to_cartesian(z[0], z[1])
        else:
            meas_px, meas_py = z[0], z[1]

        truth = entry.ground_truth.as_array() if entry.ground_truth is not None else np.full(4, np.nan)

        rows.append([package.timestamp, package.sensor_type.value,
                     *np.asarray(estimate, dtype=float), meas_px, meas_py, *truth])

    return pd.DataFrame(rows, columns=ESTIMATE_COLUMNS)


def write_estimates(path: Union[str, Path], estimates: Sequence[np.ndarray],
                    entries: Sequence[LogEntry]) -> pd.DataFrame:
    """Write the results table as a tab separated file and return it."""
    frame = build_results_frame(estimates, entries)
    frame.to_csv(path, sep='\t', index=False, float_format='%.6f')
    logger.info(f"Wrote {len(frame)} estimates to {path}")
    return frame
