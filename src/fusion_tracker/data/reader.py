"""
Measurement log reader.

A measurement log holds one sensor reading per line, optionally followed by
the ground-truth state of the object at that instant:

    L  <px> <py> <timestamp_us> [<px_gt> <py_gt> <vx_gt> <vy_gt> ...]
    R  <ρ> <φ> <ρ̇> <timestamp_us> [<px_gt> <py_gt> <vx_gt> <vy_gt> ...]

Fields are separated by any whitespace (the reference datasets use tabs).
Blank lines and lines starting with '#' are ignored. Columns past the four
ground-truth values (yaw, yaw rate in some datasets) are ignored.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

from ..exceptions import MalformedMeasurementError
from ..measurement import GroundTruthPackage, MeasurementPackage, SensorType

logger = logging.getLogger(__name__)

GROUND_TRUTH_FIELDS = 4


@dataclass(frozen=True)
class LogEntry:
    """A measurement and the ground truth recorded with it, if any."""
    measurement: MeasurementPackage
    ground_truth: Optional[GroundTruthPackage] = None
    line_number: Optional[int] = None


def parse_line(line: str, line_number: Optional[int] = None) -> Optional[LogEntry]:
    """
    Parse one log line.

    Args:
        line: Raw text line
        line_number: 1-based line number used in error messages

    Returns:
        LogEntry, or None for blank and comment lines

    Raises:
        MalformedMeasurementError: If the line cannot be parsed
    """
    stripped = line.strip()
    if not stripped or stripped.startswith('#'):
        return None

    tokens = stripped.split()
    try:
        sensor_type = SensorType.from_code(tokens[0])
    except MalformedMeasurementError as e:
        raise MalformedMeasurementError(str(e), line_number) from None

    size = sensor_type.measurement_size
    if len(tokens) < size + 2:
        raise MalformedMeasurementError(
            f"{sensor_type.name} line needs {size} values and a timestamp, got {len(tokens) - 1} fields",
            line_number,
        )

    try:
        values = [float(token) for token in tokens[1:1 + size]]
        timestamp = int(tokens[1 + size])
    except ValueError as e:
        raise MalformedMeasurementError(f"Unparsable field: {e}", line_number) from None

    try:
        measurement = MeasurementPackage(sensor_type, values, timestamp)
    except MalformedMeasurementError as e:
        raise MalformedMeasurementError(str(e), line_number) from None

    extra = tokens[2 + size:]
    ground_truth = None
    if extra:
        if len(extra) < GROUND_TRUTH_FIELDS:
            raise MalformedMeasurementError(
                f"Ground truth needs {GROUND_TRUTH_FIELDS} values, got {len(extra)}", line_number
            )
        try:
            ground_truth = GroundTruthPackage(*(float(token) for token in extra[:GROUND_TRUTH_FIELDS]))
        except ValueError as e:
            raise MalformedMeasurementError(f"Unparsable ground truth: {e}", line_number) from None

    return LogEntry(measurement, ground_truth, line_number)


def iter_measurement_log(path: Union[str, Path]) -> Iterator[LogEntry]:
    """
    Lazily read a measurement log.

    Raises:
        OSError: If the file cannot be opened
        MalformedMeasurementError: On the first malformed line
    """
    with open(path, 'r', encoding='utf-8') as f:
        for line_number, line in enumerate(f, start=1):
            entry = parse_line(line, line_number)
            if entry is not None:
                yield entry


def read_measurement_log(path: Union[str, Path]) -> List[LogEntry]:
    """Read a whole measurement log into memory."""
    entries = list(iter_measurement_log(path))

    laser_count = sum(1 for e in entries if e.measurement.sensor_type is SensorType.LASER)
    logger.info(
        f"Read {len(entries)} measurements from {path} "
        f"({laser_count} laser, {len(entries) - laser_count} radar)"
    )
    return entries
