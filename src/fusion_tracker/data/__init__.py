"""
Measurement log input and filter output.

This module reads laser/radar measurement logs into MeasurementPackage
records with their ground truth, and writes logs and estimate tables back out.
"""

from .reader import LogEntry, parse_line, iter_measurement_log, read_measurement_log
from .writer import format_entry, write_measurement_log, build_results_frame, write_estimates

__all__ = [
    "LogEntry",
    "parse_line",
    "iter_measurement_log",
    "read_measurement_log",
    "format_entry",
    "write_measurement_log",
    "build_results_frame",
    "write_estimates"
]
