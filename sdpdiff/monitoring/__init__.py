"""Monitoring and telemetry module for parser comparison."""

from sdpdiff.monitoring.recorder import (
    CloudWatchDiscrepancyRecorder,
    Discrepancy,
    DiscrepancyRecorder,
    InMemoryDiscrepancyRecorder,
)

__all__ = [
    "CloudWatchDiscrepancyRecorder",
    "Discrepancy",
    "DiscrepancyRecorder",
    "InMemoryDiscrepancyRecorder",
]
