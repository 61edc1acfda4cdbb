"""Operational helpers."""

from nbainsights.ops.metrics import (
    InMemoryMetricsRecorder,
    MetricsRecorder,
    get_metrics_recorder,
    set_metrics_recorder,
)
from nbainsights.ops.diagnostics import Diagnostics
from nbainsights.ops.logging import configure_logging

__all__ = [
    "MetricsRecorder",
    "InMemoryMetricsRecorder",
    "get_metrics_recorder",
    "set_metrics_recorder",
    "Diagnostics",
    "configure_logging",
]
