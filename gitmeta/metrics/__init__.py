"""Run telemetry."""

from .sink import METRIC_PREFIX, MetricsSink, MockMetricsSink, SeriesMetricsSink

__all__ = [
    "METRIC_PREFIX",
    "MetricsSink",
    "MockMetricsSink",
    "SeriesMetricsSink",
]
