"""Tracing, metrics and logging for salvo, all no-ops until initialised."""

from __future__ import annotations

from .config import TelemetryConfig, init_telemetry, load_telemetry_config
from .logger import configure_logging, get_logger, init_logging
from .metrics import MatchMetric, get_meter, init_metrics, record_match_metric
from .tracer import annotate_attack, get_tracer, init_tracing

__all__ = [
    "MatchMetric",
    "TelemetryConfig",
    "annotate_attack",
    "configure_logging",
    "get_logger",
    "get_meter",
    "get_tracer",
    "init_logging",
    "init_metrics",
    "init_telemetry",
    "init_tracing",
    "load_telemetry_config",
    "record_match_metric",
]
