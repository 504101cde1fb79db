"""Metrics helpers: per-scope meters and the match-level instrument catalogue."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Mapping

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Counter, Histogram, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:  # pragma: no cover
    from .config import TelemetryConfig

MATCH_SCOPE = "salvo.match"

_METERS: dict[str, Meter] = {}
_METER_PROVIDER: MeterProvider | None = None
_INSTRUMENTS: dict[MatchMetric, Counter | Histogram] = {}

MetricAttributes = Mapping[str, str | bool | int | float]


class MatchMetric(Enum):
    """Instruments reported by the match controller."""

    STARTED = ("salvo_match_started_total", "Matches whose fleets were placed", False)
    ATTACKS = ("salvo_match_attacks_total", "Attacks made during matches, by player and result", False)
    COMPLETED = ("salvo_match_completed_total", "Finished matches, by winner", False)
    TURNS = ("salvo_match_turns", "Landed attacks per finished match", True)

    def __init__(self, metric_name: str, description: str, is_histogram: bool) -> None:
        self.metric_name = metric_name
        self.description = description
        self.is_histogram = is_histogram


def get_meter(name: str = "salvo") -> Meter:
    """Return the meter for the instrumentation scope ``name``."""
    meter = _METERS.get(name)
    if meter is None:
        meter = otel_metrics.get_meter(name)
        _METERS[name] = meter
    return meter


def init_metrics(config: TelemetryConfig) -> MeterProvider:
    """Install a MeterProvider, exporting over OTLP when an endpoint is set."""
    global _METER_PROVIDER

    readers = []
    if config.otlp_metrics_endpoint:
        exporter = OTLPMetricExporter(endpoint=config.otlp_metrics_endpoint, insecure=True)
        readers.append(
            PeriodicExportingMetricReader(
                exporter, export_interval_millis=config.metric_export_interval_ms
            )
        )

    provider = MeterProvider(
        resource=Resource.create(config.resource_dict()), metric_readers=readers
    )
    otel_metrics.set_meter_provider(provider)

    _METER_PROVIDER = provider
    _METERS.clear()
    _INSTRUMENTS.clear()
    return provider


def record_match_metric(
    metric: MatchMetric, value: float = 1, attrs: MetricAttributes | None = None
) -> None:
    """Add ``value`` to a match counter, or record it on a match histogram."""
    instrument = _INSTRUMENTS.get(metric)
    if instrument is None:
        meter = get_meter(MATCH_SCOPE)
        factory = meter.create_histogram if metric.is_histogram else meter.create_counter
        instrument = factory(metric.metric_name, unit="1", description=metric.description)
        _INSTRUMENTS[metric] = instrument

    if metric.is_histogram:
        instrument.record(value, attributes=attrs or {})
    else:
        instrument.add(value, attributes=attrs or {})
