"""Tracing helpers built on OpenTelemetry.

Each component asks for a tracer under its own scope (``salvo.engine.board``,
``salvo.ai.attacker``, ``salvo.match``). Tracers handed out before
``init_tracing`` are proxies of the global API and start recording once a
provider is installed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SimpleSpanProcessor,
)
from opentelemetry.trace import Span, Tracer

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import TelemetryConfig


_TRACERS: dict[str, Tracer] = {}
_TRACER_PROVIDER: TracerProvider | None = None


def get_tracer(name: str = "salvo") -> Tracer:
    """Return the tracer for the instrumentation scope ``name``."""
    tracer = _TRACERS.get(name)
    if tracer is None:
        tracer = trace.get_tracer(name)
        _TRACERS[name] = tracer
    return tracer


def annotate_attack(span: Span, coord: Any, result: Any = None) -> None:
    """Tag ``span`` with the attacked cell and, once known, the attack result."""
    span.set_attribute("attack.row", coord.row)
    span.set_attribute("attack.col", coord.col)
    if result is not None:
        span.set_attribute("attack.result", result.value)


def init_tracing(config: TelemetryConfig) -> TracerProvider:
    """Install a TracerProvider; spans go to OTLP when an endpoint is set, else the console."""
    global _TRACER_PROVIDER

    provider = TracerProvider(resource=Resource.create(config.resource_dict()))
    if config.otlp_traces_endpoint:
        exporter = OTLPSpanExporter(endpoint=config.otlp_traces_endpoint, insecure=True)
        provider.add_span_processor(BatchSpanProcessor(exporter))
    else:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    _TRACER_PROVIDER = provider
    # Scopes fetched from now on come straight from the SDK provider.
    _TRACERS.clear()
    return provider
