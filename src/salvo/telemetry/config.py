"""Telemetry configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Any, Dict

from pydantic import BaseModel, Field, field_validator

_TRUTHY = {"1", "true", "yes", "on"}

# signal -> (salvo switch, standard OTEL switch, per-signal endpoint variable)
_SIGNALS = {
    "traces": ("SALVO_ENABLE_TRACING", "OTEL_TRACES_ENABLED", "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT"),
    "metrics": ("SALVO_ENABLE_METRICS", "OTEL_METRICS_ENABLED", "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT"),
    "logs": ("SALVO_ENABLE_LOGGING", "OTEL_LOGS_ENABLED", "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT"),
}
_ENABLE_FIELDS = {"traces": "enable_tracing", "metrics": "enable_metrics", "logs": "enable_logging"}


class TelemetryConfig(BaseModel):
    """Which signals a salvo session exports, and where to."""

    enable_tracing: bool = False
    enable_metrics: bool = False
    enable_logging: bool = False
    otlp_traces_endpoint: str | None = None
    otlp_metrics_endpoint: str | None = None
    otlp_logs_endpoint: str | None = None
    service_name: str = "salvo"
    service_namespace: str = "game"
    resource_attributes: dict[str, str] = Field(default_factory=dict)
    metric_export_interval_ms: int = 5000

    @field_validator("metric_export_interval_ms")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("metric_export_interval_ms must be positive")
        return v

    def resource_dict(self) -> dict[str, str]:
        """Attributes attached to every exported span, metric and log record."""
        return {
            "service.name": self.service_name,
            "service.namespace": self.service_namespace,
            **self.resource_attributes,
        }

    @classmethod
    def from_env(cls, **overrides: Any) -> "TelemetryConfig":
        """Build from `SALVO_*` and standard `OTEL_*` variables; ``overrides`` win.

        A configured endpoint switches its signal on even without an explicit flag.
        """
        data: Dict[str, Any] = {}
        base_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        for signal, (salvo_flag, otel_flag, endpoint_var) in _SIGNALS.items():
            enable_field = _ENABLE_FIELDS[signal]
            endpoint = os.getenv(endpoint_var) or _with_suffix(base_endpoint, f"v1/{signal}")
            data[f"otlp_{signal}_endpoint"] = endpoint
            flag = _first_bool((salvo_flag, otel_flag))
            if flag is not None:
                data[enable_field] = flag
            if endpoint:
                data[enable_field] = True

        if os.getenv("OTEL_SERVICE_NAME"):
            data["service_name"] = os.environ["OTEL_SERVICE_NAME"]
        if os.getenv("OTEL_SERVICE_NAMESPACE"):
            data["service_namespace"] = os.environ["OTEL_SERVICE_NAMESPACE"]
        if os.getenv("SALVO_METRIC_EXPORT_INTERVAL_MS"):
            data["metric_export_interval_ms"] = int(os.environ["SALVO_METRIC_EXPORT_INTERVAL_MS"])
        data["resource_attributes"] = _parse_resource_attributes(
            os.getenv("OTEL_RESOURCE_ATTRIBUTES", "")
        )

        data.update(overrides)
        return cls(**data)


def _first_bool(names: tuple[str, ...]) -> bool | None:
    for name in names:
        value = os.getenv(name)
        if value is not None:
            return value.strip().lower() in _TRUTHY
    return None


def _with_suffix(base: str | None, suffix: str) -> str | None:
    if not base:
        return None
    return f"{base.rstrip('/')}/{suffix}"


def _parse_resource_attributes(raw: str) -> dict[str, str]:
    """Parse ``key=value,key=value``; entries without ``=`` are skipped."""
    attrs: dict[str, str] = {}
    for part in raw.split(","):
        if "=" not in part:
            continue
        key, value = part.split("=", 1)
        attrs[key.strip()] = value.strip()
    return attrs


@lru_cache(maxsize=1)
def load_telemetry_config() -> TelemetryConfig:
    """Load and cache telemetry config from the environment."""

    return TelemetryConfig.from_env()


def init_telemetry(config: TelemetryConfig | None = None) -> TelemetryConfig:
    """Install the providers the config asks for and return the resolved config."""

    from .logger import init_logging
    from .metrics import init_metrics
    from .tracer import init_tracing

    resolved = config or load_telemetry_config()

    if resolved.enable_tracing:
        init_tracing(resolved)
    if resolved.enable_metrics:
        init_metrics(resolved)
    if resolved.enable_logging:
        init_logging(resolved)
    return resolved
