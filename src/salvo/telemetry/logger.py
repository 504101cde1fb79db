"""Logging for salvo: a console format for CLI runs and optional OTLP export.

Every salvo logger lives under the ``salvo`` namespace, so the OTLP handler is
attached to that package logger only and third-party records stay local.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import TelemetryConfig

ROOT_NAMESPACE = "salvo"

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s "
    "| trace_id=%(otelTraceID)s span_id=%(otelSpanID)s"
)

_OTLP_HANDLER: logging.Handler | None = None


class _OtelContextFilter(logging.Filter):
    """Fill trace/span placeholders so LOG_FORMAT works outside any span."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "-"
        if not hasattr(record, "otelSpanID"):
            record.otelSpanID = "-"
        return True


def get_logger(name: str = ROOT_NAMESPACE) -> logging.Logger:
    """Return a logger inside the ``salvo`` namespace (``"match"`` -> ``salvo.match``)."""
    if name != ROOT_NAMESPACE and not name.startswith(f"{ROOT_NAMESPACE}."):
        name = f"{ROOT_NAMESPACE}.{name}"
    return logging.getLogger(name)


def configure_logging(level: int = logging.WARNING) -> None:
    """Send salvo records at ``level`` and above to stderr in LOG_FORMAT."""
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(format=LOG_FORMAT)
        for existing in root_logger.handlers:
            existing.addFilter(_OtelContextFilter())
            existing.setLevel(level)
    get_logger().setLevel(level)


def init_logging(config: TelemetryConfig) -> logging.Logger:
    """Export salvo log records through an OTLP LoggerProvider."""
    from opentelemetry._logs import set_logger_provider
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
    from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
    from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    from opentelemetry.sdk.resources import Resource

    provider = LoggerProvider(resource=Resource.create(config.resource_dict()))
    if config.otlp_logs_endpoint:
        exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
        provider.add_log_record_processor(BatchLogRecordProcessor(exporter))

    set_logger_provider(provider)
    _attach_otlp_handler(LoggingHandler(level=logging.INFO, logger_provider=provider))
    return get_logger()


def _attach_otlp_handler(handler: logging.Handler) -> None:
    """Attach ``handler`` to the salvo logger, replacing one attached earlier."""
    global _OTLP_HANDLER
    logger = get_logger()
    if _OTLP_HANDLER is not None:
        logger.removeHandler(_OTLP_HANDLER)
    handler.addFilter(_OtelContextFilter())
    logger.addHandler(handler)
    if logger.level == logging.NOTSET or logger.level > logging.INFO:
        logger.setLevel(logging.INFO)
    _OTLP_HANDLER = handler
