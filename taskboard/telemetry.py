"""OpenTelemetry wiring for the taskboard API.

Traces, metrics and logs go to an OTLP/HTTP collector. Setting
``OTEL_SDK_DISABLED`` (the test suite does) skips all of it; the API then
falls back to the no-op tracer and meter.
"""

import logging
import os

from opentelemetry import _logs, metrics, trace
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.flask import FlaskInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource, get_aggregated_resources
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


# Liveness checks are neither traced nor counted
HEALTH_PATHS = ("/health", "/api/health")

_otel_log_handler: LoggingHandler | None = None
_initialized: bool = False


def telemetry_enabled() -> bool:
    return not os.getenv("OTEL_SDK_DISABLED")


def _board_resource() -> Resource:
    # get_aggregated_resources picks up OTEL_RESOURCE_ATTRIBUTES
    return get_aggregated_resources(
        detectors=[],
        initial_resource=Resource.create(
            {
                "service.name": os.getenv("OTEL_SERVICE_NAME", "taskboard-api"),
                "service.version": os.getenv("OTEL_SERVICE_VERSION", "1.0.0"),
            }
        ),
    )


def setup_telemetry() -> None:
    """Install the trace, metric and log providers once per process.

    Runs before the Flask app exists so the SQLAlchemy engine created by
    Flask-SQLAlchemy is instrumented too.
    """
    global _otel_log_handler, _initialized

    if _initialized:
        return

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318")
    export_interval = int(os.getenv("OTEL_METRIC_EXPORT_INTERVAL", "60000"))
    resource = _board_resource()

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{endpoint}/v1/traces"))
    )
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=f"{endpoint}/v1/metrics"),
        export_interval_millis=export_interval,
    )
    metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(OTLPLogExporter(endpoint=f"{endpoint}/v1/logs"))
    )
    _logs.set_logger_provider(logger_provider)
    _otel_log_handler = LoggingHandler(level=logging.DEBUG, logger_provider=logger_provider)

    SQLAlchemyInstrumentor().instrument()
    # Adds trace_id and span_id to log records
    LoggingInstrumentor().instrument(set_logging_format=True)

    _initialized = True


def get_otel_log_handler() -> LoggingHandler | None:
    """Return the OTel logging handler, or None before setup_telemetry()."""
    return _otel_log_handler


def instrument_flask_app(app) -> None:
    """Trace every request except health checks.

    Must run per app instance so Gunicorn workers forked after the global
    setup are covered too.
    """
    FlaskInstrumentor().instrument_app(app, excluded_urls=",".join(HEALTH_PATHS))


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def get_meter(name: str) -> metrics.Meter:
    return metrics.get_meter(name)
