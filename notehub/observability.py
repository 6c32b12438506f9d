"""OpenTelemetry and structlog setup for the notehub service."""

import logging
import os

import structlog
from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

# Service identification
SERVICE_NAME_VALUE = os.getenv("OTEL_SERVICE_NAME", "notehub-api")
SERVICE_VERSION_VALUE = os.getenv("OTEL_SERVICE_VERSION", "0.1.0")
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

logger = structlog.get_logger(__name__)


def get_resource() -> Resource:
    """Create OpenTelemetry resource with service attributes."""
    return Resource.create(
        {
            SERVICE_NAME: SERVICE_NAME_VALUE,
            SERVICE_VERSION: SERVICE_VERSION_VALUE,
            "deployment.environment": ENVIRONMENT,
        }
    )


def _exporter_choice(signal: str) -> str | None:
    """Resolve which exporter a signal should use: 'otlp', 'console' or None."""
    if os.getenv(f"OTEL_ENABLE_{signal.upper()}", "true").lower() != "true":
        logger.info("otel_signal_disabled", signal=signal)
        return None

    exporter_type = os.getenv(f"OTEL_{signal.upper()}_EXPORTER", "console")
    if exporter_type == "otlp" and not os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"):
        logger.warning("otel_otlp_endpoint_missing", signal=signal)
        return None
    if exporter_type not in ("otlp", "console"):
        # 'none' or any other value disables export
        logger.info("otel_export_disabled", signal=signal, exporter=exporter_type)
        return None

    logger.info("otel_exporter_selected", signal=signal, exporter=exporter_type)
    return exporter_type


def configure_tracing() -> TracerProvider:
    """Configure OpenTelemetry tracing."""
    provider = TracerProvider(resource=get_resource())

    exporter_type = _exporter_choice("traces")
    if exporter_type == "otlp":
        endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
    elif exporter_type == "console":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    return provider


def configure_metrics() -> MeterProvider:
    """Configure OpenTelemetry metrics."""
    metric_readers = []

    exporter_type = _exporter_choice("metrics")
    if exporter_type is not None:
        if exporter_type == "otlp":
            exporter = OTLPMetricExporter(endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"))
        else:
            exporter = ConsoleMetricExporter()
        metric_readers.append(
            PeriodicExportingMetricReader(
                exporter,
                export_interval_millis=int(os.getenv("OTEL_METRIC_EXPORT_INTERVAL", "60000")),
            )
        )

    provider = MeterProvider(resource=get_resource(), metric_readers=metric_readers)
    metrics.set_meter_provider(provider)
    return provider


def add_otel_context(logger, method_name, event_dict):
    """Add OpenTelemetry trace context to log events."""
    span = trace.get_current_span()
    if span and span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging():
    """Configure structlog with OpenTelemetry integration."""
    log_level = os.getenv("OTEL_LOG_LEVEL", "INFO").upper()
    log_format = os.getenv("LOG_FORMAT", "json").lower()  # json or console

    logging.basicConfig(format="%(message)s", level=getattr(logging, log_level))

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_otel_context,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.processors.ExceptionRenderer(),
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logger.info("logging_configured", log_level=log_level, log_format=log_format)


def initialize_observability():
    """Initialize logging, tracing and metrics."""
    configure_logging()

    tracer_provider = configure_tracing()
    meter_provider = configure_metrics()

    logger.info(
        "observability_initialized",
        service_name=SERVICE_NAME_VALUE,
        service_version=SERVICE_VERSION_VALUE,
        environment=ENVIRONMENT,
    )

    return tracer_provider, meter_provider


def get_tracer(name: str = __name__) -> trace.Tracer:
    """Get a tracer instance for creating spans."""
    return trace.get_tracer(name, SERVICE_VERSION_VALUE)


def get_meter(name: str = __name__) -> metrics.Meter:
    """Get a meter instance for creating metrics."""
    return metrics.get_meter(name, SERVICE_VERSION_VALUE)


class AppMetrics:
    """Workspace and access-control metrics."""

    def __init__(self):
        meter = get_meter("notehub.metrics")

        self.folder_moves = meter.create_counter(
            name="folder.moves", description="Folder reparent operations", unit="1"
        )
        self.folder_cycle_rejections = meter.create_counter(
            name="folder.cycle_rejections",
            description="Folder moves rejected because they would create a cycle",
            unit="1",
        )
        self.note_cascade_deletes = meter.create_counter(
            name="note.cascade_deletes", description="Notes removed with their dependents", unit="1"
        )
        self.permission_changes = meter.create_counter(
            name="permission.changes", description="Permission grants and revokes", unit="1"
        )
        self.access_denials = meter.create_counter(
            name="permission.access_denials",
            description="Calls rejected at the note access boundary",
            unit="1",
        )
        self.activity_events = meter.create_counter(
            name="activity.events", description="Activity events appended", unit="1"
        )


# Global metrics instance
app_metrics: AppMetrics | None = None


def get_app_metrics() -> AppMetrics:
    """Get the global application metrics instance."""
    global app_metrics
    if app_metrics is None:
        app_metrics = AppMetrics()
    return app_metrics
