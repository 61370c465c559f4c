"""Tracing - OpenTelemetry spans exported over OTLP/HTTP.

Spans cover each webhook turn and each ``ReservationStore.reserve`` call.
With tracing disabled the global no-op provider stays in place, so
``get_tracer`` is always safe to call.
"""

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from citas import __version__
from citas.config.settings import Settings, get_settings
from citas.utils.logger import get_logger

logger = get_logger(__name__)

# Health probes would flood the trace backend
EXCLUDED_URLS = "health"


def setup_tracing(
    settings: Settings | None = None,
    service_name: str = "citas-bot",
) -> bool:
    """Install a tracer provider that ships spans to the OTLP endpoint.

    Args:
        settings: Application settings (defaults to the cached instance).
        service_name: Name reported on every span.

    Returns:
        True if spans will be exported.
    """
    settings = settings or get_settings()
    if not settings.enable_tracing:
        logger.info("tracing_disabled")
        return False

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": service_name,
                "service.version": __version__,
                "deployment.environment": settings.app_env,
                "reservation.backend": settings.reservation_backend,
            }
        )
    )
    try:
        provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
        )
    except Exception as e:
        logger.warning("tracing_setup_failed", error=str(e))
        return False

    trace.set_tracer_provider(provider)
    logger.info("tracing_configured", otlp_endpoint=settings.otlp_endpoint)
    return True


def instrument_fastapi(app: FastAPI, settings: Settings | None = None) -> None:
    """Add a server span per request, except for health checks."""
    if not (settings or get_settings()).enable_tracing:
        return

    try:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=EXCLUDED_URLS)
    except Exception as e:
        logger.warning("fastapi_instrumentation_failed", error=str(e))


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def get_current_trace_id() -> str | None:
    """Hex trace id of the active span, used to correlate DLQ entries."""
    context = trace.get_current_span().get_span_context()
    if not context.is_valid:
        return None
    return format(context.trace_id, "032x")
