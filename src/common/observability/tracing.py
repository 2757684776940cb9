"""OpenTelemetry tracing bootstrap."""

import structlog
from django.conf import settings
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.celery import CeleryInstrumentor
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import DEPLOYMENT_ENVIRONMENT, SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio

logger = structlog.get_logger(__name__)


def current_trace_id() -> str | None:
    """Hex id of the active trace, if a sampled span is in scope."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return None
    return format(span_context.trace_id, "032x")


def init_tracing() -> None:
    """Install the OTLP tracer provider and instrument the request, task, session store and gateway paths.

    Does nothing unless ``ENABLE_OBSERVABILITY`` is set.
    """
    if not settings.ENABLE_OBSERVABILITY:
        logger.debug("tracing_disabled")
        return

    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: settings.SERVICE_NAME,
                SERVICE_VERSION: settings.SERVICE_VERSION,
                DEPLOYMENT_ENVIRONMENT: settings.DEPLOYMENT_ENVIRONMENT,
            }
        ),
        sampler=ParentBasedTraceIdRatio(settings.TRACING_SAMPLE_RATE),
    )
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{settings.OTEL_EXPORTER_OTLP_ENDPOINT}/v1/traces"))
    )
    trace.set_tracer_provider(provider)

    instrumentors = [DjangoInstrumentor(), CeleryInstrumentor(), RedisInstrumentor(), HTTPXClientInstrumentor()]
    for instrumentor in instrumentors:
        try:
            instrumentor.instrument()
        except Exception:
            logger.exception("tracing_instrumentation_failed", instrumentor=type(instrumentor).__name__)
    logger.info("tracing_initialized", service=settings.SERVICE_NAME, sample_rate=settings.TRACING_SAMPLE_RATE)
