"""Logging and tracing setup for the Booker Gate API.

Verification scans are traced under the ``booker_gate`` instrumentation
scope. When ``otel_enabled`` is off no provider is installed and the
OpenTelemetry API hands out no-op tracers, so spans cost nothing.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from app.core.config import Settings

TRACER_NAME = "booker_gate"

_provider_installed = False


def _parse_headers(header_string: str | None) -> dict[str, str]:
    if not header_string:
        return {}
    pairs = (item.split("=", 1) for item in header_string.split(",") if "=" in item)
    return {key.strip(): value.strip() for key, value in pairs}


def configure_logging(settings: Settings) -> logging.Logger:
    """Route all records through one stream handler at ``settings.log_level``."""

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"plain": {"format": settings.log_format}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "plain",
                    "level": level,
                }
            },
            "root": {"handlers": ["console"], "level": level},
            # asyncpg logs every pool reconnect at INFO
            "loggers": {"asyncpg": {"level": max(level, logging.WARNING)}},
        }
    )

    logger = logging.getLogger(settings.app_name)
    logger.setLevel(level)
    return logger


def get_tracer(provider: trace.TracerProvider | None = None) -> trace.Tracer:
    """Tracer for verification spans, from ``provider`` or the global one."""

    if provider is not None:
        return provider.get_tracer(TRACER_NAME)
    return trace.get_tracer(TRACER_NAME)


def _span_exporter(settings: Settings) -> OTLPSpanExporter:
    options: dict[str, object] = {}
    if settings.otel_exporter_otlp_endpoint:
        options["endpoint"] = settings.otel_exporter_otlp_endpoint
    headers = _parse_headers(settings.otel_exporter_otlp_headers)
    if headers:
        options["headers"] = headers
    return OTLPSpanExporter(**options)


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install an OTLP-exporting provider when tracing is enabled."""

    global _provider_installed

    if _provider_installed or not settings.otel_enabled:
        return None

    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": settings.otel_service_name,
                "deployment.environment": settings.environment,
            }
        )
    )
    provider.add_span_processor(BatchSpanProcessor(_span_exporter(settings)))
    trace.set_tracer_provider(provider)
    _provider_installed = True
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    """Flush pending verification spans and release the provider."""

    global _provider_installed

    if provider is None:
        return
    provider.shutdown()
    _provider_installed = False
