"""Logging and tracing setup for the turn queue service."""

from __future__ import annotations

import logging
from logging.config import dictConfig
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from turnqueue.core.config import Settings

_active_provider: TracerProvider | None = None


def parse_otlp_headers(raw: str | None) -> dict[str, str]:
    """Parse ``key=value,key2=value2`` into a header mapping, skipping junk."""

    if not raw:
        return {}
    pairs = (item.split("=", 1) for item in raw.split(",") if "=" in item)
    return {key.strip(): value.strip() for key, value in pairs if key.strip()}


def _logging_config(settings: Settings, level: int) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": settings.log_format}},
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "level": level,
            }
        },
        "root": {"handlers": ["default"], "level": level},
    }


def configure_logging(settings: Settings) -> logging.Logger:
    """Configure the root handler and return the application logger."""

    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    dictConfig(_logging_config(settings, level))

    logger = logging.getLogger("turnqueue")
    logger.setLevel(level)
    return logger


def init_tracer(settings: Settings) -> TracerProvider | None:
    """Install an OTLP-exporting tracer provider when tracing is enabled."""

    global _active_provider

    if _active_provider is not None or not settings.otel_enabled:
        return None

    exporter_kwargs: dict[str, Any] = {}
    if settings.otel_exporter_otlp_endpoint:
        exporter_kwargs["endpoint"] = settings.otel_exporter_otlp_endpoint
    headers = parse_otlp_headers(settings.otel_exporter_otlp_headers)
    if headers:
        exporter_kwargs["headers"] = headers

    provider = TracerProvider(resource=Resource(attributes={"service.name": settings.otel_service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**exporter_kwargs)))
    trace.set_tracer_provider(provider)
    _active_provider = provider
    return provider


def shutdown_tracer(provider: TracerProvider | None) -> None:
    global _active_provider

    if provider is None:
        return
    provider.shutdown()
    if provider is _active_provider:
        _active_provider = None
