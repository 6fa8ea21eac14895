"""Catly observability: OpenTelemetry tracing setup."""

from catly.observability.tracing import TracingConfigError, configure_tracing

__all__ = ["TracingConfigError", "configure_tracing"]
