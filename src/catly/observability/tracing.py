"""OpenTelemetry tracing configuration for catly.

Environment Variables:
    CATLY_OTEL_ENABLED: Set to "1" to enable tracing (default: disabled)
    CATLY_REQUIRE_OTEL: Set to "1" to fail startup if tracing cannot initialize
    CATLY_OTEL_SERVICE_NAME: Service name for spans (default: "catly")
    CATLY_OTEL_EXPORTER: Exporter type, only "console" is supported (default: "console")
    CATLY_OTEL_TEST_CAPTURE: Set to "1" to use in-memory exporter for tests

Security:
    - Never export object names, payloads or filesystem paths
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from catly.config import get_env_bool, get_env_str

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import ReadableSpan, TracerProvider

logger = logging.getLogger(__name__)

_tracer_provider: TracerProvider | None = None
_is_configured: bool = False
_test_exporter: Any = None  # InMemorySpanExporter when test capture is on


class TracingConfigError(Exception):
    """Raised when tracing configuration fails and CATLY_REQUIRE_OTEL=1."""


def configure_tracing() -> bool:
    """Configure OpenTelemetry tracing for catly.

    Idempotent - safe to call multiple times.

    Returns:
        True if tracing is enabled and configured, False otherwise.

    Raises:
        TracingConfigError: If CATLY_REQUIRE_OTEL=1 and configuration fails.
    """
    global _tracer_provider, _is_configured, _test_exporter

    enabled = get_env_bool("CATLY_OTEL_ENABLED", False)
    require_otel = get_env_bool("CATLY_REQUIRE_OTEL", False)
    test_capture = get_env_bool("CATLY_OTEL_TEST_CAPTURE", False)

    if not enabled:
        _is_configured = True
        logger.debug("OpenTelemetry tracing disabled (CATLY_OTEL_ENABLED not set)")
        return False

    # the global provider can only be set once per process; keep reusing it
    if _test_exporter is not None and test_capture:
        return True

    if _is_configured and _tracer_provider is not None:
        return True

    _is_configured = True

    try:
        from opentelemetry import trace
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import ConsoleSpanExporter, SimpleSpanProcessor
        from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

        service_name = get_env_str("CATLY_OTEL_SERVICE_NAME", "catly")
        exporter_type = get_env_str("CATLY_OTEL_EXPORTER", "console")

        if not test_capture and exporter_type != "console":
            raise TracingConfigError(f"Unsupported span exporter: {exporter_type!r}")

        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

        if test_capture:
            _test_exporter = InMemorySpanExporter()
            provider.add_span_processor(SimpleSpanProcessor(_test_exporter))
        else:
            provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(provider)
        _tracer_provider = provider

        logger.info(
            "OpenTelemetry tracing configured: service=%s, exporter=%s",
            service_name,
            "in-memory" if test_capture else exporter_type,
        )
        return True

    except Exception as e:
        logger.error("Failed to configure OpenTelemetry tracing: %s", e)
        if require_otel:
            raise TracingConfigError(
                f"OpenTelemetry tracing required but configuration failed: {e}"
            ) from e
        return False


def get_test_spans() -> list[ReadableSpan]:
    """Get captured spans from in-memory exporter (for testing).

    Returns:
        List of captured spans if CATLY_OTEL_TEST_CAPTURE=1, else empty list.
    """
    if _test_exporter is not None:
        return list(_test_exporter.get_finished_spans())
    return []


def clear_test_spans() -> None:
    """Clear captured spans from in-memory exporter (for testing)."""
    if _test_exporter is not None:
        _test_exporter.clear()


def reset_tracing() -> None:
    """Reset tracing configuration (for testing).

    The TracerProvider cannot be replaced once set, so the test exporter is
    kept and only its spans are cleared.
    """
    global _is_configured

    clear_test_spans()
    _is_configured = False
