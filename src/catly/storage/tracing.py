"""Catly object storage OpenTelemetry tracing integration.

Provides the tracing decorator applied to every backend operation.

Security:
    - Never export object names or absolute filesystem paths in spans
    - Names are correlated through their SHA256 hash only
"""

from __future__ import annotations

import functools
import hashlib
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

from opentelemetry import trace

from catly.config import get_env_bool
from catly.storage.models import StoredObjectMetadata

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def _is_otel_enabled() -> bool:
    """Check if OpenTelemetry tracing is enabled."""
    return get_env_bool("CATLY_OTEL_ENABLED", False)


def traced_storage_operation(operation: str) -> Callable[[F], F]:
    """Decorator to trace storage operations with OpenTelemetry.

    Emits spans with safe attributes (no names, no paths).

    Args:
        operation: Operation name ("write" or "read").

    Returns:
        Decorated function that emits OTel spans when tracing is enabled.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self: Any, name: str, *args: Any, **kwargs: Any) -> Any:
            if not _is_otel_enabled():
                return func(self, name, *args, **kwargs)

            tracer = trace.get_tracer("catly.object_store")
            span_name = f"catly.object_store.{operation}"

            with tracer.start_as_current_span(span_name) as span:
                name_sha256 = hashlib.sha256(name.encode("utf-8")).hexdigest()
                span.set_attribute("catly.object_name_sha256", name_sha256)
                span.set_attribute("storage.backend", getattr(self, "backend_name", "unknown"))

                try:
                    result = func(self, name, *args, **kwargs)
                except Exception as e:
                    span.set_attribute("error", True)
                    span.set_attribute("error.type", type(e).__name__)
                    raise

                if isinstance(result, StoredObjectMetadata):
                    span.set_attribute("catly.object_sha256", result.sha256)
                    span.set_attribute("catly.object_size_bytes", result.size_bytes)

                return result

        return cast(F, wrapper)

    return decorator
