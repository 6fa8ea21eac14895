"""Catly FastAPI application factories.

Two applications, one per network interface:
- create_upload_app(): the upload API (POST /v1/objects, GET /health)
- create_serve_app(): the read API (GET /{name})

Both share one ObjectService, and therefore one storage backend, per process.
"""

from fastapi import FastAPI

from catly import __version__
from catly.api.errors import register_exception_handlers
from catly.api.middleware.body_limit import BodySizeLimitMiddleware
from catly.api.middleware.request_id import RequestIdMiddleware
from catly.api.routes.health import router as health_router
from catly.api.routes.objects import router as objects_router
from catly.api.routes.uploads import router as uploads_router
from catly.config import DEFAULT_MAX_REQUEST_SIZE
from catly.observability.tracing import configure_tracing
from catly.services.objects import ObjectService


def create_upload_app(
    service: ObjectService,
    max_request_size: int = DEFAULT_MAX_REQUEST_SIZE,
) -> FastAPI:
    """Create and configure the upload API application.

    Middleware ordering (outermost to innermost):
    1. RequestIdMiddleware - ensures request_id is available everywhere
    2. BodySizeLimitMiddleware - rejects oversized bodies before routing

    Note: Starlette middleware is added in reverse order (last added = outermost).

    Args:
        service: Object service shared with the read API.
        max_request_size: Largest accepted request body in bytes.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Catly Upload API",
        description="Write-once image uploads",
        version=__version__,
    )

    app.state.object_service = service

    configure_tracing()

    app.add_middleware(BodySizeLimitMiddleware, max_body_size=max_request_size)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(uploads_router)

    return app


def create_serve_app(service: ObjectService) -> FastAPI:
    """Create and configure the read API application.

    Every path is an object name, so no other routes are mounted here.
    """
    app = FastAPI(
        title="Catly Read API",
        description="Serves stored images by name",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.object_service = service

    configure_tracing()

    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(objects_router)

    return app
