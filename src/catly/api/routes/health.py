"""Health endpoint for the catly upload API.

Reports whether the storage backend behind both listeners can accept
writes. Load balancers should stop routing uploads on a 503.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from enum import Enum

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from catly import __version__
from catly.services.objects import ObjectService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


class HealthStatus(str, Enum):
    """Overall service state."""

    OK = "ok"
    UNAVAILABLE = "unavailable"


class StorageHealth(BaseModel):
    backend: str
    available: bool


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: HealthStatus
    time: str
    version: str
    storage: StorageHealth


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
def get_health(request: Request, response: Response) -> HealthResponse:
    """Report service status and storage availability.

    Returns 200 while the backend accepts writes and 503 otherwise.
    """
    service: ObjectService = request.app.state.object_service
    store = service.store
    available = store.is_available()

    if not available:
        logger.warning(
            "health check failed: storage backend %s is unavailable request_id=%s",
            store.backend_name,
            request.state.request_id,
        )
        response.status_code = 503

    return HealthResponse(
        status=HealthStatus.OK if available else HealthStatus.UNAVAILABLE,
        time=datetime.now(UTC).isoformat(),
        version=__version__,
        storage=StorageHealth(backend=store.backend_name, available=available),
    )
