"""Upload routes for the catly upload API.

Provides:
- POST /v1/objects (uploadObject)

The payload travels base64-encoded inside a JSON body. Validation failures
and name collisions are reported to the caller verbatim; storage faults are
logged with full detail and surfaced as an opaque internal error.
"""

from __future__ import annotations

import base64
import binascii
import logging
from enum import Enum

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from catly.services.objects import ObjectService
from catly.storage.errors import ObjectExistsError, ObjectStorageError, PathTraversalError
from catly.validators.types import ObjectValidationError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["Objects"])

INVALID_BASE64_MESSAGE = "image upload data is not valid base64"
INTERNAL_ERROR_MESSAGE = "internal server error"


class ObjectStatus(str, Enum):
    """Outcome of an upload call."""

    OK = "OK"
    ERR = "ERR"


class UploadObjectRequest(BaseModel):
    """Request body for POST /v1/objects."""

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    data: str = ""


class UploadObjectResponse(BaseModel):
    """Response body for POST /v1/objects."""

    status: ObjectStatus
    url: str | None = None
    error: str | None = None


def _get_object_service(request: Request) -> ObjectService:
    service: ObjectService = request.app.state.object_service
    return service


def _error(http_status: int, message: str) -> JSONResponse:
    body = UploadObjectResponse(status=ObjectStatus.ERR, error=message)
    return JSONResponse(status_code=http_status, content=body.model_dump(mode="json"))


@router.post(
    "/objects",
    response_model=UploadObjectResponse,
    status_code=201,
    responses={
        400: {"model": UploadObjectResponse},
        409: {"model": UploadObjectResponse},
        500: {"model": UploadObjectResponse},
    },
)
def upload_object(
    body: UploadObjectRequest, request: Request, response: Response
) -> UploadObjectResponse | JSONResponse:
    """Store a new object under a name that has never been written before.

    Returns:
        201 with the public URL (also in the Location header), 400 when the
        name or payload is refused, 409 when the name is taken, 500 when the
        storage medium fails.
    """
    request_id: str = request.state.request_id

    try:
        payload = base64.b64decode(body.data, validate=True)
    except (binascii.Error, ValueError):
        logger.info(
            "upload refused, payload is not valid base64: %s request_id=%s", body.name, request_id
        )
        return _error(400, INVALID_BASE64_MESSAGE)

    service = _get_object_service(request)

    try:
        receipt = service.upload(body.name, payload)
    except ObjectValidationError as exc:
        logger.info("upload refused: %s request_id=%s", exc.kind.value, request_id)
        return _error(400, exc.message)
    except ObjectExistsError as exc:
        logger.info("upload refused, name taken: %s request_id=%s", body.name, request_id)
        return _error(409, exc.message)
    except PathTraversalError as exc:
        logger.info("upload refused, unsafe object name: %s request_id=%s", body.name, request_id)
        return _error(400, exc.message)
    except ObjectStorageError:
        logger.exception("upload failed: name=%s request_id=%s", body.name, request_id)
        return _error(500, INTERNAL_ERROR_MESSAGE)

    logger.info("stored %s request_id=%s", body.name, request_id)
    response.headers["Location"] = receipt.location
    return UploadObjectResponse(status=ObjectStatus.OK, url=receipt.location)
