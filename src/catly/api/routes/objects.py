"""Read routes for the catly serving API.

Provides:
- GET /{name} (getObject)

Object names are taken verbatim from the request path; anything the name
validator refuses (including nested paths) is a bad request. Status is
decided by the first chunk: once it arrives the body is streamed, and a
later failure can only cut the connection short.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request, Response
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from catly.api.errors import CatlyHttpError
from catly.api.object_stream import ObjectStream
from catly.services.objects import ObjectService
from catly.storage.errors import (
    ObjectNotFoundError,
    ObjectStorageError,
    PathTraversalError,
    WriteIncompleteError,
)
from catly.validators.content_sniffer import OCTET_STREAM
from catly.validators.content_type import media_type_for_extension, object_extension
from catly.validators.types import ObjectValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Objects"])

INVALID_URL_MESSAGE = "bad request: image URL is invalid"
NOT_FOUND_MESSAGE = "image not found"
INTERNAL_ERROR_MESSAGE = "internal server error"


def content_type_for(name: str) -> str:
    """Content-Type header for an object, derived from its name's extension."""
    return media_type_for_extension(object_extension(name)) or OCTET_STREAM


@router.get("/{name:path}")
async def get_object(name: str, request: Request) -> Response:
    """Stream the stored bytes of an object."""
    service: ObjectService = request.app.state.object_service
    request_id: str = request.state.request_id

    stream = ObjectStream(service, name, request_id=request_id)
    stream.start()

    try:
        first = await run_in_threadpool(stream.next_chunk)
    except (ObjectValidationError, PathTraversalError) as exc:
        logger.info("read refused, invalid object name: %s request_id=%s", exc, request_id)
        raise CatlyHttpError(400, "BAD_REQUEST", INVALID_URL_MESSAGE) from exc
    except ObjectNotFoundError as exc:
        logger.info("object not found: %s request_id=%s", name, request_id)
        raise CatlyHttpError(404, "NOT_FOUND", NOT_FOUND_MESSAGE) from exc
    except WriteIncompleteError as exc:
        raise CatlyHttpError(500, "INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE) from exc
    except ObjectStorageError as exc:
        logger.exception("read failed: name=%s request_id=%s", name, request_id)
        raise CatlyHttpError(500, "INTERNAL_ERROR", INTERNAL_ERROR_MESSAGE) from exc

    media_type = content_type_for(name)
    if first is None:
        return Response(content=b"", media_type=media_type)
    return StreamingResponse(stream.iter_chunks(first), media_type=media_type)
