"""Process wiring for the two catly listeners.

One storage backend and one ObjectService are shared by the upload API and
the read API. The read API runs in a background thread, the upload API in
the calling thread; when either server stops, the other is asked to stop.
"""

from __future__ import annotations

import logging
import threading

import uvicorn

from catly.api.main import create_serve_app, create_upload_app
from catly.config import Settings
from catly.services.objects import ObjectService
from catly.storage.factory import create_object_store
from catly.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)

SHUTDOWN_JOIN_TIMEOUT_SECONDS = 10.0


def build_service(settings: Settings, store: ObjectStore | None = None) -> ObjectService:
    """Create the object service for a process.

    Args:
        settings: Process settings.
        store: Storage backend. Built from settings.storage_path if None.

    Raises:
        StorageDirectoryError: If the storage directory cannot be used.
    """
    if store is None:
        store = create_object_store(settings.storage_path)
    logger.info(
        "object storage ready: backend=%s public_base_url=%s",
        store.backend_name,
        settings.public_base_url,
    )
    return ObjectService(store, settings.public_base_url)


def _uvicorn_server(app: object, settings: Settings, port: int) -> uvicorn.Server:
    config = uvicorn.Config(
        app,
        host=settings.host,
        port=port,
        log_level=settings.log_level.lower(),
    )
    return uvicorn.Server(config)


def run_servers(settings: Settings, store: ObjectStore | None = None) -> None:
    """Run the upload and read APIs until one of them stops.

    Blocks the calling thread, which must be the main thread so the upload
    server can install its signal handlers.
    """
    service = build_service(settings, store)

    upload_server = _uvicorn_server(
        create_upload_app(service, max_request_size=settings.max_request_size),
        settings,
        settings.upload_port,
    )
    serve_server = _uvicorn_server(create_serve_app(service), settings, settings.http_port)

    def serve_forever() -> None:
        try:
            serve_server.run()
        finally:
            upload_server.should_exit = True

    serve_thread = threading.Thread(target=serve_forever, name="catly-serve", daemon=True)

    logger.info(
        "starting catly: read api on %s:%d, upload api on %s:%d",
        settings.host,
        settings.http_port,
        settings.host,
        settings.upload_port,
    )
    serve_thread.start()
    try:
        upload_server.run()
    finally:
        serve_server.should_exit = True
        serve_thread.join(timeout=SHUTDOWN_JOIN_TIMEOUT_SECONDS)
        logger.info("catly stopped")
