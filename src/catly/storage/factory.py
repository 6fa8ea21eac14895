"""Backend selection from the configured storage path."""

from __future__ import annotations

import logging
from pathlib import Path

from catly.config import MEMORY_STORAGE_PATH
from catly.storage.errors import StorageDirectoryError
from catly.storage.filesystem_store import FilesystemObjectStore
from catly.storage.memory_store import MemoryObjectStore
from catly.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


def create_object_store(storage_path: str) -> ObjectStore:
    """Create the single storage backend for this process.

    Args:
        storage_path: ":memory:" for the in-memory backend, otherwise the base
            directory of the filesystem backend. A missing directory is
            created.

    Returns:
        The configured ObjectStore.

    Raises:
        StorageDirectoryError: If the directory cannot be created or used.
    """
    if storage_path == MEMORY_STORAGE_PATH:
        logger.info("setting up in-memory storage")
        return MemoryObjectStore()

    logger.info("setting up file storage in %s", storage_path)

    path = Path(storage_path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError:
        # a regular file sits at the path; the store reports it precisely
        pass
    except OSError as e:
        raise StorageDirectoryError(
            f"failed to create storage directory: {e}", path=storage_path
        ) from e

    return FilesystemObjectStore(path)
