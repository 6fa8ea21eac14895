"""Catly Object Storage Engine.

Write-once object storage: every name is written successfully at most once,
and concurrent writers to the same name see exactly one winner.

Backends:
- MemoryObjectStore: process-local table (default, ":memory:")
- FilesystemObjectStore: one file per object in a base directory

Environment Variables:
    CATLY_STORAGE_PATH: ":memory:" or a base directory (default: ":memory:")
"""

from catly.storage.errors import (
    ObjectExistsError,
    ObjectNotFoundError,
    ObjectStorageError,
    PathTraversalError,
    StorageBackendError,
    StorageDirectoryError,
    WriteIncompleteError,
)
from catly.storage.factory import create_object_store
from catly.storage.filesystem_store import FilesystemObjectStore
from catly.storage.memory_store import MemoryObjectStore, ObjectTable
from catly.storage.models import StoredObject, StoredObjectMetadata
from catly.storage.object_store import ObjectStore, PayloadSource

__all__ = [
    "ObjectStore",
    "PayloadSource",
    "MemoryObjectStore",
    "ObjectTable",
    "FilesystemObjectStore",
    "create_object_store",
    "StoredObject",
    "StoredObjectMetadata",
    "ObjectStorageError",
    "ObjectExistsError",
    "ObjectNotFoundError",
    "StorageBackendError",
    "WriteIncompleteError",
    "PathTraversalError",
    "StorageDirectoryError",
]
