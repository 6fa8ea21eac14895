"""Catly in-memory object storage backend.

Objects live in an ObjectTable owned by the store instance and are lost when
the process exits. The table's insert-if-absent is the only mutation, and it
alone enforces the at-most-one-writer rule.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import UTC, datetime
from typing import BinaryIO

from catly.storage.errors import (
    ObjectExistsError,
    ObjectNotFoundError,
    StorageBackendError,
)
from catly.storage.models import StoredObject, StoredObjectMetadata
from catly.storage.object_store import ObjectStore, PayloadSource, open_source, write_to_sink
from catly.storage.tracing import traced_storage_operation

logger = logging.getLogger(__name__)


class ObjectTable:
    """Concurrent name -> object association.

    dict.setdefault is a single atomic operation on a str-keyed dict, so two
    threads inserting the same name can never both see their own object
    stored. No lock is held around payload copies.
    """

    def __init__(self) -> None:
        self._objects: dict[str, StoredObject] = {}

    def insert_if_absent(self, name: str, obj: StoredObject) -> StoredObject:
        """Store obj under name unless the name is taken.

        Returns:
            The object now associated with name: obj itself if this call
            won, otherwise the object stored by the earlier writer.
        """
        return self._objects.setdefault(name, obj)

    def get(self, name: str) -> StoredObject | None:
        """Return the object stored under name, if any."""
        return self._objects.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._objects

    def __len__(self) -> int:
        return len(self._objects)


class MemoryObjectStore(ObjectStore):
    """In-memory object storage implementation."""

    def __init__(self, table: ObjectTable | None = None) -> None:
        """Initialize in-memory storage.

        Args:
            table: Table to store objects in. A fresh one is created if None.
        """
        self._table = table if table is not None else ObjectTable()

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "memory"

    @traced_storage_operation("write")
    def write_object(self, name: str, source: PayloadSource) -> StoredObjectMetadata:
        """Store an object unless the name is already taken."""
        # fast path only; the insert below decides the race
        if name in self._table:
            raise ObjectExistsError(name=name)

        reader = open_source(source)
        try:
            data = bytes(reader.read())
        except OSError as e:
            raise StorageBackendError(
                message=f"failed to read bytes from request: {e}",
                name=name,
                cause=e,
            ) from e

        if not data:
            raise ValueError("payload must not be empty")

        metadata = StoredObjectMetadata(
            name=name,
            sha256=hashlib.sha256(data).hexdigest(),
            size_bytes=len(data),
            created_at=datetime.now(UTC),
        )
        candidate = StoredObject(metadata=metadata, body=data)

        if self._table.insert_if_absent(name, candidate) is not candidate:
            raise ObjectExistsError(name=name)

        logger.debug("wrote %d bytes to memory: name=%s", metadata.size_bytes, name)
        return metadata

    @traced_storage_operation("read")
    def read_object(self, name: str, sink: BinaryIO) -> StoredObjectMetadata:
        """Write a stored object to the sink."""
        obj = self._table.get(name)
        if obj is None:
            raise ObjectNotFoundError(name=name)

        size = obj.metadata.size_bytes
        write_to_sink(sink, obj.body, name=name, delivered=0, expected=size)

        logger.debug("read %d bytes from memory: name=%s", size, name)
        return obj.metadata
