"""Catly object storage interface definition.

Provides the ObjectStore contract that every backend implements identically,
plus the source/sink helpers the backends share.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from typing import BinaryIO, Union

from catly.storage.errors import WriteIncompleteError
from catly.storage.models import StoredObjectMetadata

PayloadSource = Union[bytes, bytearray, memoryview, BinaryIO]


class ObjectStore(ABC):
    """Abstract base class for write-once object storage backends.

    All implementations guarantee:
    - At most one successful write per name for the lifetime of the store
    - Existence check and create are a single atomic step
    - A failed write never leaves a readable or partially visible object
    - Safe for unbounded concurrent callers without external locking

    Implementations:
    - MemoryObjectStore: process-local table (lost on restart)
    - FilesystemObjectStore: one file per object in a base directory
    """

    @property
    @abstractmethod
    def backend_name(self) -> str:
        """Return the backend identifier for observability.

        Returns:
            Backend name string (e.g., "memory", "filesystem").
        """
        ...

    def is_available(self) -> bool:
        """Report whether the backend can currently accept writes.

        Used by the health endpoint. Backends without an external medium are
        always available.
        """
        return True

    @abstractmethod
    def write_object(self, name: str, source: PayloadSource) -> StoredObjectMetadata:
        """Create an object under a name that has never been written.

        Args:
            name: Object name, already accepted by the upload gateway.
            source: Payload bytes or a readable binary stream.

        Returns:
            Metadata for the stored object.

        Raises:
            ObjectExistsError: If the name already holds an object, including
                when a concurrent writer wins the race.
            StorageBackendError: If the medium fails. Nothing is left behind.
            ValueError: If the payload is empty.
        """
        ...

    @abstractmethod
    def read_object(self, name: str, sink: BinaryIO) -> StoredObjectMetadata:
        """Write the full stored payload of an object to a sink.

        Args:
            name: Object name.
            sink: Writable binary stream receiving the payload.

        Returns:
            Metadata of the object that was delivered.

        Raises:
            ObjectNotFoundError: If no write for the name has completed. The
                sink receives zero bytes.
            WriteIncompleteError: If the sink did not accept every byte.
            StorageBackendError: If the medium fails.
        """
        ...


def open_source(source: PayloadSource) -> BinaryIO:
    """Return a readable binary stream over a payload source."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return io.BytesIO(source)
    return source


def write_to_sink(sink: BinaryIO, data: bytes, *, name: str, delivered: int, expected: int) -> int:
    """Write one chunk to a caller-supplied sink.

    Args:
        sink: Writable binary stream.
        data: Chunk to deliver.
        name: Object name (for error context).
        delivered: Bytes already delivered before this chunk.
        expected: Total stored size of the object.

    Returns:
        Number of bytes written (always len(data)).

    Raises:
        WriteIncompleteError: If the sink accepted fewer bytes, returned None,
            or failed because the consumer went away.
    """
    try:
        written = sink.write(data)
    except (OSError, ValueError) as e:
        raise WriteIncompleteError(name=name, written=delivered, expected=expected) from e

    written = written or 0
    if written < len(data):
        raise WriteIncompleteError(name=name, written=delivered + written, expected=expected)
    return written
