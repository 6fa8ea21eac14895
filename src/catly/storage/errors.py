"""Catly object storage error types.

Every storage outcome other than success is one of these exceptions:

- ObjectExistsError: the name already holds an object (name collision)
- ObjectNotFoundError: no completed write exists for the name
- StorageBackendError: the medium failed (disk, permissions, I/O)
- WriteIncompleteError: the caller's sink did not absorb the full payload

None of them is retried inside the engine.
"""

from __future__ import annotations

ERR_FILE_EXISTS = "the file you have uploaded must have a unique name"
ERR_FILE_DOES_NOT_EXIST = "the file you requested does not exist"
ERR_WRITE_INCOMPLETE = "write incomplete"


class ObjectStorageError(Exception):
    """Base exception for object storage operations.

    Attributes:
        message: Human-readable error message, safe to show to the caller
            for every subclass except StorageBackendError.
        name: Object name associated with the operation (if applicable).
    """

    def __init__(self, message: str, *, name: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.name = name

    def __str__(self) -> str:
        if self.name:
            return f"{self.message} name={self.name}"
        return self.message


class ObjectExistsError(ObjectStorageError):
    """Raised when a write loses the race for an already existing name.

    Expected outcome of concurrent or repeated uploads, not a server fault.
    """

    def __init__(self, message: str = ERR_FILE_EXISTS, *, name: str | None = None) -> None:
        super().__init__(message, name=name)


class ObjectNotFoundError(ObjectStorageError):
    """Raised when no successful write has completed for a name."""

    def __init__(
        self, message: str = ERR_FILE_DOES_NOT_EXIST, *, name: str | None = None
    ) -> None:
        super().__init__(message, name=name)


class WriteIncompleteError(ObjectStorageError):
    """Raised when the read sink accepted fewer bytes than the stored object.

    This is a sink-side problem (typically a client disconnect), not a
    storage defect.

    Attributes:
        written: Bytes the sink accepted before the failure.
        expected: Stored size of the object.
    """

    def __init__(
        self,
        message: str = ERR_WRITE_INCOMPLETE,
        *,
        name: str | None = None,
        written: int = 0,
        expected: int = 0,
    ) -> None:
        super().__init__(message, name=name)
        self.written = written
        self.expected = expected


class StorageBackendError(ObjectStorageError):
    """Raised when the storage medium cannot complete an operation.

    The message carries operator diagnostics and must not be shown to callers.
    """

    def __init__(
        self,
        message: str = "Storage backend error",
        *,
        name: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, name=name)
        self.cause = cause


class PathTraversalError(ObjectStorageError):
    """Raised when a name cannot be used verbatim as a single path segment."""

    def __init__(
        self,
        message: str = "Invalid name: not a single path segment",
        *,
        name: str | None = None,
    ) -> None:
        super().__init__(message, name=name)


class StorageDirectoryError(ObjectStorageError):
    """Raised when the filesystem base directory is unusable."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
