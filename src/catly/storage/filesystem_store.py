"""Catly filesystem object storage backend.

Stores each object as one file named after the object inside a base
directory:

    {base_dir}/
        {name}                      # committed object (or zero-length claim)
        .catly-staging/
            {uuid}.tmp              # payload being written

Write protocol:
1. Claim the name with an exclusive-create open of {base_dir}/{name}. The
   open fails if the file exists, so existence check and create are one
   system call and concurrent writers cannot both win.
2. Stream the payload into a private staging file, then fsync it.
3. Atomically replace the zero-length claim with the staging file.

Readers treat a zero-length file as a claim whose write has not completed.
A failed write removes both the staging file and the claim.

A process that dies between steps 1 and 3 leaves its claim and staging file
behind. A store owns its directory exclusively, so opening it removes both
kinds of leftovers and the names become writable again.
"""

from __future__ import annotations

import errno
import hashlib
import logging
import os
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from catly.storage.errors import (
    ObjectExistsError,
    ObjectNotFoundError,
    PathTraversalError,
    StorageBackendError,
    StorageDirectoryError,
)
from catly.storage.models import StoredObjectMetadata
from catly.storage.object_store import ObjectStore, PayloadSource, open_source, write_to_sink
from catly.storage.tracing import traced_storage_operation

logger = logging.getLogger(__name__)

STAGING_DIR_NAME = ".catly-staging"
DEFAULT_CHUNK_SIZE = 64 * 1024

_UNSAFE_NAMES = frozenset({"", ".", ".."})


def _is_single_segment(name: str) -> bool:
    """Check that a name maps to exactly one directory entry, unchanged."""
    if name in _UNSAFE_NAMES or "\x00" in name:
        return False
    separators = {"/", "\\", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    return not any(sep in name for sep in separators)


class FilesystemObjectStore(ObjectStore):
    """Filesystem-based object storage implementation."""

    def __init__(self, base_dir: str | Path, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """Initialize filesystem storage in an existing directory.

        Args:
            base_dir: Directory objects are stored in. Must exist.
            chunk_size: Bytes moved per read/write call when streaming.

        Raises:
            StorageDirectoryError: If base_dir is missing, is a file, is not
                writable, or holds leftovers of abandoned writes that cannot
                be removed.
        """
        path = Path(base_dir)
        if not path.exists():
            raise StorageDirectoryError(
                f"storage base directory does not exist: {path}", path=str(path)
            )
        if not path.is_dir():
            raise StorageDirectoryError("storage base directory path is a file", path=str(path))
        if not os.access(path, os.W_OK | os.X_OK):
            raise StorageDirectoryError("storage base directory is not writable", path=str(path))

        self._base_dir = path.resolve()
        self._staging_dir = self._base_dir / STAGING_DIR_NAME
        self._chunk_size = chunk_size

        try:
            self._staging_dir.mkdir(exist_ok=True)
        except OSError as e:
            raise StorageDirectoryError(
                f"failed to create staging directory: {e}", path=str(self._staging_dir)
            ) from e

        self._recover_abandoned_writes()

        logger.debug("FilesystemObjectStore initialized with base_dir=%s", self._base_dir)

    def _recover_abandoned_writes(self) -> None:
        """Remove staging files and zero-length claims left by a dead process."""
        removed = 0
        try:
            with os.scandir(self._staging_dir) as entries:
                for entry in entries:
                    if entry.is_file(follow_symlinks=False):
                        os.unlink(entry.path)
                        removed += 1
            with os.scandir(self._base_dir) as entries:
                for entry in entries:
                    if entry.name == STAGING_DIR_NAME or not entry.is_file(follow_symlinks=False):
                        continue
                    if entry.stat(follow_symlinks=False).st_size == 0:
                        os.unlink(entry.path)
                        removed += 1
        except OSError as e:
            raise StorageDirectoryError(
                f"failed to clear abandoned writes: {e}", path=str(self._base_dir)
            ) from e

        if removed:
            logger.warning("cleared %d abandoned write(s) in %s", removed, self._base_dir)

    @property
    def backend_name(self) -> str:
        """Return the backend identifier."""
        return "filesystem"

    def is_available(self) -> bool:
        """Check that the base and staging directories are still usable."""
        return self._staging_dir.is_dir() and os.access(self._staging_dir, os.W_OK | os.X_OK)

    @property
    def base_dir(self) -> Path:
        """Return the base directory path."""
        return self._base_dir

    def _object_path(self, name: str) -> Path:
        """Join a name to the base directory strictly as one path segment.

        The gateway already rejects separators; anything that would be
        normalized or reinterpreted by the join is refused here rather than
        rewritten.
        """
        if not _is_single_segment(name):
            raise PathTraversalError(name=name)
        return self._base_dir / name

    @traced_storage_operation("write")
    def write_object(self, name: str, source: PayloadSource) -> StoredObjectMetadata:
        """Store an object unless the name is already taken."""
        target = self._object_path(name)

        try:
            with open(target, "xb"):
                pass
        except FileExistsError as e:
            raise ObjectExistsError(name=name) from e
        except OSError as e:
            raise StorageBackendError(
                message=f"failed to create object file: {e}",
                name=name,
                cause=e,
            ) from e

        staging = self._staging_dir / f"{uuid.uuid4().hex}.tmp"
        try:
            sha256, size = self._stage_payload(name, source, staging)
            os.replace(staging, target)
            self._fsync_base_dir()
        except OSError as e:
            self._discard(staging, target)
            raise StorageBackendError(
                message=f"file upload failed: {e}",
                name=name,
                cause=e,
            ) from e
        except BaseException:
            self._discard(staging, target)
            raise

        logger.debug("wrote %d bytes to disk: name=%s dir=%s", size, name, self._base_dir)

        return StoredObjectMetadata(
            name=name,
            sha256=sha256,
            size_bytes=size,
            created_at=datetime.now(UTC),
        )

    def _stage_payload(self, name: str, source: PayloadSource, staging: Path) -> tuple[str, int]:
        """Copy the payload into a staging file and make it durable.

        Returns:
            Tuple of (sha256 hex digest, size in bytes).
        """
        reader = open_source(source)
        digest = hashlib.sha256()
        size = 0

        with open(staging, "xb") as fd:
            while chunk := reader.read(self._chunk_size):
                fd.write(chunk)
                digest.update(chunk)
                size += len(chunk)

            if size == 0:
                raise ValueError("payload must not be empty")

            fd.flush()
            os.fsync(fd.fileno())

        return digest.hexdigest(), size

    def _fsync_base_dir(self) -> None:
        """Persist the directory entry created by the rename."""
        if os.name != "posix":
            return
        dir_fd = os.open(self._base_dir, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    def _discard(self, staging: Path, target: Path) -> None:
        """Remove the staging file and release the claim on the name."""
        for path in (staging, target):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error("Failed to clean up %s after aborted write: %s", path.name, e)

    @traced_storage_operation("read")
    def read_object(self, name: str, sink: BinaryIO) -> StoredObjectMetadata:
        """Stream a stored object to the sink."""
        target = self._object_path(name)

        try:
            fd = open(target, "rb")
        except (FileNotFoundError, IsADirectoryError) as e:
            raise ObjectNotFoundError(name=name) from e
        except OSError as e:
            if e.errno == errno.ENAMETOOLONG:
                # longer than the medium allows, so it was never written
                raise ObjectNotFoundError(name=name) from e
            raise StorageBackendError(
                message=f"failed to read requested file: {e}",
                name=name,
                cause=e,
            ) from e

        with fd:
            try:
                stat = os.fstat(fd.fileno())
            except OSError as e:
                raise StorageBackendError(
                    message=f"failed to stat requested file: {e}", name=name, cause=e
                ) from e

            size = stat.st_size
            if size == 0:
                # claimed by a writer that has not committed yet
                raise ObjectNotFoundError(name=name)

            digest = hashlib.sha256()
            delivered = 0
            while True:
                try:
                    chunk = fd.read(self._chunk_size)
                except OSError as e:
                    raise StorageBackendError(
                        message=f"failed to read requested file: {e}", name=name, cause=e
                    ) from e
                if not chunk:
                    break
                delivered += write_to_sink(
                    sink, chunk, name=name, delivered=delivered, expected=size
                )
                digest.update(chunk)

        if delivered != size:
            raise StorageBackendError(
                message=f"stored object changed size while reading: {delivered} != {size}",
                name=name,
            )

        logger.debug("read %d bytes from disk: name=%s dir=%s", delivered, name, self._base_dir)

        return StoredObjectMetadata(
            name=name,
            sha256=digest.hexdigest(),
            size_bytes=size,
            created_at=datetime.fromtimestamp(stat.st_mtime, UTC),
        )
