"""Object service layer.

The single seam between network adapters and the core: uploads go through
the validation gateway and then the storage engine; downloads check the name
and stream the stored payload to a caller-supplied sink.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO

from catly.storage.errors import ObjectExistsError
from catly.storage.models import StoredObjectMetadata
from catly.storage.object_store import ObjectStore
from catly.validators.object_name import validate_object_name
from catly.validators.types import ObjectValidationError
from catly.validators.upload_gateway import UploadValidationGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadReceipt:
    """Result of a successful upload.

    Attributes:
        location: Externally visible URL (public base address + name).
        media_type: Media type sniffed from the payload.
        metadata: Metadata of the stored object.
    """

    location: str
    media_type: str
    metadata: StoredObjectMetadata


class ObjectService:
    """Validates, stores and serves objects. Stateless per call."""

    def __init__(
        self,
        store: ObjectStore,
        public_base_url: str,
        gateway: UploadValidationGateway | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: The storage backend active in this process.
            public_base_url: Base address object names are appended to.
            gateway: Upload validation gateway. Defaults to magic-byte sniffing.
        """
        self._store = store
        self._public_base_url = public_base_url
        self._gateway = gateway if gateway is not None else UploadValidationGateway()

    @property
    def store(self) -> ObjectStore:
        return self._store

    def location_for(self, name: str) -> str:
        """Build the externally visible location of an object."""
        return f"{self._public_base_url}{name}"

    def upload(self, name: str, payload: bytes) -> UploadReceipt:
        """Validate and store a new object.

        Raises:
            ObjectValidationError: If the gateway rejects the upload. Storage
                is never touched.
            ObjectExistsError: If the name is already taken.
            StorageBackendError: If the medium fails.
        """
        result = self._gateway.validate(name, payload)
        if not result.accepted:
            assert result.rejection is not None
            raise ObjectValidationError(result.rejection)

        assert result.media_type is not None

        try:
            metadata = self._store.write_object(name, payload)
        except ObjectExistsError:
            logger.info("upload refused, name already taken: %s", name)
            raise

        logger.info(
            "object stored: name=%s media_type=%s size_bytes=%d",
            name,
            result.media_type,
            metadata.size_bytes,
        )
        return UploadReceipt(
            location=self.location_for(name),
            media_type=result.media_type,
            metadata=metadata,
        )

    def download(self, name: str, sink: BinaryIO) -> StoredObjectMetadata:
        """Stream a stored object to a sink.

        Raises:
            ObjectValidationError: If the name is invalid (bad request).
            ObjectNotFoundError: If the object does not exist.
            WriteIncompleteError: If the sink stopped accepting bytes.
            StorageBackendError: If the medium fails.
        """
        rejection = validate_object_name(name)
        if rejection is not None:
            raise ObjectValidationError(rejection)

        return self._store.read_object(name, sink)
