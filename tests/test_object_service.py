"""Tests for the object service seam between adapters and the core."""

from __future__ import annotations

import io
import logging
from pathlib import Path

import pytest

from catly.services.objects import ObjectService
from catly.storage.errors import ObjectExistsError, ObjectNotFoundError
from catly.storage.filesystem_store import FilesystemObjectStore
from catly.storage.memory_store import MemoryObjectStore, ObjectTable
from catly.validators.content_type import ContentClassifier
from catly.validators.types import ObjectValidationError, RejectionKind
from catly.validators.upload_gateway import UploadValidationGateway

BASE_URL = "http://127.0.0.1:8080/"


@pytest.fixture
def table() -> ObjectTable:
    """Create an empty object table."""
    return ObjectTable()


@pytest.fixture
def service(table: ObjectTable) -> ObjectService:
    """Create a service over an in-memory store."""
    return ObjectService(MemoryObjectStore(table), BASE_URL)


class TestUpload:
    """Tests for ObjectService.upload."""

    def test_jpeg_upload_returns_location(
        self, service: ObjectService, jpeg_bytes: bytes
    ) -> None:
        """A valid JPEG is stored and addressed under the public base URL."""
        receipt = service.upload("cat.jpg", jpeg_bytes)

        assert receipt.location == "http://127.0.0.1:8080/cat.jpg"
        assert receipt.media_type == "image/jpeg"
        assert receipt.metadata.size_bytes == len(jpeg_bytes)

        sink = io.BytesIO()
        service.download("cat.jpg", sink)
        assert sink.getvalue() == jpeg_bytes

    def test_extension_mismatch_never_reaches_storage(
        self, service: ObjectService, table: ObjectTable, jpeg_bytes: bytes
    ) -> None:
        """JPEG bytes under a .png name are refused before any write."""
        with pytest.raises(ObjectValidationError) as exc_info:
            service.upload("cat.png", jpeg_bytes)

        assert exc_info.value.kind == RejectionKind.EXTENSION_MISMATCH
        assert exc_info.value.message == (
            "uploaded image extension '.png' does not match its content type of 'image/jpeg'"
        )
        assert len(table) == 0

        with pytest.raises(ObjectNotFoundError):
            service.download("cat.png", io.BytesIO())

    def test_invalid_name_never_reaches_storage(
        self, service: ObjectService, table: ObjectTable, jpeg_bytes: bytes
    ) -> None:
        """A traversal attempt is a validation error, not a storage call."""
        with pytest.raises(ObjectValidationError) as exc_info:
            service.upload("../cat.jpg", jpeg_bytes)

        assert exc_info.value.kind == RejectionKind.NAME_CHARACTERS
        assert len(table) == 0

    def test_duplicate_upload_is_collision(
        self, service: ObjectService, jpeg_bytes: bytes, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A second upload under the same name fails; collisions are INFO events."""
        service.upload("cat.jpg", jpeg_bytes)

        with (
            caplog.at_level(logging.INFO, logger="catly.services.objects"),
            pytest.raises(ObjectExistsError),
        ):
            service.upload("cat.jpg", jpeg_bytes)

        levels = {r.levelno for r in caplog.records if r.name == "catly.services.objects"}
        assert levels == {logging.INFO}

    def test_custom_gateway(self, table: ObjectTable) -> None:
        """The gateway is injectable for deterministic classification."""
        gateway = UploadValidationGateway(ContentClassifier(detector=lambda _: "image/gif"))
        service = ObjectService(MemoryObjectStore(table), BASE_URL, gateway=gateway)

        receipt = service.upload("anim.gif", b"opaque")

        assert receipt.media_type == "image/gif"
        assert "anim.gif" in table

    def test_filesystem_backend(self, tmp_path: Path, png_bytes: bytes) -> None:
        """The service behaves the same over the filesystem backend."""
        service = ObjectService(FilesystemObjectStore(tmp_path), "https://img.example:443/")

        receipt = service.upload("cat.png", png_bytes)

        assert receipt.location == "https://img.example:443/cat.png"
        assert (tmp_path / "cat.png").read_bytes() == png_bytes


class TestDownload:
    """Tests for ObjectService.download."""

    def test_invalid_name_is_validation_error(self, service: ObjectService) -> None:
        """Names the validator refuses are bad requests, not lookups."""
        with pytest.raises(ObjectValidationError):
            service.download("a/b.jpg", io.BytesIO())

    def test_missing_object(self, service: ObjectService) -> None:
        """Unknown names are NotFound."""
        with pytest.raises(ObjectNotFoundError):
            service.download("ghost.jpg", io.BytesIO())

    def test_location_for(self, service: ObjectService) -> None:
        """Locations are the base URL followed by the name."""
        assert service.location_for("cat.gif") == "http://127.0.0.1:8080/cat.gif"
