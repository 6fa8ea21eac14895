"""Tests for the upload validation gateway.

Checks run in a fixed order and the first failure is reported:
name length, name characters, empty payload, supported type, extension.
"""

from __future__ import annotations

import logging

import pytest

from catly.validators.content_type import ContentClassifier
from catly.validators.types import RejectionKind
from catly.validators.upload_gateway import EMPTY_PAYLOAD_MESSAGE, UploadValidationGateway


@pytest.fixture
def gateway() -> UploadValidationGateway:
    """Create a gateway backed by magic-byte sniffing."""
    return UploadValidationGateway()


class TestAccepts:
    """Tests for uploads that pass every check."""

    def test_jpeg(self, gateway: UploadValidationGateway, jpeg_bytes: bytes) -> None:
        """A JPEG named .jpg is accepted with its sniffed type."""
        result = gateway.validate("cat.jpg", jpeg_bytes)

        assert result.accepted is True
        assert result.media_type == "image/jpeg"
        assert result.rejection is None

    def test_png(self, gateway: UploadValidationGateway, png_bytes: bytes) -> None:
        """A PNG named .png is accepted."""
        result = gateway.validate("cat.png", png_bytes)

        assert result.accepted is True
        assert result.media_type == "image/png"

    def test_gif_with_upper_case_extension(
        self, gateway: UploadValidationGateway, gif_bytes: bytes
    ) -> None:
        """Extension lookup falls back to lower case."""
        result = gateway.validate("CAT.GIF", gif_bytes)

        assert result.accepted is True
        assert result.media_type == "image/gif"


class TestRejects:
    """Tests for each rejection kind."""

    def test_empty_payload(self, gateway: UploadValidationGateway) -> None:
        """An empty payload is refused before classification."""
        result = gateway.validate("cat.jpg", b"")

        assert result.accepted is False
        assert result.rejection is not None
        assert result.rejection.kind == RejectionKind.EMPTY_PAYLOAD
        assert result.rejection.message == EMPTY_PAYLOAD_MESSAGE
        assert result.rejection.message == "image upload contains no valid data"

    def test_unsupported_content(self, gateway: UploadValidationGateway) -> None:
        """Text content is not an image."""
        result = gateway.validate("cat.jpg", b"hello world")

        assert result.rejection is not None
        assert result.rejection.kind == RejectionKind.UNSUPPORTED_CONTENT_TYPE
        assert result.rejection.message == (
            "uploaded image content of 'text/plain; charset=utf-8' is not supported"
        )

    def test_extension_mismatch(self, gateway: UploadValidationGateway, jpeg_bytes: bytes) -> None:
        """JPEG content under a .png name is refused."""
        result = gateway.validate("cat.png", jpeg_bytes)

        assert result.rejection is not None
        assert result.rejection.kind == RejectionKind.EXTENSION_MISMATCH

    def test_disguised_executable(self, gateway: UploadValidationGateway) -> None:
        """A renamed executable fails on content, not on its name."""
        result = gateway.validate("cat.jpg", b"MZ\x90\x00\x03\x00\x00\x00\x04\x00")

        assert result.rejection is not None
        assert result.rejection.kind == RejectionKind.UNSUPPORTED_CONTENT_TYPE
        assert "application/octet-stream" in result.rejection.message


class TestOrdering:
    """Tests for check priority."""

    def test_name_length_beats_everything(self, gateway: UploadValidationGateway) -> None:
        """A bad name is reported even when the payload is also bad."""
        result = gateway.validate("", b"")

        assert result.rejection is not None
        assert result.rejection.kind == RejectionKind.NAME_LENGTH

    def test_name_characters_beat_payload(self, gateway: UploadValidationGateway) -> None:
        """Unsafe characters are reported before an empty payload."""
        result = gateway.validate("a/b.jpg", b"")

        assert result.rejection is not None
        assert result.rejection.kind == RejectionKind.NAME_CHARACTERS

    def test_empty_payload_skips_detector(self) -> None:
        """The detector never sees an empty payload."""
        calls: list[bytes] = []

        def detector(payload: bytes) -> str:
            calls.append(payload)
            return "image/jpeg"

        gateway = UploadValidationGateway(ContentClassifier(detector=detector))
        result = gateway.validate("cat.jpg", b"")

        assert result.rejection is not None
        assert calls == []

    def test_unsupported_beats_extension_mismatch(self) -> None:
        """Support is checked before the extension."""
        gateway = UploadValidationGateway(ContentClassifier(detector=lambda _: "image/bmp"))

        result = gateway.validate("cat.png", b"\x00")

        assert result.rejection is not None
        assert result.rejection.kind == RejectionKind.UNSUPPORTED_CONTENT_TYPE
        assert result.rejection.details == {"media_type": "image/bmp"}

    def test_injected_detector_decides_type(self) -> None:
        """With a fixed detector, bytes are irrelevant and only the name matters."""
        gateway = UploadValidationGateway(ContentClassifier(detector=lambda _: "image/png"))

        assert gateway.validate("cat.png", b"not really a png").accepted is True
        mismatch = gateway.validate("cat.gif", b"not really a png")
        assert mismatch.rejection is not None
        assert mismatch.rejection.kind == RejectionKind.EXTENSION_MISMATCH


class TestLogging:
    """Tests for rejection logging."""

    def test_rejection_logged_at_info(
        self, gateway: UploadValidationGateway, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Rejections are ordinary outcomes, logged at INFO."""
        with caplog.at_level(logging.INFO, logger="catly.validators.upload_gateway"):
            gateway.validate("cat.jpg", b"")

        records = [r for r in caplog.records if r.name == "catly.validators.upload_gateway"]
        assert len(records) == 1
        assert records[0].levelno == logging.INFO
        assert "empty_payload" in records[0].getMessage()
