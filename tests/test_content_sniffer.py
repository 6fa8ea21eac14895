"""Tests for magic-byte media type sniffing."""

from __future__ import annotations

import pytest

from catly.validators.content_sniffer import (
    OCTET_STREAM,
    SNIFF_LENGTH,
    TEXT_PLAIN_UTF8,
    sniff_media_type,
)


class TestImageSignatures:
    """Tests for the supported image types."""

    def test_jpeg(self, jpeg_bytes: bytes) -> None:
        """FF D8 FF is JPEG."""
        assert sniff_media_type(jpeg_bytes) == "image/jpeg"

    def test_png(self, png_bytes: bytes) -> None:
        """The 8-byte PNG signature is PNG."""
        assert sniff_media_type(png_bytes) == "image/png"

    @pytest.mark.parametrize("header", [b"GIF87a", b"GIF89a"])
    def test_gif(self, header: bytes) -> None:
        """Both GIF versions are detected."""
        assert sniff_media_type(header + b"\x01\x00\x01\x00") == "image/gif"

    def test_detection_ignores_trailing_bytes(self, jpeg_bytes: bytes) -> None:
        """Only the leading bytes decide the type."""
        assert sniff_media_type(jpeg_bytes + b"%PDF-" * 1000) == "image/jpeg"


class TestOtherSignatures:
    """Tests for recognised but unsupported types."""

    @pytest.mark.parametrize(
        ("data", "expected"),
        [
            (b"%PDF-1.7\n", "application/pdf"),
            (b"%!PS-Adobe-3.0", "application/postscript"),
            (b"BM\x00\x00\x00\x00", "image/bmp"),
            (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
            (b"\x00\x00\x01\x00\x01\x00", "image/x-icon"),
            (b"OggS\x00\x02", "application/ogg"),
            (b"ID3\x03\x00", "audio/mpeg"),
            (b"PK\x03\x04\x14\x00", "application/zip"),
            (b"\x1f\x8b\x08\x00", "application/x-gzip"),
            (b"Rar!\x1a\x07\x00\xcf", "application/x-rar-compressed"),
            (b"\x00asm\x01\x00\x00\x00", "application/wasm"),
            (b"\xef\xbb\xbfhello", TEXT_PLAIN_UTF8),
            (b"\xfe\xffhello", "text/plain; charset=utf-16be"),
            (b"\xff\xfehello", "text/plain; charset=utf-16le"),
        ],
    )
    def test_signature(self, data: bytes, expected: str) -> None:
        """Known signatures map to their media types."""
        assert sniff_media_type(data) == expected

    def test_mp4(self) -> None:
        """An ftyp box with an mp4 brand is video/mp4."""
        data = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"
        assert sniff_media_type(data) == "video/mp4"


class TestMarkup:
    """Tests for HTML and XML detection."""

    def test_html_after_whitespace(self) -> None:
        """Leading whitespace is skipped before tag matching."""
        assert sniff_media_type(b"  \n<html><body>") == "text/html; charset=utf-8"

    def test_html_is_case_insensitive(self) -> None:
        """Tag names match regardless of case."""
        assert sniff_media_type(b"<!doctype html>") == "text/html; charset=utf-8"

    def test_unterminated_tag_is_not_html(self) -> None:
        """"<Ball" is not a <B> tag."""
        assert sniff_media_type(b"<Ball game") == TEXT_PLAIN_UTF8

    def test_xml(self) -> None:
        """An XML declaration is text/xml."""
        assert sniff_media_type(b'<?xml version="1.0"?>') == "text/xml; charset=utf-8"


class TestFallbacks:
    """Tests for text and binary fallbacks."""

    def test_plain_text(self) -> None:
        """Printable data without a signature is text."""
        assert sniff_media_type(b"just some words\n") == TEXT_PLAIN_UTF8

    def test_binary(self) -> None:
        """Control bytes without a signature are octet-stream."""
        assert sniff_media_type(b"\x01\x02\x03\x04") == OCTET_STREAM

    def test_empty_is_text(self) -> None:
        """Empty input yields a type rather than failing."""
        assert sniff_media_type(b"") == TEXT_PLAIN_UTF8

    def test_binary_byte_past_sniff_window_is_ignored(self) -> None:
        """Bytes beyond the sniff window do not affect the result."""
        data = b"a" * SNIFF_LENGTH + b"\x00"
        assert sniff_media_type(data) == TEXT_PLAIN_UTF8

    def test_deterministic(self, png_bytes: bytes) -> None:
        """The same bytes always give the same type."""
        assert {sniff_media_type(png_bytes) for _ in range(5)} == {"image/png"}
