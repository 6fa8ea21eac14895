"""Pytest configuration and fixtures for catly tests.

This module provides common payload fixtures and keeps the process
environment free of tracing and CATLY_* settings between tests.
"""

from __future__ import annotations

import pytest

JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00" + bytes(64)
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01" + bytes(32)
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00\xff\xff\xff\x00\x00\x00!\xf9\x04" + bytes(16)

_CATLY_ENV_VARS = (
    "CATLY_DOMAIN",
    "CATLY_HTTP_PORT",
    "CATLY_UPLOAD_PORT",
    "CATLY_HOST",
    "CATLY_STORAGE_PATH",
    "CATLY_MAX_REQUEST_SIZE",
    "CATLY_LOG_LEVEL",
    "CATLY_OTEL_ENABLED",
    "CATLY_REQUIRE_OTEL",
    "CATLY_OTEL_EXPORTER",
    "CATLY_OTEL_SERVICE_NAME",
    "CATLY_OTEL_TEST_CAPTURE",
)


@pytest.fixture(autouse=True)
def clean_catly_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove CATLY_* variables so every test starts from the defaults.

    Tests that need a variable set it through monkeypatch themselves.
    """
    for key in _CATLY_ENV_VARS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Return a minimal payload sniffed as image/jpeg."""
    return JPEG_BYTES


@pytest.fixture
def png_bytes() -> bytes:
    """Return a minimal payload sniffed as image/png."""
    return PNG_BYTES


@pytest.fixture
def gif_bytes() -> bytes:
    """Return a minimal payload sniffed as image/gif."""
    return GIF_BYTES
