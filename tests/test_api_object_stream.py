"""Tests for ObjectStream, the bridge between storage reads and streamed bodies.

- Every stored byte reaches the consumer, in order
- A consumer that stops early turns the read into an incomplete write
- A consumer that stops draining times out instead of pinning the reader
"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from catly.api.object_stream import ObjectStream
from catly.services.objects import ObjectService
from catly.storage.errors import ObjectNotFoundError, WriteIncompleteError
from catly.storage.filesystem_store import FilesystemObjectStore
from catly.validators.types import ObjectValidationError
from tests.fixtures.api.stores import BASE_URL

PAYLOAD = bytes(range(64))


@pytest.fixture
def service(tmp_path: Path) -> ObjectService:
    """Create a service over a filesystem store that reads 4 bytes at a time."""
    store = FilesystemObjectStore(tmp_path, chunk_size=4)
    store.write_object("cat.jpg", PAYLOAD)
    return ObjectService(store, BASE_URL)


def _drain(stream: ObjectStream) -> bytes:
    received = bytearray()
    while (chunk := stream.next_chunk()) is not None:
        received += chunk
    return bytes(received)


class TestDelivery:
    """Tests for complete reads."""

    def test_delivers_every_chunk_in_order(self, service: ObjectService) -> None:
        """The consumer sees exactly the stored payload."""
        stream = ObjectStream(service, "cat.jpg", depth=2)
        stream.start()

        assert _drain(stream) == PAYLOAD
        assert stream.wait(timeout=5)

    def test_iter_chunks_yields_first_chunk_then_rest(self, service: ObjectService) -> None:
        """The chunk fetched to decide the status is not lost."""
        stream = ObjectStream(service, "cat.jpg")
        stream.start()
        first = stream.next_chunk()
        assert first is not None

        assert b"".join(stream.iter_chunks(first)) == PAYLOAD


class TestEarlyErrors:
    """Tests for failures before the first byte."""

    def test_not_found_is_raised_to_consumer(self, service: ObjectService) -> None:
        """A missing object surfaces from next_chunk."""
        stream = ObjectStream(service, "ghost.jpg")
        stream.start()

        with pytest.raises(ObjectNotFoundError):
            stream.next_chunk()

    def test_invalid_name_is_raised_to_consumer(self, service: ObjectService) -> None:
        """Validation errors travel the same way."""
        stream = ObjectStream(service, "a/b.jpg")
        stream.start()

        with pytest.raises(ObjectValidationError):
            stream.next_chunk()


class TestAbandonedConsumer:
    """Tests for consumers that go away mid-read."""

    def test_closing_the_body_ends_the_read_as_incomplete(
        self, service: ObjectService, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Dropping the response body stops the reader and logs a disconnect."""
        stream = ObjectStream(service, "cat.jpg", request_id="req-gone", depth=1)
        stream.start()
        first = stream.next_chunk()
        assert first is not None

        with caplog.at_level(logging.WARNING, logger="catly.api.object_stream"):
            body = stream.iter_chunks(first)
            next(body)
            body.close()
            assert stream.wait(timeout=5)

        messages = [r.getMessage() for r in caplog.records]
        assert any("client disconnected" in m and "req-gone" in m for m in messages)
        with pytest.raises(WriteIncompleteError):
            _drain(stream)

    def test_stalled_consumer_times_out(self, service: ObjectService) -> None:
        """A body nobody drains does not hold the reader forever."""
        stream = ObjectStream(service, "cat.jpg", depth=1, stall_timeout=0.1)
        stream.start()

        assert stream.wait(timeout=5)
        with pytest.raises(WriteIncompleteError):
            _drain(stream)
