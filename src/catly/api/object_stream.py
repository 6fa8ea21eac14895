"""Streams a stored object into an HTTP response body.

Storage reads push bytes into a sink; responses pull chunks. ObjectStream
joins the two: the read runs in a worker thread and writes into a bounded
queue that the response drains. When the response stops draining, because
the client went away or stopped reading, the next write fails and the store
reports an incomplete write.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Iterator
from typing import BinaryIO, cast

from catly.services.objects import ObjectService
from catly.storage.errors import ObjectStorageError, WriteIncompleteError

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_DEPTH = 8
DEFAULT_STALL_TIMEOUT_SECONDS = 30.0
_POLL_INTERVAL_SECONDS = 0.05

_WAKEUP = object()


class ObjectStream:
    """Sink for ObjectService.download whose bytes are consumed as chunks."""

    def __init__(
        self,
        service: ObjectService,
        name: str,
        *,
        request_id: str = "-",
        depth: int = DEFAULT_QUEUE_DEPTH,
        stall_timeout: float = DEFAULT_STALL_TIMEOUT_SECONDS,
    ) -> None:
        self._service = service
        self._name = name
        self._request_id = request_id
        self._stall_timeout = stall_timeout
        self._queue: queue.Queue[object] = queue.Queue(maxsize=depth)
        self._closed = threading.Event()
        self._finished = threading.Event()
        self._error: Exception | None = None
        self._worker = threading.Thread(
            target=self._run, name=f"catly-read-{request_id}", daemon=True
        )

    def start(self) -> None:
        """Begin reading the object in the background."""
        self._worker.start()

    def close(self) -> None:
        """Stop accepting bytes; the pending read fails as incomplete."""
        self._closed.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the read has ended. Returns False on timeout."""
        return self._finished.wait(timeout)

    def write(self, data: bytes) -> int:
        """Hand one chunk to the response, waiting while the queue is full."""
        chunk = bytes(data)
        deadline = time.monotonic() + self._stall_timeout
        while not self._closed.is_set():
            try:
                self._queue.put(chunk, timeout=_POLL_INTERVAL_SECONDS)
                return len(chunk)
            except queue.Full:
                if time.monotonic() >= deadline:
                    raise BrokenPipeError(
                        f"response not drained for {self._stall_timeout:g}s"
                    ) from None
        raise BrokenPipeError("response closed")

    def next_chunk(self) -> bytes | None:
        """Return the next chunk, or None once the whole object was delivered.

        Raises:
            The storage or validation error the read ended with.
        """
        while True:
            try:
                item = self._queue.get(timeout=_POLL_INTERVAL_SECONDS)
            except queue.Empty:
                item = _WAKEUP
            if item is not _WAKEUP:
                return cast(bytes, item)
            if self._finished.is_set() and self._queue.empty():
                if self._error is not None:
                    raise self._error
                return None

    def iter_chunks(self, first: bytes) -> Iterator[bytes]:
        """Yield the already-fetched first chunk and everything after it."""
        try:
            yield first
            while (chunk := self.next_chunk()) is not None:
                yield chunk
        except WriteIncompleteError:
            raise
        except ObjectStorageError:
            logger.exception(
                "read failed after response started: name=%s request_id=%s",
                self._name,
                self._request_id,
            )
            raise
        finally:
            self.close()

    def _run(self) -> None:
        try:
            self._service.download(self._name, cast(BinaryIO, self))
        except WriteIncompleteError as exc:
            logger.warning(
                "client disconnected during read: %s request_id=%s", exc, self._request_id
            )
            self._error = exc
        except Exception as exc:
            self._error = exc
        finally:
            self._finished.set()
            try:
                self._queue.put_nowait(_WAKEUP)
            except queue.Full:
                pass
