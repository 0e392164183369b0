# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Bounded in-memory pipe feeding streaming request bodies.

A producer thread writes chunks read from the upload source while the
HTTP client iterates the pipe as the request body.  The pipe holds at
most ``max_chunks`` chunks; ``write()`` blocks when it is full, so the
producer never races far ahead of what has been sent.

A producer-side failure is delivered to the reader through
``close_with_error()`` and re-raised from iteration after the chunks
already queued have been consumed.
"""

import logging
import threading
from collections import deque
from collections.abc import Iterator
from typing import BinaryIO


logger = logging.getLogger(__name__)

#: Default pipe capacity in chunks.
DEFAULT_MAX_CHUNKS = 16


class PipeClosedError(Exception):
    """Raised when writing to a pipe whose reader has gone away."""


class BodyPipe:
    """Single-producer, single-consumer byte chunk channel.

    Thread safety: all state is guarded by one Condition.  ``write``,
    ``close`` and ``close_with_error`` are for the producer; iteration
    and ``abort`` are for the consumer.
    """

    def __init__(self, max_chunks: int = DEFAULT_MAX_CHUNKS) -> None:
        if max_chunks < 1:
            raise ValueError("max_chunks must be at least 1")
        self._max_chunks = max_chunks
        self._chunks: deque[bytes] = deque()
        self._condition = threading.Condition()
        self._closed = False
        self._aborted = False
        self._error: BaseException | None = None

    def write(self, data: bytes) -> None:
        """Queue a chunk, blocking while the pipe is full.

        Raises:
            PipeClosedError: If the reader aborted or the writer
                already closed the pipe.
        """
        if not data:
            return
        with self._condition:
            while len(self._chunks) >= self._max_chunks and not self._aborted:
                self._condition.wait()
            if self._aborted:
                raise PipeClosedError("reader closed the pipe")
            if self._closed:
                raise PipeClosedError("write to closed pipe")
            self._chunks.append(bytes(data))
            self._condition.notify_all()

    def close(self) -> None:
        """Signal end of body."""
        with self._condition:
            self._closed = True
            self._condition.notify_all()

    def close_with_error(self, error: BaseException) -> None:
        """Signal end of body with a failure the reader will raise."""
        with self._condition:
            if self._error is None:
                self._error = error
            self._closed = True
            self._condition.notify_all()

    def abort(self) -> None:
        """Reader-side close.  Wakes a blocked writer and drops data."""
        with self._condition:
            self._aborted = True
            self._chunks.clear()
            self._condition.notify_all()

    @property
    def error(self) -> BaseException | None:
        """Failure passed to close_with_error(), if any."""
        with self._condition:
            return self._error

    def __iter__(self) -> Iterator[bytes]:
        while True:
            with self._condition:
                while not (self._chunks or self._closed or self._aborted):
                    self._condition.wait()
                if self._chunks:
                    chunk = self._chunks.popleft()
                    self._condition.notify_all()
                elif self._error is not None:
                    raise self._error
                else:
                    return
            yield chunk


def pump(source: BinaryIO, pipe: BodyPipe, chunk_size: int) -> int:
    """Copy ``source`` into ``pipe`` until EOF.

    Closes the pipe cleanly at EOF, or with the read error if reading
    ``source`` fails.  Stops quietly if the reader aborted.

    Args:
        source: Binary stream to drain.
        pipe: Pipe to fill.
        chunk_size: Maximum bytes per read.

    Returns:
        Number of bytes written into the pipe.
    """
    total = 0
    while True:
        try:
            chunk = source.read(chunk_size)
        except Exception as e:
            logger.debug("Upload source read failed after %d bytes", total)
            pipe.close_with_error(e)
            return total
        if not chunk:
            break
        try:
            pipe.write(chunk)
        except PipeClosedError:
            logger.debug("Upload pipe closed by reader after %d bytes", total)
            return total
        total += len(chunk)

    pipe.close()
    logger.debug("Upload source drained: %d bytes", total)
    return total
