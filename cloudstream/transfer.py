# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Signed streaming GET/PUT against the storage service.

``TransferClient.get()`` relays an object's body to a binary output
stream, and ``TransferClient.put()`` streams a binary input into an
object without knowing its size up front.  Uploads declare no
``Content-Length``; ``httpx`` sends them with
``Transfer-Encoding: chunked`` while a background thread feeds the body
through a ``BodyPipe``.

Any status other than 200 is a failure.  The response body (usually an
XML error document) is relayed to the error stream before
``ResponseStatusError`` is raised.  Nothing is retried.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from datetime import datetime
from typing import TYPE_CHECKING, BinaryIO

import httpx

from cloudstream.errors import CloudstreamError
from cloudstream.pipe import DEFAULT_MAX_CHUNKS, BodyPipe, pump
from cloudstream.signing import SignedRequest, format_timestamp, signed_request


if TYPE_CHECKING:
    from cloudstream.config import Credentials


logger = logging.getLogger(__name__)

#: Bytes read from the upload source per chunk.
DEFAULT_CHUNK_SIZE = 64 * 1024

#: Seconds allowed for establishing a connection.  Reads and writes are
#: unbounded because bodies may be arbitrarily large or slow.
_CONNECT_TIMEOUT_SECONDS = 30.0

#: Seconds to wait for the upload thread once the request is finished.
_PUMP_JOIN_TIMEOUT_SECONDS = 1.0


class TransferError(CloudstreamError):
    """Base exception for failed transfers."""


class TransportError(TransferError):
    """Connection, DNS, TLS or protocol failure before a response."""


class ResponseStatusError(TransferError):
    """The service answered with a status other than 200."""

    def __init__(self, status_code: int, status_line: str) -> None:
        self.status_code = status_code
        self.status_line = status_line
        super().__init__(f"status: {status_line}")


class BodyCopyError(TransferError):
    """Reading or writing a body failed midway through the transfer."""


class UploadSourceError(TransferError):
    """Reading the upload source failed."""


def normalize_path(path: str) -> str:
    """Return ``path`` with a leading slash.

    >>> normalize_path("bucket/key")
    '/bucket/key'
    """
    if not path.startswith("/"):
        path = "/" + path
    return path


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _status_line(response: httpx.Response) -> str:
    reason = response.reason_phrase or httpx.codes.get_reason_phrase(
        response.status_code
    )
    return f"{response.status_code} {reason}".rstrip()


class TransferClient:
    """Performs signed single-object transfers.

    Example:
        with TransferClient(Credentials.load()) as client:
            client.get("/mybucket/greeting.txt", sys.stdout.buffer,
                       sys.stderr.buffer)
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        client: httpx.Client | None = None,
        clock: Callable[[], datetime] | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_chunks: int = DEFAULT_MAX_CHUNKS,
    ) -> None:
        """Initialize the transfer client.

        Args:
            credentials: Access key, secret and endpoint.
            client: HTTP client to use.  When None, one is created and
                closed by close().
            clock: Returns the current time.  Called once per request.
            chunk_size: Bytes per read from the upload source.
            max_chunks: Upload pipe capacity in chunks.
        """
        self._credentials = credentials
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(None, connect=_CONNECT_TIMEOUT_SECONDS)
        )
        self._clock = clock or _local_now
        self._chunk_size = chunk_size
        self._max_chunks = max_chunks

    def __enter__(self) -> TransferClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def sign(self, verb: str, path: str) -> SignedRequest:
        """Sign a request for ``path`` at the current time.

        The clock is read exactly once; the same timestamp string is
        signed and sent as the ``Date`` header.
        """
        resource_path = normalize_path(path)
        timestamp = format_timestamp(self._clock())
        return signed_request(self._credentials, verb, resource_path, timestamp)

    def get(self, path: str, stdout: BinaryIO, stderr: BinaryIO) -> None:
        """Download an object.

        Args:
            path: Object path, ``/bucket/key`` (leading slash optional).
            stdout: Receives the object's bytes on success.
            stderr: Receives the error body on a non-200 response.

        Raises:
            TransportError: If no response was received.
            ResponseStatusError: On any status other than 200.
            BodyCopyError: If relaying the body fails.
        """
        self._send(self.sign("GET", path), stdout, stderr)

    def put(
        self,
        path: str,
        source: BinaryIO,
        stdout: BinaryIO,
        stderr: BinaryIO,
    ) -> None:
        """Upload ``source`` to an object as a chunked stream.

        Args:
            path: Object path, ``/bucket/key`` (leading slash optional).
            source: Binary stream read to EOF as the request body.
            stdout: Receives the response body on success.
            stderr: Receives the error body on a non-200 response.

        Raises:
            UploadSourceError: If reading ``source`` fails.
            TransportError: If no response was received.
            ResponseStatusError: On any status other than 200.
            BodyCopyError: If relaying the response body fails.
        """
        signed = self.sign("PUT", path)
        pipe = BodyPipe(self._max_chunks)
        pumper = threading.Thread(
            target=pump,
            args=(source, pipe, self._chunk_size),
            daemon=True,
            name="cloudstream-upload-pump",
        )
        pumper.start()
        try:
            self._send(signed, stdout, stderr, content=iter(pipe))
        except Exception:
            source_error = pipe.error
            if source_error is not None:
                raise UploadSourceError(
                    f"reading upload source: {source_error}"
                ) from source_error
            raise
        finally:
            pipe.abort()
            pumper.join(timeout=_PUMP_JOIN_TIMEOUT_SECONDS)
            if pumper.is_alive():
                # Still blocked reading the source; daemon thread ends
                # with the process.
                logger.debug("Upload source read still pending")

    def _send(
        self,
        signed: SignedRequest,
        stdout: BinaryIO,
        stderr: BinaryIO,
        content: Iterable[bytes] | None = None,
    ) -> None:
        url = self._credentials.endpoint + signed.resource_path
        logger.debug("%s %s (Date: %s)", signed.verb, url, signed.timestamp)

        request = self._client.build_request(
            signed.verb, url, headers=signed.headers, content=content
        )
        try:
            response = self._client.send(request, stream=True)
        except httpx.TransportError as e:
            raise TransportError(f"{signed.verb} {url}: {e}") from e

        try:
            self._relay(response, stdout, stderr)
        finally:
            response.close()

    def _relay(
        self,
        response: httpx.Response,
        stdout: BinaryIO,
        stderr: BinaryIO,
    ) -> None:
        """Copy the response body to stdout (200) or stderr (otherwise)."""
        ok = response.status_code == 200
        out = stdout if ok else stderr
        logger.debug("Response: %s", _status_line(response))

        copied = 0
        copy_error: Exception | None = None
        try:
            for chunk in response.iter_bytes():
                out.write(chunk)
                copied += len(chunk)
            out.flush()
        except (httpx.HTTPError, OSError) as e:
            copy_error = e

        if not ok:
            raise ResponseStatusError(
                response.status_code, _status_line(response)
            ) from copy_error
        if copy_error is not None:
            raise BodyCopyError(
                f"copying response body after {copied} bytes: {copy_error}"
            ) from copy_error
        logger.debug("Relayed %d bytes", copied)
