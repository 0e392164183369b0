# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""HMAC-SHA1 request signing for the S3-compatible REST protocol.

Implements the legacy ``AWS <key>:<signature>`` authorization header
that Google Cloud Storage accepts for interoperable access.  The string
to sign is::

    VERB\\n
    Content-MD5\\n
    Content-Type\\n
    Date\\n
    CanonicalizedResource

Content-MD5 and Content-Type are never sent, so those lines are always
empty.  The ``Date`` line must be byte-identical to the ``Date`` header
on the wire, so callers format the timestamp once and pass the same
string to both.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime
from email.utils import format_datetime
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from cloudstream.config import Credentials


#: Verbs this client signs.
SUPPORTED_VERBS = frozenset({"GET", "PUT"})

#: Scheme prefix of the Authorization header value.
AUTH_SCHEME = "AWS"


def format_timestamp(moment: datetime) -> str:
    """Format a time as RFC 1123 with a numeric zone.

    Example: ``Mon, 02 Jan 2006 15:04:05 -0700``.  Locale-independent.

    Args:
        moment: Time to format.  Naive values are taken as local time.

    Returns:
        Formatted timestamp.
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return format_datetime(moment)


def canonical_message(verb: str, resource_path: str, timestamp: str) -> str:
    """Build the string to sign.

    Args:
        verb: HTTP method.
        resource_path: Object path, starting with ``/``.
        timestamp: Exact value of the ``Date`` header.

    Returns:
        ``verb``, two empty lines, ``timestamp`` and ``resource_path``,
        joined by newlines with no trailing newline.
    """
    return f"{verb}\n\n\n{timestamp}\n{resource_path}"


def sign(
    credentials: Credentials,
    verb: str,
    resource_path: str,
    timestamp: str,
) -> str:
    """Compute the Authorization header value for a request.

    Args:
        credentials: Access key and secret.
        verb: HTTP method.
        resource_path: Object path, starting with ``/``.
        timestamp: Exact value of the ``Date`` header.

    Returns:
        ``AWS <access_key>:<base64 HMAC-SHA1 signature>``.
    """
    msg = canonical_message(verb, resource_path, timestamp)
    digest = hmac.new(
        credentials.secret.encode("utf-8"),
        msg.encode("utf-8"),
        hashlib.sha1,
    ).digest()
    signature = base64.b64encode(digest).decode("ascii")
    return f"{AUTH_SCHEME} {credentials.access_key}:{signature}"


@dataclass(frozen=True)
class SignedRequest:
    """Everything needed to authenticate one request."""

    verb: str
    resource_path: str
    timestamp: str
    authorization: str

    @property
    def headers(self) -> dict[str, str]:
        """Headers carrying the signature."""
        return {"Date": self.timestamp, "Authorization": self.authorization}


def signed_request(
    credentials: Credentials,
    verb: str,
    resource_path: str,
    timestamp: str,
) -> SignedRequest:
    """Sign a request and bundle the result.

    Raises:
        ValueError: If ``verb`` is not GET or PUT, or ``resource_path``
            does not start with ``/``.
    """
    if verb not in SUPPORTED_VERBS:
        raise ValueError(f"Unsupported verb: {verb!r}")
    if not resource_path.startswith("/"):
        raise ValueError(
            f"Resource path must start with '/': {resource_path!r}"
        )
    return SignedRequest(
        verb=verb,
        resource_path=resource_path,
        timestamp=timestamp,
        authorization=sign(credentials, verb, resource_path, timestamp),
    )
