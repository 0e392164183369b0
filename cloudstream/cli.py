# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Command-line entry point.

Usage:
    echo 'hi there!' | cloudstream put /mybucket/greeting.txt
    cloudstream get /mybucket/greeting.txt

Exit codes:
    0 - Success
    1 - Configuration, transport, status or copy failure
    2 - Usage error
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import BinaryIO

import httpx

from cloudstream.config import Credentials
from cloudstream.errors import CloudstreamError
from cloudstream.logging import configure_logging
from cloudstream.transfer import TransferClient


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudstream",
        description="Stream objects to and from S3-compatible storage",
        epilog=(
            "Credentials are read from cloudstream.conf in the current "
            "directory or a parent, or from ~/.config/cloudstream/."
        ),
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to cloudstream.conf (default: search upwards from cwd)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    get_parser = subparsers.add_parser(
        "get",
        help="Write an object to stdout",
    )
    get_parser.add_argument("path", help="Object path, /bucket/key")
    put_parser = subparsers.add_parser(
        "put",
        help="Upload stdin to an object",
    )
    put_parser.add_argument("path", help="Object path, /bucket/key")
    return parser


def _report(stderr: BinaryIO, message: str) -> None:
    stderr.write(f"cloudstream: {message}\n".encode("utf-8", "replace"))
    stderr.flush()


def main(
    argv: list[str] | None = None,
    *,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
    stderr: BinaryIO | None = None,
    client: httpx.Client | None = None,
) -> int:
    """Run one transfer.

    Args:
        argv: Command-line arguments. If None, uses sys.argv[1:].
        stdin: Upload source.  Defaults to ``sys.stdin.buffer``.
        stdout: Download sink.  Defaults to ``sys.stdout.buffer``.
        stderr: Error bodies and messages.  Defaults to
            ``sys.stderr.buffer``.
        client: HTTP client override, for tests.

    Returns:
        Exit code.
    """
    args = _build_parser().parse_args(argv)

    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer
    stderr = stderr if stderr is not None else sys.stderr.buffer

    configure_logging(
        level=logging.DEBUG if args.debug else logging.WARNING,
        add_secret_filter=True,
    )

    try:
        credentials = Credentials.load(config_path=args.config)
        with TransferClient(credentials, client=client) as transfer:
            if args.command == "get":
                transfer.get(args.path, stdout, stderr)
            else:
                transfer.put(args.path, stdin, stdout, stderr)
    except CloudstreamError as e:
        logger.debug("%s failed", args.command, exc_info=True)
        _report(stderr, str(e))
        return EXIT_FAILURE

    return EXIT_OK


def cli() -> None:
    """Console script entry point."""
    sys.exit(main())
