# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Logging configuration with secret redaction.

Usage:
    # In the CLI entry point
    from cloudstream.logging import configure_logging
    configure_logging(level=logging.DEBUG)

    # In library modules
    import logging
    logger = logging.getLogger(__name__)
    logger.debug("Sending %s %s", verb, path)

Diagnostics go to standard error.  Standard output is reserved for
object bytes, so nothing in this module may ever write there.
"""

import logging
import re
from typing import ClassVar, TextIO


#: Default format for command-line diagnostics.
DEFAULT_FORMAT = "cloudstream: %(levelname)s: %(name)s: %(message)s"


class SecretFilter(logging.Filter):
    """Logging filter that redacts registered secrets from log output.

    Secrets are registered at runtime with register_secret().  Any
    registered secret appearing in a log message or its arguments is
    replaced with '[REDACTED]'.

    Example:
        SecretFilter.register_secret("long-secret-from-console")
        handler.addFilter(SecretFilter())
        logger.info("Signing with %s", "long-secret-from-console")
        # Output: "Signing with [REDACTED]"
    """

    _secrets: ClassVar[set[str]] = set()
    _pattern: ClassVar[re.Pattern[str] | None] = None

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact registered secrets in the record.

        Args:
            record: The log record to filter.

        Returns:
            Always True (records are modified, never suppressed).
        """
        if self._pattern is not None:
            record.msg = self._pattern.sub("[REDACTED]", str(record.msg))
            if record.args:
                record.args = tuple(
                    self._pattern.sub("[REDACTED]", str(arg))
                    if isinstance(arg, str)
                    else arg
                    for arg in record.args
                )
        return True

    @classmethod
    def register_secret(cls, secret: str) -> None:
        """Register a secret to be redacted from all log output.

        Args:
            secret: The secret string to redact. Empty strings are ignored.
        """
        if secret:
            cls._secrets.add(secret)
            cls._rebuild_pattern()

    @classmethod
    def _rebuild_pattern(cls) -> None:
        # Longest first so a secret containing another is fully masked
        ordered = sorted(cls._secrets, key=len, reverse=True)
        cls._pattern = re.compile("|".join(re.escape(s) for s in ordered))


def configure_logging(
    level: int = logging.WARNING,
    format_string: str | None = None,
    add_secret_filter: bool = True,
    stream: TextIO | None = None,
) -> None:
    """Configure the root logger for the command line.

    Args:
        level: The logging level (e.g., logging.WARNING, logging.DEBUG).
        format_string: Custom format string. If None, uses DEFAULT_FORMAT.
        add_secret_filter: Whether to add the SecretFilter to redact secrets.
        stream: Text stream for log output.  Defaults to ``sys.stderr``.
    """
    if format_string is None:
        format_string = DEFAULT_FORMAT

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(format_string))

    if add_secret_filter:
        handler.addFilter(SecretFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for existing_handler in root_logger.handlers[:]:
        root_logger.removeHandler(existing_handler)

    root_logger.addHandler(handler)
