# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Tests for cloudstream/logging.py."""

import io
import logging

from cloudstream.logging import DEFAULT_FORMAT, SecretFilter, configure_logging


def _record(msg: str, *args: object) -> logging.LogRecord:
    return logging.LogRecord(
        name="test",
        level=logging.INFO,
        pathname="",
        lineno=0,
        msg=msg,
        args=args,
        exc_info=None,
    )


class TestSecretFilter:
    """Tests for SecretFilter class."""

    def test_filter_returns_true(self) -> None:
        """Filter should always return True (never suppress records)."""
        assert SecretFilter().filter(_record("test message")) is True

    def test_no_secrets_no_redaction(self) -> None:
        """Without registered secrets, messages pass through unchanged."""
        record = _record("signing with abc")
        SecretFilter().filter(record)
        assert record.msg == "signing with abc"

    def test_redacts_registered_secret(self) -> None:
        """Registered secrets are redacted from messages."""
        SecretFilter.register_secret("long-secret")
        record = _record("key: long-secret")
        SecretFilter().filter(record)
        assert record.msg == "key: [REDACTED]"

    def test_redacts_in_args(self) -> None:
        """Secrets in string args are redacted; others are untouched."""
        SecretFilter.register_secret("password123")
        record = _record("Login with %s after %d tries", "password123", 3)
        SecretFilter().filter(record)
        assert record.args == ("[REDACTED]", 3)

    def test_overlapping_secrets(self) -> None:
        """A secret containing another is fully redacted."""
        SecretFilter.register_secret("abc")
        SecretFilter.register_secret("abcdef")
        record = _record("value=abcdef")
        SecretFilter().filter(record)
        assert record.msg == "value=[REDACTED]"

    def test_ignores_empty_secret(self) -> None:
        """Empty strings are not registered."""
        SecretFilter.register_secret("")
        assert len(SecretFilter._secrets) == 0
        assert SecretFilter._pattern is None


class TestConfigureLogging:
    """Tests for configure_logging."""

    def setup_method(self) -> None:
        self._level = logging.getLogger().level

    def teardown_method(self) -> None:
        root = logging.getLogger()
        root.setLevel(self._level)
        for handler in root.handlers[:]:
            root.removeHandler(handler)

    def test_single_handler(self) -> None:
        """Repeated configuration does not stack handlers."""
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_level(self) -> None:
        """The root level is set."""
        configure_logging(level=logging.DEBUG)
        assert logging.getLogger().level == logging.DEBUG

    def test_default_format(self) -> None:
        """Default format prefixes the program name."""
        stream = io.StringIO()
        configure_logging(level=logging.INFO, stream=stream)
        logging.getLogger("cloudstream.test").info("hello")
        assert stream.getvalue() == (
            "cloudstream: INFO: cloudstream.test: hello\n"
        )
        assert DEFAULT_FORMAT.startswith("cloudstream:")

    def test_secret_filter_applied(self) -> None:
        """Handler output is redacted."""
        stream = io.StringIO()
        configure_logging(level=logging.INFO, stream=stream)
        SecretFilter.register_secret("s3cr3t")
        logging.getLogger("cloudstream.test").info("using %s", "s3cr3t")
        assert "s3cr3t" not in stream.getvalue()
        assert "[REDACTED]" in stream.getvalue()

    def test_without_secret_filter(self) -> None:
        """The filter can be disabled."""
        stream = io.StringIO()
        configure_logging(
            level=logging.INFO, stream=stream, add_secret_filter=False
        )
        SecretFilter.register_secret("visible")
        logging.getLogger("cloudstream.test").info("visible")
        assert "visible" in stream.getvalue()
