# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Credentials configuration.

Credentials are read from a flat ``cloudstream.conf`` file with one
directive per line::

    accesskey GOOG1EXAMPLE
    secret long-secret-provided-by-google
    # optional, defaults to Google Cloud Storage
    endpoint https://storage.googleapis.com

The file is looked up in this order:

1. An explicit path (``--config``).
2. The current working directory, then each parent directory.
3. ``$XDG_CONFIG_HOME/cloudstream/cloudstream.conf`` (typically
   ``~/.config/cloudstream/cloudstream.conf``).

``CLOUDSTREAM_ACCESS_KEY``, ``CLOUDSTREAM_SECRET`` and
``CLOUDSTREAM_ENDPOINT`` override file values.  A ``.env`` file is
loaded first if present.
"""

import logging
import os
import shlex
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_path

from cloudstream.dotenv_loader import load_dotenv_once
from cloudstream.errors import CloudstreamError
from cloudstream.logging import SecretFilter


logger = logging.getLogger(__name__)

#: Application name for XDG path resolution.
_APP_NAME = "cloudstream"

#: Name of the credentials file searched for.
CONFIG_FILENAME = "cloudstream.conf"

#: Service endpoint used when the config does not name one.
DEFAULT_ENDPOINT = "https://storage.googleapis.com"

#: Environment variables overriding file values, keyed by directive.
_ENV_OVERRIDES = {
    "accesskey": "CLOUDSTREAM_ACCESS_KEY",
    "secret": "CLOUDSTREAM_SECRET",
    "endpoint": "CLOUDSTREAM_ENDPOINT",
}


class ConfigError(CloudstreamError):
    """Raised when credentials cannot be found, read or validated."""


def get_config_path() -> Path:
    """Return the XDG fallback config file path.

    Returns:
        ``$XDG_CONFIG_HOME/cloudstream/cloudstream.conf``.
    """
    return user_config_path(_APP_NAME) / CONFIG_FILENAME


def get_dotenv_path() -> Path:
    """Return the ``.env`` file path inside the XDG config directory.

    Returns:
        ``$XDG_CONFIG_HOME/cloudstream/.env``.
    """
    return user_config_path(_APP_NAME) / ".env"


@dataclass(frozen=True)
class Credentials:
    """Access key, signing secret and service endpoint.

    Attributes:
        access_key: Access key identifying the account.
        secret: Shared secret used as the HMAC key.
        endpoint: Scheme and host requests are sent to, without a
            trailing slash.
    """

    access_key: str
    secret: str
    endpoint: str = DEFAULT_ENDPOINT

    def __post_init__(self) -> None:
        if not self.access_key:
            raise ConfigError("accesskey is missing or empty")
        if not self.secret:
            raise ConfigError("secret is missing or empty")
        if not self.endpoint:
            raise ConfigError("endpoint is empty")
        object.__setattr__(self, "endpoint", self.endpoint.rstrip("/"))

    def __repr__(self) -> str:
        return (
            f"Credentials(access_key={self.access_key!r}, "
            f"secret='***', endpoint={self.endpoint!r})"
        )

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Credentials":
        """Find, parse and validate the credentials.

        Args:
            config_path: Explicit config file.  When None, the file is
                discovered with find_config().

        Returns:
            Credentials instance.  The secret is registered with
            SecretFilter before returning.

        Raises:
            ConfigError: If the file is missing, unreadable or invalid,
                or a required value is empty after env overrides.
        """
        load_dotenv_once()

        if config_path is None:
            config_path = find_config()
        elif not config_path.exists():
            raise ConfigError(f"Config file not found: {config_path}")

        values = parse_config(config_path)
        for key, var_name in _ENV_OVERRIDES.items():
            override = os.environ.get(var_name)
            if override:
                logger.debug("Using %s from environment", var_name)
                values[key] = override

        credentials = cls(
            access_key=values.get("accesskey", ""),
            secret=values.get("secret", ""),
            endpoint=values.get("endpoint", DEFAULT_ENDPOINT),
        )
        SecretFilter.register_secret(credentials.secret)
        logger.debug(
            "Loaded credentials for %s from %s",
            credentials.access_key,
            config_path,
        )
        return credentials


def find_config(start: Path | None = None, name: str = CONFIG_FILENAME) -> Path:
    """Locate the config file.

    Searches ``start`` and each of its parents, then the XDG config
    directory.

    Args:
        start: Directory to start from.  Defaults to the current
            working directory.
        name: File name to look for.

    Returns:
        Path to the first match.

    Raises:
        ConfigError: If no config file exists anywhere on the path.
    """
    if start is None:
        try:
            start = Path.cwd()
        except OSError as e:
            raise ConfigError(f"finding {name}: {e}") from e

    for directory in (start, *start.parents):
        candidate = directory / name
        if candidate.exists():
            return candidate

    xdg = get_config_path()
    if name == CONFIG_FILENAME and xdg.exists():
        return xdg

    raise ConfigError(f"could not find {name}")


def parse_config(path: Path) -> dict[str, str]:
    """Parse a config file into a directive → value mapping.

    Args:
        path: Config file to read.

    Returns:
        Mapping of the directives present in the file.

    Raises:
        ConfigError: On read errors, malformed lines, unknown directives
            or directives with the wrong number of arguments.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"reading {path}: {e}") from e

    values: dict[str, str] = {}
    for lineno, line in enumerate(text.splitlines(), start=1):
        try:
            tokens = shlex.split(line, comments=True)
        except ValueError as e:
            raise ConfigError(f"{path}:{lineno}: {e}") from e
        if not tokens:
            continue

        cmd, args = tokens[0], tokens[1:]
        if cmd not in _ENV_OVERRIDES:
            raise ConfigError(f"bad config command {cmd!r}")
        if len(args) != 1:
            raise ConfigError(
                f"bad parameters for {cmd!r}, expected 1, saw {len(args)}"
            )
        values[cmd] = args[0]

    return values
