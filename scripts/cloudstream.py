#!/usr/bin/env python3
# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Script entry point for cloudstream.

Delegates to :func:`cloudstream.cli.cli`.  Equivalent to
``uv run cloudstream``.
"""

import sys
from pathlib import Path


# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cloudstream.cli import cli  # noqa: E402


if __name__ == "__main__":
    cli()
