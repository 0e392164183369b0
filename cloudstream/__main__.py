# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Allow ``python -m cloudstream``."""

from cloudstream.cli import cli


if __name__ == "__main__":
    cli()
