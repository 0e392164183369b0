# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Base exception shared by all cloudstream components."""


class CloudstreamError(Exception):
    """Base exception for failures reported by the command line."""
