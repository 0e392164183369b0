# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Stream objects to and from S3-compatible object storage.

``cloudstream put /bucket/key`` uploads standard input and
``cloudstream get /bucket/key`` writes the object to standard output.
Requests are authenticated with the HMAC-SHA1 ``AWS`` authorization
scheme, which Google Cloud Storage accepts for interoperable access.
"""
