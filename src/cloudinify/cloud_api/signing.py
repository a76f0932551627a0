"""Cloudinary request signatures.

Cloudinary authenticates signed API calls by recomputing a SHA-1 digest
over the signed parameters and the API secret:

1. Sort the parameters by name.
2. Join them as ``name=value`` pairs separated by ``&``.
3. Append the API secret directly, with no separator.
4. Hex-encode the SHA-1 digest of the result.

An upload signs only ``timestamp``, so its message is
``"timestamp=<ts><secret>"``.  A destroy call signs ``public_id`` and
``timestamp``: ``"public_id=<id>&timestamp=<ts><secret>"``.
"""

from __future__ import annotations

import time
from collections.abc import Mapping

from cloudinify.utils.hashing import sha1_hex


def unix_timestamp() -> str:
    """Current Unix time in whole seconds, as a decimal string."""
    return str(int(time.time()))


def string_to_sign(params: Mapping[str, object]) -> str:
    """Build the ``a=1&b=2`` part of the signed message.

    Parameters whose value is ``None`` or ``""`` are not signed, matching
    the server, which ignores them.
    """
    return "&".join(
        f"{key}={params[key]}"
        for key in sorted(params)
        if params[key] is not None and params[key] != ""
    )


def api_sign_request(params: Mapping[str, object], api_secret: str) -> str:
    """Return the hex signature for *params* under *api_secret*."""
    return sha1_hex(string_to_sign(params) + api_secret)


def sign_upload(timestamp: str, api_secret: str) -> str:
    """Signature for an upload request stamped at *timestamp*.

    >>> sign_upload("1000000000", "secret") == sha1_hex("timestamp=1000000000secret")
    True
    """
    return api_sign_request({"timestamp": timestamp}, api_secret)
