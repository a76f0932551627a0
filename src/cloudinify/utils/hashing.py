"""SHA-1 helper used by the request signer.

Cloudinary verifies upload signatures with SHA-1, so this is the one hash
the SDK needs.
"""

from __future__ import annotations

import hashlib


def sha1_hex(data: str) -> str:
    """Return the lowercase hex SHA-1 digest of *data* (UTF-8 encoded).

    Examples
    --------
    >>> sha1_hex("hello")
    'aaf4c61ddcc5e8a2dabede0f3b482cd9aea9434d'
    """
    return hashlib.sha1(data.encode("utf-8")).hexdigest()
