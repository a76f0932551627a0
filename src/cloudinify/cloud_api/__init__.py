"""cloudinify.cloud_api -- Cloudinary API transport and endpoint wrappers.

This sub-package provides:

* :mod:`.signing` -- SHA-1 request signatures.
* :mod:`.request` -- Signed multipart upload requests.
* :mod:`.transport` -- HTTP transport with status and JSON handling.
* :mod:`.uploads` -- Upload API wrapper.
"""

from __future__ import annotations

from .request import SignedUploadRequest, new_upload_request
from .signing import api_sign_request, sign_upload, string_to_sign, unix_timestamp
from .transport import CloudinaryTransport, parse_upload_response
from .uploads import UploadAPI

__all__ = [
    "CloudinaryTransport",
    "SignedUploadRequest",
    "UploadAPI",
    "api_sign_request",
    "new_upload_request",
    "parse_upload_response",
    "sign_upload",
    "string_to_sign",
    "unix_timestamp",
]
