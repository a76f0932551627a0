"""Signed multipart upload requests.

A :class:`SignedUploadRequest` is built fresh for every upload call and
thrown away afterwards.  It carries the three authentication fields
(``api_key``, ``timestamp``, ``signature``) plus exactly one ``file``
payload: either the bytes of a local image, or the source URL of a remote
one that Cloudinary should fetch itself.  :meth:`SignedUploadRequest.build`
encodes everything into an in-memory ``multipart/form-data`` body.
"""

from __future__ import annotations

from typing import IO, Any, Union

import httpx

from cloudinify.errors import CloudinifyEncodingError, CloudinifyIOError

from .signing import sign_upload, unix_timestamp

FileSource = Union[bytes, bytearray, memoryview, IO[bytes]]
"""Anything :meth:`SignedUploadRequest.add_file` can read image bytes from."""

PAYLOAD_FIELD = "file"


def _read_all(data: FileSource, filename: str) -> bytes:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)

    read = getattr(data, "read", None)
    if read is None:
        raise CloudinifyEncodingError(
            f"Cannot read upload payload of type {type(data).__name__}",
            context={"field": PAYLOAD_FIELD, "reason": "unreadable_type"},
        )
    try:
        content = read()
    except OSError as exc:
        raise CloudinifyIOError(
            f"Failed to read upload payload {filename!r}: {exc}",
            context={"filename": filename},
            cause=exc,
        ) from exc

    if isinstance(content, str):
        raise CloudinifyEncodingError(
            "Upload payload must be opened in binary mode",
            context={"field": PAYLOAD_FIELD, "reason": "text_stream"},
        )
    return bytes(content)


class SignedUploadRequest:
    """A single-use signed upload request.

    Parameters
    ----------
    uri:
        Destination upload endpoint.
    fields:
        The signed text fields (``api_key``, ``timestamp``, ``signature``).
    """

    def __init__(self, uri: str, fields: dict[str, str]) -> None:
        self.uri = uri
        self.fields = fields
        self._payload: tuple[str | None, bytes | str] | None = None

    @property
    def mode(self) -> str | None:
        """``"file"``, ``"url"``, or ``None`` while no payload is attached."""
        if self._payload is None:
            return None
        return "url" if self._payload[0] is None else "file"

    def _attach(self, payload: tuple[str | None, bytes | str]) -> None:
        if self._payload is not None:
            raise CloudinifyEncodingError(
                "Upload request already carries a payload",
                context={"field": PAYLOAD_FIELD, "reason": "duplicate_payload"},
            )
        self._payload = payload

    def add_file(self, data: FileSource, filename: str = "file") -> None:
        """Read *data* completely into memory as the ``file`` part."""
        self._attach((filename or "file", _read_all(data, filename)))

    def add_url(self, url: httpx.URL | str) -> None:
        """Reference a remote image by URL as the ``file`` text field."""
        self._attach((None, str(url)))

    def describe(self) -> dict[str, Any]:
        """Form fields as a plain dict, for (redacted) debug output."""
        described: dict[str, Any] = dict(self.fields)
        if self._payload is not None:
            described[PAYLOAD_FIELD] = self._payload[1]
        return described

    def build(self) -> httpx.Request:
        """Encode the request into a ready-to-send POST.

        The body is rendered in memory so the multipart boundary, closing
        delimiter and ``Content-Type`` header are final on return.

        Raises
        ------
        CloudinifyEncodingError
            If no payload was attached or httpx cannot encode the body.
        """
        if self._payload is None:
            raise CloudinifyEncodingError(
                "Upload request has no file or URL payload",
                context={"field": PAYLOAD_FIELD, "reason": "missing_payload"},
            )
        try:
            request = httpx.Request(
                "POST",
                self.uri,
                data=self.fields,
                files={PAYLOAD_FIELD: self._payload},
            )
            request.read()
        except (TypeError, ValueError, httpx.InvalidURL) as exc:
            raise CloudinifyEncodingError(
                f"Failed to encode upload request: {exc}",
                context={"field": PAYLOAD_FIELD, "reason": "encode_failed"},
                cause=exc,
            ) from exc
        return request


def new_upload_request(
    uri: str,
    api_key: str,
    api_secret: str,
    *,
    timestamp: str | None = None,
) -> SignedUploadRequest:
    """Create a signed upload request for *uri*.

    *timestamp* defaults to the current Unix time; pass one explicitly
    only to reproduce a known signature.
    """
    ts = timestamp if timestamp is not None else unix_timestamp()
    return SignedUploadRequest(
        uri,
        {
            "api_key": api_key,
            "timestamp": ts,
            "signature": sign_upload(ts, api_secret),
        },
    )
