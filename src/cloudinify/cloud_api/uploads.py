"""Upload API wrapper for Cloudinary.

:class:`UploadAPI` joins the request builder and the transport: it signs a
fresh request per call, attaches the payload, sends it, and maps the
response onto :class:`~cloudinify.models.UploadResult`.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx

from cloudinify.config import CloudinifyConfig
from cloudinify.errors import CloudinifyError
from cloudinify.models import UploadResult
from cloudinify.observability import resolve_metrics

from .request import FileSource, SignedUploadRequest, new_upload_request
from .transport import CloudinaryTransport, parse_upload_response


class UploadAPI:
    """Synchronous wrapper for the Cloudinary image upload endpoint.

    Parameters
    ----------
    transport:
        A configured :class:`CloudinaryTransport`.
    config:
        Credentials used to sign each request.
    """

    def __init__(self, transport: CloudinaryTransport, config: CloudinifyConfig) -> None:
        self._transport = transport
        self._config = config
        self._metrics = resolve_metrics(config.metrics)

    def _new_request(self, uri: str | None) -> SignedUploadRequest:
        return new_upload_request(
            uri or self._config.default_upload_uri,
            self._config.api_key,
            self._config.api_secret,
        )

    def _execute(
        self,
        mode: str,
        attach: Callable[[SignedUploadRequest], None],
        uri: str | None,
    ) -> UploadResult:
        # Payload read errors are counted as failed uploads too.
        tags = {"mode": mode}
        try:
            signed = self._new_request(uri)
            attach(signed)
            result = parse_upload_response(self._transport.send(signed))
        except CloudinifyError as exc:
            self._metrics.increment(
                "cloudinify.upload_failure_total",
                tags={**tags, "code": str(getattr(exc.code, "value", exc.code))},
            )
            raise
        self._metrics.increment("cloudinify.upload_success_total", tags=tags)
        return result

    def upload_file(
        self,
        data: FileSource,
        filename: str = "file",
        *,
        uri: str | None = None,
    ) -> UploadResult:
        """Upload image bytes read from *data*.

        Parameters
        ----------
        data:
            Raw bytes or a binary stream; it is read to the end.
        filename:
            File name sent with the multipart part.
        uri:
            Upload endpoint; defaults to the cloud's image upload URI.

        Returns
        -------
        UploadResult
        """
        return self._execute("file", lambda signed: signed.add_file(data, filename), uri)

    def upload_url(
        self,
        source_url: httpx.URL | str,
        *,
        uri: str | None = None,
    ) -> UploadResult:
        """Ask Cloudinary to fetch and store the image at *source_url*.

        Returns
        -------
        UploadResult
        """
        return self._execute("url", lambda signed: signed.add_url(source_url), uri)
