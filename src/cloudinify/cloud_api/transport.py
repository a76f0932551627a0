"""Synchronous HTTP transport for the Cloudinary upload API.

Each call goes through one fixed lifecycle:

1. Send the built multipart POST and block for the response.
2. On any httpx transport failure (timeout, refused or dropped
   connection, proxy or protocol error) -- raise
   :class:`CloudinifyNetworkError`.
3. On any status other than ``200`` -- raise
   :class:`CloudinifyRemoteAPIError` with the status line, the
   ``X-Cld-Error`` header and the ``error.message`` body field.
4. On ``200`` -- return the decoded JSON object, or raise
   :class:`CloudinifyDecodingError` if the body is not one.

Nothing is retried; every failure surfaces to the caller immediately.
"""

from __future__ import annotations

import json as _json
import sys
import time
from typing import Any

import httpx

from cloudinify.config import CloudinifyConfig
from cloudinify.errors import (
    CloudinifyDecodingError,
    CloudinifyNetworkError,
    CloudinifyRemoteAPIError,
)
from cloudinify.models import UploadResult
from cloudinify.observability import get_logger, resolve_metrics

from .request import SignedUploadRequest

log = get_logger("cloudinify.transport")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status_line(response: httpx.Response) -> str:
    """``"400 Bad Request"``-style status line."""
    phrase = response.reason_phrase
    return f"{response.status_code} {phrase}" if phrase else str(response.status_code)


def _api_error_message(response: httpx.Response) -> str | None:
    """Extract ``error.message`` from an error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    error = body.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    return None


def _raise_for_status(response: httpx.Response) -> None:
    """Raise :class:`CloudinifyRemoteAPIError` unless the status is 200."""
    if response.status_code == 200:
        return

    status_line = _status_line(response)
    cld_error = response.headers.get("x-cld-error")
    api_message = _api_error_message(response)

    message = f"Request error: {status_line}"
    if cld_error:
        message += f" Cld Err: {cld_error}"
    if api_message and api_message != cld_error:
        message += f" ({api_message})"

    raise CloudinifyRemoteAPIError(
        message=message,
        context={
            "status_code": response.status_code,
            "status_line": status_line,
            "cld_error": cld_error,
            "api_message": api_message,
            "url": str(response.request.url),
        },
    )


def _decode_body(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError as exc:
        raise CloudinifyDecodingError(
            f"Response body is not valid JSON: {exc}",
            context={"reason": "invalid_json"},
            cause=exc,
        ) from exc
    if not isinstance(body, dict):
        raise CloudinifyDecodingError(
            f"Expected a JSON object, got {type(body).__name__}",
            context={"reason": "not_an_object"},
        )
    return body


def _dump_payload(
    url: str,
    fields: dict[str, Any],
    response_status: int | None,
    response_body: Any | None,
    secret: str | None = None,
) -> None:
    """Write a redacted debug dump of the request/response to stderr."""
    from cloudinify.utils.redact import redact

    dump: dict[str, Any] = {"method": "POST", "url": url, "request_fields": fields}
    if response_status is not None:
        dump["response_status"] = response_status
    if response_body is not None:
        dump["response_body"] = response_body
    print(
        _json.dumps(redact(dump, secret), indent=2, default=str),
        file=sys.stderr,
    )


def parse_upload_response(body: dict[str, Any]) -> UploadResult:
    """Map a decoded upload response onto :class:`UploadResult`.

    ``secure_url`` is required and must re-parse as an absolute
    ``http(s)`` URL; the remaining fields fall back to empty defaults.

    Raises
    ------
    CloudinifyDecodingError
        If ``secure_url`` is missing or malformed, or a numeric field is
        not numeric.
    """
    secure_url = body.get("secure_url")
    if not isinstance(secure_url, str) or not secure_url:
        raise CloudinifyDecodingError(
            "Upload response is missing 'secure_url'",
            context={"field": "secure_url", "reason": "missing"},
        )
    try:
        url = httpx.URL(secure_url)
    except httpx.InvalidURL as exc:
        raise CloudinifyDecodingError(
            f"Upload response 'secure_url' is not a valid URL: {exc}",
            context={"field": "secure_url", "reason": "invalid_url"},
            cause=exc,
        ) from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise CloudinifyDecodingError(
            f"Upload response 'secure_url' is not an absolute URL: {secure_url!r}",
            context={"field": "secure_url", "reason": "not_absolute"},
        )

    try:
        version = int(body.get("version") or 0)
        size_bytes = int(body.get("bytes") or 0)
    except (TypeError, ValueError) as exc:
        raise CloudinifyDecodingError(
            f"Upload response has a non-numeric field: {exc}",
            context={"field": "version/bytes", "reason": "not_numeric"},
            cause=exc,
        ) from exc

    return UploadResult(
        secure_url=secure_url,
        public_id=str(body.get("public_id") or ""),
        version=version,
        format=str(body.get("format") or ""),
        resource_type=str(body.get("resource_type") or ""),
        size_bytes=size_bytes,
    )


# ---------------------------------------------------------------------------
# Sync transport
# ---------------------------------------------------------------------------

class CloudinaryTransport:
    """Synchronous HTTP transport for signed Cloudinary uploads.

    Parameters
    ----------
    config:
        A :class:`CloudinifyConfig` controlling timeout, proxy, metrics and
        debug output.
    client:
        Optional shared :class:`httpx.Client`.  When omitted the transport
        creates (and later closes) its own.  An injected client is never
        closed by the transport.
    """

    def __init__(
        self,
        config: CloudinifyConfig,
        client: httpx.Client | None = None,
    ) -> None:
        self._config = config
        self._metrics = resolve_metrics(config.metrics)
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(
            timeout=httpx.Timeout(config.timeout_seconds),
            proxy=config.http_proxy,
        )

    # -- public API --------------------------------------------------------

    def send(self, signed: SignedUploadRequest) -> dict[str, Any]:
        """POST *signed* and return the decoded JSON response object.

        Raises
        ------
        CloudinifyEncodingError
            If the request body cannot be encoded.
        CloudinifyNetworkError
            On timeouts, connection failures, dropped connections and proxy errors.
        CloudinifyRemoteAPIError
            On any non-200 response.
        CloudinifyDecodingError
            If a 200 response body is not a JSON object.
        """
        request = signed.build()
        url = str(request.url)
        tags = {"method": "POST", "mode": signed.mode or "none"}

        t0 = time.monotonic()
        try:
            response = self._client.send(request)
        except httpx.TransportError as exc:
            self._metrics.increment(
                "cloudinify.requests_total",
                tags={**tags, "status": "error"},
            )
            log.warning(
                "Upload network error",
                extra={
                    "extra_fields": {
                        "op": "upload",
                        "cloud_name": self._config.cloud_name,
                        "mode": signed.mode,
                        "error": str(exc),
                    }
                },
            )
            raise CloudinifyNetworkError(
                message=f"Network error on POST {url}: {exc}",
                context={"url": url},
                cause=exc,
            ) from exc
        elapsed_ms = (time.monotonic() - t0) * 1000

        status_tags = {**tags, "status": str(response.status_code)}
        self._metrics.increment("cloudinify.requests_total", tags=status_tags)
        self._metrics.timing("cloudinify.request_duration_ms", elapsed_ms, tags=status_tags)

        if self._config.debug_dump_payload:
            try:
                resp_body: Any = response.json()
            except ValueError:
                resp_body = response.text[:1000]
            _dump_payload(
                url, signed.describe(), response.status_code, resp_body,
                secret=self._config.api_secret,
            )

        if response.status_code != 200:
            log.warning(
                "Upload rejected by Cloudinary",
                extra={
                    "extra_fields": {
                        "op": "upload",
                        "cloud_name": self._config.cloud_name,
                        "status_code": response.status_code,
                        "cld_error": response.headers.get("x-cld-error"),
                    }
                },
            )
        _raise_for_status(response)

        body = _decode_body(response)
        log.debug(
            "Upload complete",
            extra={
                "extra_fields": {
                    "op": "upload",
                    "cloud_name": self._config.cloud_name,
                    "mode": signed.mode,
                    "status_code": response.status_code,
                    "elapsed_ms": round(elapsed_ms, 1),
                }
            },
        )
        return body

    def close(self) -> None:
        """Close the underlying HTTP client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> CloudinaryTransport:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
