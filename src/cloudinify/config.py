"""SDK configuration for cloudinify.

:class:`CloudinifyConfig` is a frozen dataclass that captures the
credentials of one Cloudinary cloud together with every tuneable knob
exposed by the SDK.  Instances are normally produced by
:func:`cloudinify.connection.parse_connection_string` and handed to
:class:`cloudinify.client.CloudinifyClient`.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

from cloudinify.errors import CloudinifyConfigurationError

DEFAULT_UPLOAD_BASE_URL = "https://api.cloudinary.com/v1_1"
"""Root of the Cloudinary upload API; the cloud name is appended to it."""


@dataclass(frozen=True)
class CloudinifyConfig:
    """Complete configuration for a cloudinify client.

    Parameters
    ----------
    cloud_name:
        Cloudinary cloud name (the host part of the connection string).
    api_key:
        Cloudinary API key.
    api_secret:
        Cloudinary API secret.  **Never logged**, masked in ``repr``.
    upload_base_url:
        API root URL.  Override for proxy or testing environments.
    timeout_seconds:
        HTTP request timeout in seconds.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~cloudinify.observability.MetricsHook` backend.
    debug_dump_payload:
        Write a redacted dump of each upload request/response to *stderr*.
    """

    # ── Credentials ─────────────────────────────────────────────────────
    cloud_name: str = ""

    api_key: str = ""

    api_secret: str = ""

    # ── HTTP ────────────────────────────────────────────────────────────
    upload_base_url: str = DEFAULT_UPLOAD_BASE_URL

    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in ("cloud_name", "api_key", "api_secret"):
            if not getattr(self, name):
                raise CloudinifyConfigurationError(
                    f"{name} must not be empty",
                    context={"field": name, "reason": "empty"},
                )

        parsed = urlparse(self.upload_base_url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise CloudinifyConfigurationError(
                f"upload_base_url is not an absolute http(s) URL: {self.upload_base_url!r}",
                context={"field": "upload_base_url", "reason": "not_absolute"},
            )
        if parsed.scheme == "http" and parsed.hostname not in (
            "localhost",
            "127.0.0.1",
            "::1",
        ):
            raise CloudinifyConfigurationError(
                f"upload_base_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                "Use HTTPS to protect your API secret, or target localhost for testing.",
                context={"field": "upload_base_url", "reason": "insecure_scheme"},
            )

        if self.timeout_seconds <= 0:
            raise CloudinifyConfigurationError(
                f"timeout_seconds must be > 0, got {self.timeout_seconds}",
                context={"field": "timeout_seconds", "reason": "non_positive"},
            )

    @property
    def default_upload_uri(self) -> str:
        """Image upload endpoint for this cloud."""
        return f"{self.upload_base_url.rstrip('/')}/{self.cloud_name}/image/upload/"

    def __repr__(self) -> str:
        """Mask the API secret to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "api_secret":
                masked = f"...{val[-4:]}" if len(val) > 8 else "****"
                parts.append(f"api_secret='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"CloudinifyConfig({', '.join(parts)})"
