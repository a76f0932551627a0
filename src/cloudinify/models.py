"""Public data models for the cloudinify SDK.

Plain frozen dataclasses with no behaviour beyond small derived
properties.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx


# ---------------------------------------------------------------------------
# Upload results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UploadResult:
    """The parts of an upload response that callers may need.

    Attributes
    ----------
    secure_url:
        HTTPS delivery URL of the stored asset.
    public_id:
        Cloudinary public ID (without extension).
    version:
        Asset version number, as used in the ``v<version>`` path segment.
    format:
        File format / extension reported by Cloudinary (``"png"``, ...).
    resource_type:
        ``"image"`` or ``"raw"``.
    size_bytes:
        Stored size in bytes (the ``bytes`` response field).
    """

    secure_url: str
    public_id: str = ""
    version: int = 0
    format: str = ""
    resource_type: str = ""
    size_bytes: int = 0

    @property
    def url(self) -> httpx.URL:
        """The delivery URL as a parsed :class:`httpx.URL`."""
        return httpx.URL(self.secure_url)


# ---------------------------------------------------------------------------
# Delivery URLs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeliveryPath:
    """Structured form of a delivery URL path.

    ``/<cloud_name>/<resource_type>/<delivery_type>/[<transformations>/...][<version>/]<public_id>``

    ``public_id`` keeps its folders and file extension exactly as they
    appeared in the path (``"folder/sample.png"``).
    """

    cloud_name: str
    resource_type: str
    delivery_type: str
    public_id: str
    transformations: tuple[str, ...] = ()
    version: str | None = None

    @property
    def prefix(self) -> str:
        return f"/{self.cloud_name}/{self.resource_type}/{self.delivery_type}"

    def with_transformation(self, transformation: str) -> DeliveryPath:
        """Return a copy with *transformation* placed before existing ones."""
        return DeliveryPath(
            cloud_name=self.cloud_name,
            resource_type=self.resource_type,
            delivery_type=self.delivery_type,
            public_id=self.public_id,
            transformations=(transformation, *self.transformations),
            version=self.version,
        )

    def to_path(self) -> str:
        segments = [self.prefix, *self.transformations]
        if self.version is not None:
            segments.append(self.version)
        segments.append(self.public_id)
        return "/".join(segments)
