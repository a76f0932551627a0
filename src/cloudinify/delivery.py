"""Delivery URL parsing and resize rewriting.

Cloudinary delivery URLs follow a fixed segment grammar::

    /<cloud>/<resource_type>/<delivery_type>/[<transformation>/...][v<version>/]<public_id>

:func:`parse_delivery_path` walks the segments through that grammar one
state at a time and returns a :class:`~cloudinify.models.DeliveryPath`;
anything that does not fit raises :class:`CloudinifyValidationError`
instead of indexing past the end of the path.

:func:`get_resized_image_url` is a pure function on top of the parser: it
inserts a ``w_<width>,h_<height>,c_fit`` segment right after the
``/<cloud>/image/upload`` prefix and leaves everything else untouched.
"""

from __future__ import annotations

import re
from enum import Enum

import httpx

from cloudinify.errors import CloudinifyValidationError
from cloudinify.models import DeliveryPath

RESIZE_FORMAT_MESSAGE = "url must be of format https://res.cloudinary.com/<cloudName>/image/upload/..."

# Transformation parameter keys accepted by the delivery API.
_TRANSFORMATION_KEYS: frozenset[str] = frozenset({
    "a", "ac", "af", "ar", "b", "bo", "br", "c", "co", "cs", "d", "dl",
    "dn", "dpr", "du", "e", "eo", "f", "fl", "fn", "fps", "g", "h", "if",
    "ki", "l", "o", "p", "pg", "q", "r", "so", "sp", "t", "u", "vc", "vs",
    "w", "x", "y", "z",
})

_VERSION_RE = re.compile(r"^v\d+$")


class _State(Enum):
    CLOUD = "cloud"
    RESOURCE_TYPE = "resource_type"
    DELIVERY_TYPE = "delivery_type"
    TRANSFORMATIONS = "transformations"


def _is_transformation(segment: str) -> bool:
    """Return True if every comma-separated component is ``<key>_<value>``."""
    for component in segment.split(","):
        key, sep, value = component.partition("_")
        if not sep or not value:
            return False
        if key not in _TRANSFORMATION_KEYS and not key.startswith("$"):
            return False
    return True


def _invalid(path: str, reason: str) -> CloudinifyValidationError:
    return CloudinifyValidationError(
        RESIZE_FORMAT_MESSAGE,
        context={"path": path, "reason": reason},
    )


def parse_delivery_path(path: str) -> DeliveryPath:
    """Parse a delivery URL path into its named parts.

    The final segment always belongs to the public ID.  Segments before it
    are consumed as transformations while they look like one; a ``v<digits>``
    segment ends the transformation run and becomes the version; whatever
    remains is the public ID (folders included).

    Raises
    ------
    CloudinifyValidationError
        If the path is relative, contains empty segments, or is too short
        to hold cloud, resource type, delivery type and public ID.
    """
    if not path.startswith("/"):
        raise _invalid(path, "relative_path")

    segments = path[1:].split("/")
    if any(segment == "" for segment in segments):
        raise _invalid(path, "empty_segment")
    if len(segments) < 4:
        raise _invalid(path, "too_short")

    state = _State.CLOUD
    cloud_name = resource_type = delivery_type = ""
    transformations: list[str] = []
    version: str | None = None
    last = len(segments) - 1
    public_start = last

    for index, segment in enumerate(segments):
        if state is _State.CLOUD:
            cloud_name = segment
            state = _State.RESOURCE_TYPE
        elif state is _State.RESOURCE_TYPE:
            resource_type = segment
            state = _State.DELIVERY_TYPE
        elif state is _State.DELIVERY_TYPE:
            delivery_type = segment
            state = _State.TRANSFORMATIONS
        elif state is _State.TRANSFORMATIONS:
            if index < last and _VERSION_RE.match(segment):
                version = segment
                public_start = index + 1
                break
            if index < last and _is_transformation(segment):
                transformations.append(segment)
                continue
            public_start = index
            break

    return DeliveryPath(
        cloud_name=cloud_name,
        resource_type=resource_type,
        delivery_type=delivery_type,
        public_id="/".join(segments[public_start:]),
        transformations=tuple(transformations),
        version=version,
    )


def resize_transformation(width: int, height: int) -> str:
    """Format the fit-within-box resize segment, e.g. ``w_100,h_200,c_fit``."""
    return f"w_{width},h_{height},c_fit"


def get_resized_image_url(url: httpx.URL | str, width: int, height: int) -> httpx.URL:
    """Return *url* rewritten to deliver a resized variant.

    ``/cloud/image/upload/v123/abc.png`` becomes
    ``/cloud/image/upload/w_100,h_200,c_fit/v123/abc.png`` for a 100x200
    box.  Scheme, host, query and fragment are kept, and the path is
    rewritten in its percent-encoded form.  Width and height are
    not range-checked.

    Raises
    ------
    CloudinifyValidationError
        If the URL cannot be parsed or its path is not an
        ``/<cloud>/image/upload/...`` delivery path.
    """
    try:
        parsed = url if isinstance(url, httpx.URL) else httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise CloudinifyValidationError(
            RESIZE_FORMAT_MESSAGE,
            context={"path": str(url), "reason": "invalid_url"},
            cause=exc,
        ) from exc

    # Work on the still-encoded path so %2F and %3F in a public ID survive.
    raw_path, sep, query = parsed.raw_path.partition(b"?")
    path = raw_path.decode("ascii")

    delivery = parse_delivery_path(path)
    if delivery.resource_type != "image" or delivery.delivery_type != "upload":
        raise _invalid(path, "not_image_upload")

    resized = delivery.with_transformation(resize_transformation(width, height))
    try:
        return parsed.copy_with(raw_path=resized.to_path().encode("ascii") + sep + query)
    except httpx.InvalidURL as exc:
        raise CloudinifyValidationError(
            RESIZE_FORMAT_MESSAGE,
            context={"path": path, "reason": "invalid_url"},
            cause=exc,
        ) from exc
