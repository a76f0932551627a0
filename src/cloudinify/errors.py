"""Full error hierarchy for the cloudinify SDK.

Every public error class inherits from CloudinifyError. Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.

The deletion stub raises the builtin :class:`NotImplementedError`; it is
not part of this hierarchy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the SDK can raise."""

    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    ENCODING_ERROR = "ENCODING_ERROR"
    IO_ERROR = "IO_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    REMOTE_API_ERROR = "REMOTE_API_ERROR"
    DECODING_ERROR = "DECODING_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class CloudinifyError(Exception):
    """Base exception for all cloudinify errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.  Never
        contains the API secret.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


class _CodedError(CloudinifyError):
    """Base for the concrete errors, whose code is fixed per class."""

    default_code: ErrorCode

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(self.default_code, message, context, cause)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class CloudinifyConfigurationError(_CodedError):
    """The connection string or configuration values are unusable.

    Raised for a malformed URI, a scheme other than ``cloudinary://``, a
    missing cloud name, or a missing API secret.

    Context keys: ``field``, ``reason``.
    """

    default_code = ErrorCode.CONFIGURATION_ERROR


# ---------------------------------------------------------------------------
# Request construction errors
# ---------------------------------------------------------------------------

class CloudinifyEncodingError(_CodedError):
    """The multipart upload body could not be assembled.

    Context keys: ``field``, ``reason``.
    """

    default_code = ErrorCode.ENCODING_ERROR


class CloudinifyIOError(_CodedError, OSError):
    """Reading the file payload failed.

    Also an :class:`OSError`, so callers that already guard file reads
    with ``except OSError`` keep working.

    Context keys: ``filename``.
    """

    default_code = ErrorCode.IO_ERROR

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Transport / API errors
# ---------------------------------------------------------------------------

class CloudinifyNetworkError(_CodedError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``.
    """

    default_code = ErrorCode.NETWORK_ERROR


class CloudinifyRemoteAPIError(_CodedError):
    """Cloudinary answered with a non-200 status.

    Context keys: ``status_code``, ``status_line``, ``cld_error``,
    ``api_message``, ``url``.
    """

    default_code = ErrorCode.REMOTE_API_ERROR

    @property
    def status_code(self) -> int | None:
        return self.context.get("status_code")


class CloudinifyDecodingError(_CodedError):
    """A 200 response body was not valid JSON or lacked required fields.

    Context keys: ``field``, ``reason``.
    """

    default_code = ErrorCode.DECODING_ERROR


# ---------------------------------------------------------------------------
# Delivery URL errors
# ---------------------------------------------------------------------------

class CloudinifyValidationError(_CodedError):
    """A delivery URL does not follow the ``/<cloud>/image/upload/...`` grammar.

    Context keys: ``path``, ``reason``.
    """

    default_code = ErrorCode.VALIDATION_ERROR
