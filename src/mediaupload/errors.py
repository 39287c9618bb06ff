"""Exception hierarchy for the mediaupload transport and saver layers.

Every error class inherits from :class:`MediaUploadError`.  Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

These exceptions never cross :meth:`MediaUploader.upload`; the
orchestrator converts them into :class:`~mediaupload.models.UploadError`
values delivered through the ``on_error`` callback.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable codes for every exception the package can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTH_ERROR = "AUTH_ERROR"
    PERMISSION_ERROR = "PERMISSION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    RESPONSE_ERROR = "RESPONSE_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class MediaUploadError(Exception):
    """Base exception for all mediaupload errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
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


class _CodedError(MediaUploadError):
    """Subclass helper binding a fixed :class:`ErrorCode`."""

    default_code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=self.default_code,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# HTTP status errors
# ---------------------------------------------------------------------------

class MediaValidationError(_CodedError):
    """The media endpoint returned 400 (or another unmapped 4xx).

    Context keys: ``status_code``, ``server_code``, ``body``.
    """

    default_code = ErrorCode.VALIDATION_ERROR


class MediaAuthError(_CodedError):
    """The media endpoint returned 401; the credentials were rejected.

    Context keys: ``status_code``, ``server_code``.
    """

    default_code = ErrorCode.AUTH_ERROR


class MediaPermissionError(_CodedError):
    """The media endpoint returned 403; the user may not upload files.

    Context keys: ``status_code``, ``server_code``, ``operation``.
    """

    default_code = ErrorCode.PERMISSION_ERROR


class MediaNotFoundError(_CodedError):
    """The media endpoint returned 404; the route does not exist.

    Context keys: ``status_code``, ``server_code``, ``path``.
    """

    default_code = ErrorCode.NOT_FOUND


class MediaTooLargeError(_CodedError):
    """The server refused the body with 413 Payload Too Large."""

    default_code = ErrorCode.PAYLOAD_TOO_LARGE


class MediaRateLimitError(_CodedError):
    """The media endpoint returned 429.

    Context keys: ``status_code``, ``retry_after_seconds``.
    """

    default_code = ErrorCode.RATE_LIMITED


class MediaServerError(_CodedError):
    """The media endpoint returned a 5xx status.

    Context keys: ``status_code``, ``server_code``.
    """

    default_code = ErrorCode.SERVER_ERROR


# ---------------------------------------------------------------------------
# Transport / payload errors
# ---------------------------------------------------------------------------

class MediaNetworkError(_CodedError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``.
    """

    default_code = ErrorCode.NETWORK_ERROR


class MediaResponseError(_CodedError):
    """The server answered 2xx but the body is not a usable media object.

    Context keys: ``missing`` (list of absent keys) or ``body``.
    """

    default_code = ErrorCode.RESPONSE_ERROR
