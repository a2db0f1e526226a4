"""Error taxonomy shared by the builder, the normalizer and the dispatcher."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    ATTACHMENT = "attachment"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    NETWORK = "network"


class UsesendError(RuntimeError):
    """Base class for every failure reported by the transport.

    ``str(error)`` is the message followed by the hint, so a caller that only
    prints the error still sees what to do about it.
    """

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} {self.hint}"
        return self.message


class ValidationError(UsesendError):
    """A send request that cannot be turned into a valid payload."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.field = field
        self.value = value


class AttachmentError(UsesendError):
    """An attachment whose content could not be resolved to bytes."""

    kind = ErrorKind.ATTACHMENT

    def __init__(self, message: str, *, filename: str | None = None, hint: str | None = None) -> None:
        super().__init__(message, hint=hint)
        self.filename = filename or "unnamed"


class MissingAttachmentContentError(AttachmentError, ValidationError):
    """An attachment that names no content source at all."""

    kind = ErrorKind.VALIDATION

    def __init__(self, filename: str | None = None) -> None:
        name = filename or "unnamed"
        AttachmentError.__init__(
            self,
            f'Attachment "{name}" has no content source (missing content or path).',
            filename=name,
            hint="Provide one of: content, path or raw.",
        )
        self.field = "attachments"
        self.value = name


class ApiError(UsesendError):
    """Non-2xx answer from the email API."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: Any = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.status_code = status_code
        self.response_body = response_body


class AuthenticationError(ApiError):
    kind = ErrorKind.AUTHENTICATION


class AuthorizationError(ApiError):
    kind = ErrorKind.AUTHORIZATION


class RateLimitError(ApiError):
    kind = ErrorKind.RATE_LIMIT


class ServerError(ApiError):
    kind = ErrorKind.SERVER


class NetworkError(UsesendError):
    """The request never produced an HTTP response."""

    kind = ErrorKind.NETWORK
