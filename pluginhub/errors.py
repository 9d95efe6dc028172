"""Errors raised by request handlers, each mapped to an HTTP response."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus

PLAIN_TEXT = "text/plain; charset=utf-8"


@dataclass(frozen=True)
class ErrorResponse:
    """A plain-text HTTP response describing an error."""

    status: HTTPStatus
    content_type: str
    body: str


class RouterError(Exception):
    """Base class of errors that turn into an HTTP error response."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message

    def response(self) -> ErrorResponse:
        """Build the plain-text response for this error."""
        return ErrorResponse(self.status_code, PLAIN_TEXT, str(self))


class AuthError(RouterError):
    """The request is not authorised (401)."""

    status_code = HTTPStatus.UNAUTHORIZED


class NotFoundError(RouterError):
    """The requested resource does not exist (404)."""

    status_code = HTTPStatus.NOT_FOUND


class ExpiredError(RouterError):
    """A token or verification code has expired (410)."""

    status_code = HTTPStatus.GONE


class UsedError(RouterError):
    """A verification has already been used or sent (410)."""

    status_code = HTTPStatus.GONE


class InternalError(RouterError):
    """An unexpected server-side failure (500)."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self) -> None:
        super().__init__("InternalError")