"""Exception hierarchy for the gdetect client."""

from __future__ import annotations

import asyncio
import builtins
from typing import Optional

# Caller cancellation is plain asyncio task cancellation; re-exported so callers
# can discriminate it without importing asyncio.
CancelledError = asyncio.CancelledError


class GDetectError(Exception):
    """Base exception for all gdetect client errors."""


class ValidationError(GDetectError, ValueError):
    """Raised when the client is built with a malformed endpoint or token."""


class FileError(GDetectError, OSError):
    """Raised when the file to submit cannot be opened or read."""


class RequestError(GDetectError):
    """Raised on transport failure or a non-2xx answer from the endpoint."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        reason: Optional[str] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.body = body


class TransportError(RequestError):
    """The request never got an HTTP answer (connection reset, DNS, TLS...)."""


class AuthError(RequestError):
    """HTTP 401 or 403."""


class NotFoundError(RequestError):
    """HTTP 404."""


class ServerError(RequestError):
    """HTTP 5xx."""


class DecodeError(GDetectError):
    """Raised when a response body is not the JSON document we expect."""

    def __init__(self, message: str, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.body = body


class SubmissionError(GDetectError):
    """Raised when the service answers a submission with ``status: false``."""

    def __init__(self, message: str, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.body = body


class TimeoutError(GDetectError, builtins.TimeoutError):
    """Raised when a deadline expires before the operation completed."""


class MissingFieldError(GDetectError):
    """Raised when a view URL is requested from a result lacking its token."""


def error_for_status(status_code: int) -> type[RequestError]:
    if status_code == 404:
        return NotFoundError
    if status_code in (401, 403):
        return AuthError
    if 500 <= status_code < 600:
        return ServerError
    return RequestError
