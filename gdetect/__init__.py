from .client import Client
from .errors import (
    AuthError,
    CancelledError,
    DecodeError,
    FileError,
    GDetectError,
    MissingFieldError,
    NotFoundError,
    RequestError,
    ServerError,
    SubmissionError,
    TimeoutError,
    TransportError,
    ValidationError,
)
from .lifecycle import SubmissionState
from .models import Result, SubmitOptions, WaitForOptions

__version__ = "0.1.0"

__all__ = [
    "Client",
    "Result",
    "SubmitOptions",
    "WaitForOptions",
    "SubmissionState",
    "GDetectError",
    "ValidationError",
    "FileError",
    "RequestError",
    "TransportError",
    "AuthError",
    "NotFoundError",
    "ServerError",
    "DecodeError",
    "SubmissionError",
    "TimeoutError",
    "CancelledError",
    "MissingFieldError",
]
