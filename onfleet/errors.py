"""Error kinds raised by the Onfleet client."""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    RATE_LIMIT = "RateLimitError"
    PERMISSION = "PermissionError"
    SERVICE = "ServiceError"
    HTTP = "HttpError"
    GENERIC = "GenericError"
    VALIDATION = "ValidationError"


class OnfleetError(Exception):
    """Base error carrying the fields of an Onfleet error payload."""

    kind: ErrorKind = ErrorKind.GENERIC
    retryable: bool = False

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        cause: Any = None,
        request: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.cause = cause
        self.request = request

    def __str__(self) -> str:
        if self.code is None:
            return f"{self.kind.value}: {self.message}"
        return f"{self.kind.value} {self.code}: {self.message}"


class RateLimitError(OnfleetError):
    """Remote rate limit exceeded (error code 2300)."""

    kind = ErrorKind.RATE_LIMIT
    retryable = True


class PermissionDeniedError(OnfleetError):
    """Authentication or authorization failure (error codes 1100-1108)."""

    kind = ErrorKind.PERMISSION


class ServiceError(OnfleetError):
    kind = ErrorKind.SERVICE


class HttpError(OnfleetError):
    kind = ErrorKind.HTTP


class GenericError(OnfleetError):
    """Dispatch itself failed; the underlying cause is only logged."""

    kind = ErrorKind.GENERIC

    def __init__(self, message: str = "An error occurred", retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class ValidationError(OnfleetError):
    """Invalid client construction arguments."""

    kind = ErrorKind.VALIDATION
