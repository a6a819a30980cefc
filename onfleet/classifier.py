"""Map Onfleet error codes to error kinds."""
from __future__ import annotations

from typing import Any, Optional

from .errors import HttpError, OnfleetError, PermissionDeniedError, RateLimitError, ServiceError

RATE_LIMIT_CODE = 2300
PERMISSION_CODES = range(1100, 1109)
AUTO_DISPATCH_PRECONDITION_CODE = 2218
SERVICE_CODE_FLOOR = 2500


def classify(code: int, message: str, cause: Any = None, request: Optional[Any] = None) -> OnfleetError:
    """Build the typed error for a failed response; first matching rule wins."""

    if code == RATE_LIMIT_CODE:
        error_type: type[OnfleetError] = RateLimitError
    elif code in PERMISSION_CODES:
        error_type = PermissionDeniedError
    elif code >= SERVICE_CODE_FLOOR:
        error_type = ServiceError
    elif code == AUTO_DISPATCH_PRECONDITION_CODE:
        error_type = ServiceError
    else:
        error_type = HttpError
    return error_type(message, code, cause, request)
