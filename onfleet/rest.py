"""Async dispatcher: sends resolved requests through the shared limiter."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .classifier import classify
from .errors import GenericError, OnfleetError
from .limiter import RateLimiter, get_limiter
from .resolver import ResolvedRequest
from .schemas import ErrorPayload

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    """Either the decoded success value or the classified error."""

    value: Any = None
    error: Optional[OnfleetError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


class Dispatcher:
    """Thin wrapper around httpx.AsyncClient; every request passes the limiter."""

    def __init__(
        self,
        limiter: Optional[RateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._limiter = limiter or get_limiter()
        self._client = httpx.AsyncClient(transport=transport, follow_redirects=True)

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    async def _send(self, request: ResolvedRequest) -> httpx.Response:
        content = None
        if request.has_body and request.body is not None:
            content = json.dumps(request.body)
        timeout = request.timeout_ms / 1000.0 if request.timeout_ms else None
        return await self._client.request(
            method=request.method,
            url=request.url,
            headers=request.headers,
            content=content,
            timeout=timeout,
        )

    def _interpret(self, request: ResolvedRequest, response: httpx.Response) -> DispatchResult:
        if response.is_success:
            if request.method == "DELETE":
                return DispatchResult(value=response.status_code)
            try:
                return DispatchResult(value=response.json())
            except ValueError:
                # some success responses carry no body
                return DispatchResult(value=response.status_code)

        payload = ErrorPayload.model_validate(response.json())
        detail = payload.message
        error = classify(detail.error, detail.message, detail.cause, detail.request)
        logger.info(f"{request.method} {request.url} failed with {response.status_code}: {error}")
        return DispatchResult(error=error)

    async def dispatch_result(self, request: ResolvedRequest) -> DispatchResult:
        try:
            response = await self._limiter.schedule(self._send, request)
            return self._interpret(request, response)
        except httpx.TimeoutException:
            logger.warning(f"{request.method} {request.url} timed out after {request.timeout_ms}ms")
            return DispatchResult(error=GenericError(retryable=True))
        except httpx.TransportError:
            logger.warning(f"{request.method} {request.url} transport failure", exc_info=True)
            return DispatchResult(error=GenericError(retryable=True))
        except Exception:
            logger.warning(f"{request.method} {request.url} could not be dispatched", exc_info=True)
            return DispatchResult(error=GenericError())

    async def dispatch(self, request: ResolvedRequest) -> Any:
        """Return the success body (or status code); raise the classified error otherwise."""

        result = await self.dispatch_result(request)
        return result.unwrap()

    async def aclose(self) -> None:
        await self._client.aclose()
