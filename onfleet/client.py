"""Onfleet API client: configuration, shared limiter wiring and resources."""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Union

import httpx

from .config import (
    DEFAULT_API_VERSION,
    DEFAULT_PATH,
    DEFAULT_TIMEOUT_MS,
    DEFAULT_URL,
    USER_AGENT,
    ApiConfig,
    ClientSettings,
    LimiterOptions,
    get_settings,
)
from .descriptors import CallDescriptor
from .errors import ValidationError
from .limiter import RateLimiter, get_limiter
from .resolver import ResolvedRequest, resolve
from .resources import RESOURCES
from .rest import Dispatcher
from .utils import encode

logger = logging.getLogger(__name__)

AUTH_TEST_PATH = "/auth/test"


class Onfleet:
    """Entry point exposing every resource as an attribute (``client.tasks.get(...)``).

    All instances share the process-wide limiter unless one is injected.
    ``limiter_options`` tune it within the safe range and affect every
    instance using the same limiter.
    """

    def __init__(
        self,
        api_key: Optional[str],
        user_timeout: int = DEFAULT_TIMEOUT_MS,
        limiter_options: Union[LimiterOptions, Mapping[str, Any], None] = None,
        base_url: str = DEFAULT_URL,
        default_path: str = DEFAULT_PATH,
        default_api_version: str = DEFAULT_API_VERSION,
        limiter: Optional[RateLimiter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not api_key:
            raise ValidationError(
                "Onfleet API key not found, please obtain an API key from your organization admin"
            )
        if user_timeout > DEFAULT_TIMEOUT_MS:
            raise ValidationError(f"User-defined timeout has to be shorter than {DEFAULT_TIMEOUT_MS}ms")

        self.api_key = api_key
        self.api = ApiConfig(
            base_url=f"{base_url}{default_path}{default_api_version}",
            timeout_ms=user_timeout,
            headers={
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
                "Authorization": f"Basic {encode(api_key)}",
            },
        )
        self._custom_headers: Dict[str, str] = {}
        self.limiter = limiter or get_limiter()
        if limiter_options:
            settings = self.limiter.configure(limiter_options)
            logger.info(
                f"limiter settings: max_concurrent={settings.max_concurrent} min_time_ms={settings.min_time_ms}"
            )
        self._dispatcher = Dispatcher(limiter=self.limiter, transport=transport)

        for name, resource in RESOURCES.items():
            setattr(self, name, resource(self))

    @classmethod
    def from_env(cls, settings: Optional[ClientSettings] = None, **kwargs: Any) -> "Onfleet":
        settings = settings or get_settings()
        return cls(
            settings.api_key,
            user_timeout=settings.timeout_ms,
            base_url=settings.base_url,
            default_path=settings.default_path,
            default_api_version=settings.api_version,
            **kwargs,
        )

    @property
    def custom_headers(self) -> Dict[str, str]:
        return self._custom_headers

    @custom_headers.setter
    def custom_headers(self, headers: Mapping[str, str]) -> None:
        self._custom_headers = dict(headers)
        self.api.headers = {**self.api.headers, **headers}

    def resolve(self, descriptor: CallDescriptor, *args: Any) -> ResolvedRequest:
        return resolve(descriptor, args, self.api)

    async def request(self, descriptor: CallDescriptor, *args: Any) -> Any:
        return await self._dispatcher.dispatch(self.resolve(descriptor, *args))

    async def verify_key(self) -> bool:
        """True when the API key is accepted by ``/auth/test``."""

        request = ResolvedRequest(
            url=f"{self.api.base_url}{AUTH_TEST_PATH}",
            method="GET",
            headers=dict(self.api.headers),
            timeout_ms=self.api.timeout_ms,
        )
        result = await self._dispatcher.dispatch_result(request)
        return result.ok

    async def aclose(self) -> None:
        await self._dispatcher.aclose()

    async def __aenter__(self) -> "Onfleet":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
