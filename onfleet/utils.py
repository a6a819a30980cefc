"""String helpers for paths, query strings and credentials."""
from __future__ import annotations

import base64
import re
from typing import Any, Mapping

import httpx

LOOKUP_TAGS = ("name", "shortId", "phone", "workers", "organizations", "teams")

_ID_PATTERN = re.compile(r"^[A-Za-z0-9*~]{24}$")
_ID_PLACEHOLDER = re.compile(r"/:[A-Za-z]*Id\b")
_PARAM_PLACEHOLDER = ":param"
_SCALARS = (str, int, float, bool)


def encode(api_key: str) -> str:
    """Basic-auth token for an API key with an empty password."""

    return base64.b64encode(f"{api_key}:".encode("utf-8")).decode("ascii")


def is_base64_encoded(value: Any) -> bool:
    """True when ``value`` has the shape of an Onfleet object id."""

    return isinstance(value, str) and _ID_PATTERN.match(value) is not None


def is_query_param(value: Any) -> bool:
    """True for a flat mapping of scalar values."""

    if not isinstance(value, Mapping) or not value:
        return False
    return all(isinstance(key, str) and isinstance(item, _SCALARS) for key, item in value.items())


def replace_with_id(url: str, identifier: str) -> str:
    return _ID_PLACEHOLDER.sub(lambda _: f"/{identifier}", url, count=1)


def replace_with_endpoint_and_param(url: str, endpoint: str, value: Any) -> str:
    """Address a resource by lookup key, e.g. ``/tasks/:taskId`` -> ``/tasks/shortId/44a56188``."""

    if _PARAM_PLACEHOLDER in url:
        url = url.replace(_PARAM_PLACEHOLDER, endpoint, 1)
        return _ID_PLACEHOLDER.sub(lambda _: f"/{value}", url, count=1)
    return _ID_PLACEHOLDER.sub(lambda _: f"/{endpoint}/{value}", url, count=1)


def append_query_parameters(url: str, params: Mapping[str, Any]) -> str:
    merged = httpx.URL(url)
    for key, value in params.items():
        merged = merged.copy_add_param(key, value)
    return str(merged)
