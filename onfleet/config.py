"""Runtime configuration for the Onfleet client."""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, Optional

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

VERSION = "1.0.0"
USER_AGENT = f"onfleet-python-{VERSION}"

DEFAULT_URL = "https://onfleet.com"
DEFAULT_PATH = "/api"
DEFAULT_API_VERSION = "/v2"
DEFAULT_TIMEOUT_MS = 70000

LIMITER_DEFAULT_MAX_CONCURRENT = 1
LIMITER_DEFAULT_MIN_TIME_MS = 50
LIMITER_HIGHEST_MAX_CONCURRENT = 20
LIMITER_LOWEST_MIN_TIME_MS = 50


class LimiterOptions(BaseModel):
    """Caller-supplied limiter tuning; values are range-checked by the limiter."""

    max_concurrent: Any = Field(default=None, alias="maxConcurrent")
    min_time: Any = Field(default=None, alias="minTime")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


class ClientSettings(BaseModel):
    api_key: str | None = Field(default=None, alias="ONFLEET_API_KEY")
    base_url: str = Field(default=DEFAULT_URL, alias="ONFLEET_BASE_URL")
    default_path: str = Field(default=DEFAULT_PATH, alias="ONFLEET_PATH")
    api_version: str = Field(default=DEFAULT_API_VERSION, alias="ONFLEET_API_VERSION")
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, alias="ONFLEET_TIMEOUT_MS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }


@dataclass
class ApiConfig:
    """Base URL, header set and default timeout shared by every resource call."""

    base_url: str
    timeout_ms: int
    headers: Dict[str, str] = field(default_factory=dict)


def _load_environment() -> ClientSettings:
    load_dotenv(override=False)
    data: Dict[str, Optional[str]] = {key: os.getenv(key) for key in os.environ.keys() if key.startswith("ONFLEET_")}
    data["LOG_LEVEL"] = os.getenv("LOG_LEVEL", "INFO")
    return ClientSettings(**{key: value for key, value in data.items() if value is not None})


@lru_cache(maxsize=1)
def get_settings() -> ClientSettings:
    """Return cached client settings read from the environment."""

    return _load_environment()
