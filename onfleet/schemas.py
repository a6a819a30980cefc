"""Pydantic schemas for Onfleet error payloads."""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    error: int
    message: str
    cause: Optional[Any] = None
    request: Optional[Any] = None


class ErrorPayload(BaseModel):
    code: Optional[str] = None
    message: ErrorDetail
