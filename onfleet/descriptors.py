"""Static description of one Onfleet API operation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CallDescriptor:
    path: str
    method: str = "GET"
    alt_path: Optional[str] = None
    query_params: bool = False
    delivery_manifest_object: bool = False
    timeout_ms: Optional[int] = None
