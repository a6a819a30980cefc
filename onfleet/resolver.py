"""Turn a call descriptor plus positional arguments into a concrete request.

Arguments carry no names, so each one is interpreted by its shape. The rules
below run in a fixed order and emit *intents*; the intents are then folded
into the final url, body and headers. Decision table:

==== ========================================== =====================================
step condition                                  intents
==== ========================================== =====================================
1    no args, GET, alt path                     AlternatePath
2    args, GET/DELETE/PUT, args[1] lookup tag   ByAlternateKey(args[1], args[0])
2    ... else args[0] is an object id           ById(args[0])
2    ... else                                   AlternatePath
2    ... and PUT                                WithBody(args[1])
3    PUT/DELETE on a customFields url           WithBody(args[0])
4    POST, args[0] is an object id              ById(args[0]) [+ WithBody(args[1])]
4    POST otherwise                             WithBody(args[0])
5    query_params flag, per flat mapping arg    WithQuery(arg)
6    manifest flag, per manifest-shaped arg     ManifestRequest(...)
==== ========================================== =====================================

Later ``WithBody`` intents replace earlier ones; query and header effects add up.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from .config import ApiConfig
from .descriptors import CallDescriptor
from .utils import (
    LOOKUP_TAGS,
    append_query_parameters,
    is_base64_encoded,
    is_query_param,
    replace_with_endpoint_and_param,
    replace_with_id,
)

MANIFEST_GENERATE_PATH = "providers/manifest/generate"
PROVIDER_KEY_HEADER = "X-API-Key"


@dataclass(frozen=True)
class AlternatePath:
    pass


@dataclass(frozen=True)
class ById:
    identifier: str


@dataclass(frozen=True)
class ByAlternateKey:
    tag: str
    value: Any


@dataclass(frozen=True)
class WithBody:
    body: Any


@dataclass(frozen=True)
class WithQuery:
    params: Mapping[str, Any]


@dataclass(frozen=True)
class ManifestRequest:
    hub_id: Optional[str] = None
    worker_id: Optional[str] = None
    provider_key: Optional[str] = None
    start_date: Optional[Any] = None
    end_date: Optional[Any] = None


CallIntent = Union[AlternatePath, ById, ByAlternateKey, WithBody, WithQuery, ManifestRequest]


@dataclass
class ResolvedRequest:
    url: str
    method: str
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    has_body: bool = False
    timeout_ms: Optional[int] = None


class _Draft:
    """Mutable request state while intents are folded in."""

    def __init__(self, descriptor: CallDescriptor, api: ApiConfig) -> None:
        self.descriptor = descriptor
        self.base_url = api.base_url
        self.url = f"{api.base_url}{descriptor.path}"
        self.headers = dict(api.headers)
        self.body: Any = None
        self.has_body = False

    def apply(self, intent: CallIntent) -> None:
        if isinstance(intent, AlternatePath):
            # descriptors without an alternate path keep the primary one
            self.url = f"{self.base_url}{self.descriptor.alt_path or self.descriptor.path}"
        elif isinstance(intent, ById):
            self.url = replace_with_id(self.url, intent.identifier)
        elif isinstance(intent, ByAlternateKey):
            self.url = replace_with_endpoint_and_param(self.url, intent.tag, intent.value)
        elif isinstance(intent, WithBody):
            self.body = intent.body
            self.has_body = True
        elif isinstance(intent, WithQuery):
            self.url = append_query_parameters(self.url, intent.params)
        elif isinstance(intent, ManifestRequest):
            self._apply_manifest(intent)

    def _apply_manifest(self, intent: ManifestRequest) -> None:
        if intent.hub_id and intent.worker_id:
            self.body = {
                "path": f"{MANIFEST_GENERATE_PATH}?hubId={intent.hub_id}&workerId={intent.worker_id}",
                "method": "GET",
            }
            self.has_body = True
        if intent.provider_key:
            self.headers[PROVIDER_KEY_HEADER] = f"Google {intent.provider_key}"
        dates = {}
        if intent.start_date:
            dates["startDate"] = intent.start_date
        if intent.end_date:
            dates["endDate"] = intent.end_date
        if dates:
            self.url = append_query_parameters(self.url, dates)


def _arg(args: Sequence[Any], index: int) -> Any:
    return args[index] if len(args) > index else None


def _lookup_rule(descriptor: CallDescriptor, args: Sequence[Any], draft: _Draft) -> List[CallIntent]:
    method = descriptor.method
    if not args:
        if method == "GET" and descriptor.alt_path:
            return [AlternatePath()]
        return []
    if method not in ("GET", "DELETE", "PUT"):
        return []
    intents: List[CallIntent]
    tag = _arg(args, 1)
    if isinstance(tag, str) and tag in LOOKUP_TAGS:
        intents = [ByAlternateKey(tag=tag, value=args[0])]
    elif is_base64_encoded(args[0]):
        intents = [ById(args[0])]
    else:
        intents = [AlternatePath()]
    if method == "PUT":
        intents.append(WithBody(_arg(args, 1)))
    return intents


def _custom_fields_rule(descriptor: CallDescriptor, args: Sequence[Any], draft: _Draft) -> List[CallIntent]:
    if descriptor.method in ("PUT", "DELETE") and "customFields" in draft.url:
        return [WithBody(_arg(args, 0))]
    return []


def _create_rule(descriptor: CallDescriptor, args: Sequence[Any], draft: _Draft) -> List[CallIntent]:
    if descriptor.method != "POST":
        return []
    first = _arg(args, 0)
    if is_base64_encoded(first):
        intents: List[CallIntent] = [ById(first)]
        if _arg(args, 1):
            intents.append(WithBody(args[1]))
        return intents
    return [WithBody(first)]


def _query_rule(descriptor: CallDescriptor, args: Sequence[Any], draft: _Draft) -> List[CallIntent]:
    if not descriptor.query_params:
        return []
    return [WithQuery(arg) for arg in args if is_query_param(arg)]


def _manifest_rule(descriptor: CallDescriptor, args: Sequence[Any], draft: _Draft) -> List[CallIntent]:
    if not descriptor.delivery_manifest_object:
        return []
    intents: List[CallIntent] = []
    for arg in args:
        if not isinstance(arg, Mapping):
            continue
        intent = ManifestRequest(
            hub_id=arg.get("hubId"),
            worker_id=arg.get("workerId"),
            provider_key=arg.get("googleApiKey"),
            start_date=arg.get("startDate"),
            end_date=arg.get("endDate"),
        )
        if intent != ManifestRequest():
            intents.append(intent)
    return intents


RULES = (_lookup_rule, _custom_fields_rule, _create_rule, _query_rule, _manifest_rule)


def _fold(descriptor: CallDescriptor, args: Sequence[Any], api: ApiConfig) -> Tuple[_Draft, List[CallIntent]]:
    draft = _Draft(descriptor, api)
    applied: List[CallIntent] = []
    for rule in RULES:
        for intent in rule(descriptor, args, draft):
            draft.apply(intent)
            applied.append(intent)
    return draft, applied


def resolve(descriptor: CallDescriptor, args: Sequence[Any], api: ApiConfig) -> ResolvedRequest:
    draft, _ = _fold(descriptor, args, api)
    return ResolvedRequest(
        url=draft.url,
        method=descriptor.method,
        headers=draft.headers,
        body=draft.body,
        has_body=draft.has_body,
        timeout_ms=descriptor.timeout_ms or api.timeout_ms,
    )


def explain(descriptor: CallDescriptor, args: Sequence[Any], api: ApiConfig) -> List[CallIntent]:
    """Intents ``resolve`` would apply, in order; handy when debugging an argument mix-up."""

    return _fold(descriptor, args, api)[1]
