import asyncio
import json

import httpx
import pytest

from onfleet.client import Onfleet
from onfleet.config import LIMITER_DEFAULT_MAX_CONCURRENT, LIMITER_DEFAULT_MIN_TIME_MS, USER_AGENT, ClientSettings
from onfleet.errors import RateLimitError, ValidationError
from onfleet.limiter import RateLimiter, get_limiter
from onfleet.utils import encode

BASE = "https://onfleet.com/api/v2"
API_KEY = "<your_api_key>"

SHORT_ID_TASK = {
    "id": "SxD9Ran6pOfnUDgfTecTsgXd",
    "shortId": "44a56188",
    "trackingURL": "https://onf.lt/44a56188",
}


def make_client(handler, **kwargs) -> Onfleet:
    kwargs.setdefault("limiter", RateLimiter(max_concurrent=5, min_time_ms=0))
    return Onfleet(API_KEY, transport=httpx.MockTransport(handler), **kwargs)


def call(handler, action, **kwargs):
    async def scenario():
        async with make_client(handler, **kwargs) as client:
            return await action(client)

    return asyncio.run(scenario())


def test_missing_api_key_is_rejected():
    with pytest.raises(ValidationError):
        Onfleet(None)
    with pytest.raises(ValidationError):
        Onfleet("")


def test_timeout_above_default_is_rejected():
    with pytest.raises(ValidationError) as info:
        Onfleet(API_KEY, user_timeout=70001)
    assert "70000ms" in str(info.value)


def test_default_headers_and_base_url():
    client = Onfleet(API_KEY, limiter=RateLimiter())
    assert client.api.base_url == BASE
    assert client.api.timeout_ms == 70000
    assert client.api.headers == {
        "Content-Type": "application/json",
        "User-Agent": USER_AGENT,
        "Authorization": f"Basic {encode(API_KEY)}",
    }


def test_custom_headers_merge_into_defaults():
    client = Onfleet(API_KEY, limiter=RateLimiter())
    client.custom_headers = {"X-Trace": "abc", "User-Agent": "custom"}
    assert client.custom_headers == {"X-Trace": "abc", "User-Agent": "custom"}
    assert client.api.headers["X-Trace"] == "abc"
    assert client.api.headers["User-Agent"] == "custom"
    assert client.api.headers["Authorization"].startswith("Basic ")


def test_every_resource_is_attached():
    client = Onfleet(API_KEY, limiter=RateLimiter())
    for name in (
        "admins", "administrators", "containers", "customfields", "destinations", "hubs",
        "organization", "recipients", "tasks", "teams", "webhooks", "workers",
    ):
        assert hasattr(client, name)
    assert callable(client.tasks.force_complete)


def test_invalid_limiter_options_leave_shared_settings():
    get_limiter.cache_clear()
    try:
        Onfleet(API_KEY, limiter_options={"maxConcurrent": 50, "minTime": 1})
        settings = get_limiter().settings
        assert settings.max_concurrent == LIMITER_DEFAULT_MAX_CONCURRENT
        assert settings.min_time_ms == LIMITER_DEFAULT_MIN_TIME_MS
    finally:
        get_limiter.cache_clear()


def test_valid_limiter_options_apply_to_every_client():
    get_limiter.cache_clear()
    try:
        first = Onfleet(API_KEY)
        Onfleet(API_KEY, limiter_options={"maxConcurrent": 5, "minTime": 100})
        assert first.limiter is get_limiter()
        assert first.limiter.settings.max_concurrent == 5
        assert first.limiter.settings.min_time_ms == 100
    finally:
        get_limiter.cache_clear()


def test_get_task_by_short_id():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "GET"
        assert str(request.url) == f"{BASE}/tasks/shortId/44a56188"
        return httpx.Response(200, json=SHORT_ID_TASK)

    assert call(handler, lambda client: client.tasks.get("44a56188", "shortId")) == SHORT_ID_TASK


def test_list_administrators():
    admins = [{"email": "james@onfleet.com", "type": "super"}, {"email": "wrapper@onfleet.com", "type": "standard"}]

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == f"{BASE}/admins"
        assert request.headers["Authorization"] == f"Basic {encode(API_KEY)}"
        assert request.headers["User-Agent"] == USER_AGENT
        return httpx.Response(200, json=admins)

    result = call(handler, lambda client: client.administrators.get())
    assert result[0]["email"] == "james@onfleet.com"
    assert result[1]["type"] == "standard"


def test_update_worker_sends_body():
    detail = {"name": "Stephen Curry", "phone": "+18883133131"}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "PUT"
        assert request.url.path == "/api/v2/workers/Mdfs*NDZ1*lMU0abFXAT82lM"
        assert json.loads(request.content) == detail
        return httpx.Response(200, json={**detail, "id": "Mdfs*NDZ1*lMU0abFXAT82lM"})

    result = call(handler, lambda client: client.workers.update("Mdfs*NDZ1*lMU0abFXAT82lM", detail))
    assert result["name"] == "Stephen Curry"


def test_team_worker_eta_uses_query():
    eta = {"dropoffLocation": "101.627378,3.1403995", "pickupTime": "1620965258"}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v2/teams/SxD9Ran6pOfnUDgfTecTsgXd/estimate"
        assert request.url.params["pickupTime"] == "1620965258"
        return httpx.Response(200, json={"steps": [{"arrivalTime": 1621339297}]})

    result = call(handler, lambda client: client.teams.get_worker_eta("SxD9Ran6pOfnUDgfTecTsgXd", eta))
    assert result["steps"][0]["arrivalTime"] == 1621339297


def test_delete_task_returns_status():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "DELETE"
        return httpx.Response(200)

    assert call(handler, lambda client: client.tasks.delete_one("AqzN6ZAq*qlSDJ0FzmZIMZz~")) == 200


def test_create_custom_field_with_empty_response():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v2/customFields"
        assert json.loads(request.content)["model"] == "Task"
        return httpx.Response(200)

    assert call(handler, lambda client: client.customfields.create({"model": "Task", "field": []})) == 200


def test_delivery_manifest_request():
    manifest = {
        "hubId": "kyfYe*wyVbqfomP2HTn5dAe1~*O",
        "workerId": "kBUZAb7pREtRn*8wIUCpjnPu",
        "googleApiKey": "<google_direction_api_key>",
        "startDate": "1455072025000",
        "endDate": "1455072025000",
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/api/v2/integrations/marketplace"
        assert request.url.params["startDate"] == "1455072025000"
        assert request.headers["X-API-Key"] == "Google <google_direction_api_key>"
        assert json.loads(request.content)["method"] == "GET"
        return httpx.Response(200, json={"manifestDate": 1694199600000, "turnByTurn": []})

    result = call(handler, lambda client: client.workers.get_delivery_manifest(manifest))
    assert result["manifestDate"] == 1694199600000


def test_rate_limit_response_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={"code": "TooManyRequests", "message": {"error": 2300, "message": "slow down", "request": "r1"}},
        )

    with pytest.raises(RateLimitError) as info:
        call(handler, lambda client: client.tasks.get("SxD9Ran6pOfnUDgfTecTsgXd"))
    assert info.value.code == 2300


def test_verify_key():
    def accept(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == f"{BASE}/auth/test"
        return httpx.Response(200, json={"message": "Hello organization"})

    def reject(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"code": "InvalidCredentials", "message": {"error": 1102, "message": "bad key"}})

    assert call(accept, lambda client: client.verify_key()) is True
    assert call(reject, lambda client: client.verify_key()) is False


def test_from_env_settings():
    settings = ClientSettings(api_key=API_KEY, base_url="https://example.test", timeout_ms=30000)
    client = Onfleet.from_env(settings, limiter=RateLimiter())
    assert client.api.base_url == "https://example.test/api/v2"
    assert client.api.timeout_ms == 30000


def test_from_env_without_key_is_rejected():
    with pytest.raises(ValidationError):
        Onfleet.from_env(ClientSettings(), limiter=RateLimiter())
