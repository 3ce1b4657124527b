"""
Pytest configuration for storefront Klaviyo API tests.

Sets up the test environment and a fake Klaviyo API built on
httpx.MockTransport, so requests go through the real KlaviyoClient.
"""
import json
import os
from typing import Any, Dict, List, Optional

import httpx
import pytest

# Disable config validation during tests
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ["ENVIRONMENT"] = "testing"
os.environ["KLAVIYO_PRIVATE_API_KEY"] = "pk_test_1234567890"
os.environ["KLAVIYO_PUBLIC_API_KEY"] = "PUBKEY"
os.environ["KLAVIYO_NEWSLETTER_LIST_ID"] = "LIST123"

from fastapi.testclient import TestClient  # noqa: E402

from klaviyo_bridge.klaviyo import KlaviyoClient, get_klaviyo_client  # noqa: E402
from klaviyo_bridge.main import app  # noqa: E402

TEST_API_KEY = "pk_test_1234567890"


class FakeKlaviyo:
    """
    In-memory stand-in for https://a.klaviyo.com/api.

    Responses are queued per (method, path) with `add()`; each request pops
    the next queued response and the last one is repeated. Paths are given
    without the /api prefix, e.g. fake.add("GET", "/profiles/", json=...).
    Unregistered routes answer 404 with a JSON:API error.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._routes: Dict[tuple, List[dict]] = {}

    def add(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json: Any = None,
        text: Optional[str] = None,
        error: Optional[Exception] = None,
    ) -> "FakeKlaviyo":
        self._routes.setdefault((method.upper(), path), []).append(
            {"status_code": status_code, "json": json, "text": text, "error": error}
        )
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]

        queue = self._routes.get((request.method, path))
        if not queue:
            return httpx.Response(
                404,
                json={"errors": [{"status": 404, "title": "Not found.", "detail": f"No route {path}"}]},
            )

        queued = queue.pop(0) if len(queue) > 1 else queue[0]
        if queued["error"] is not None:
            raise queued["error"]
        if queued["json"] is not None:
            return httpx.Response(queued["status_code"], json=queued["json"])
        if queued["text"] is not None:
            return httpx.Response(queued["status_code"], text=queued["text"])
        return httpx.Response(queued["status_code"])

    def client(self) -> KlaviyoClient:
        return KlaviyoClient(api_key=TEST_API_KEY, transport=httpx.MockTransport(self.handler))

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path == f"/api{path}"
        ]

    @staticmethod
    def body(request: httpx.Request) -> Dict[str, Any]:
        return json.loads(request.content)


def build_profile(
    profile_id: str = "01PROFILE",
    email: Optional[str] = "jane@example.com",
    first_name: Optional[str] = "Jane",
    last_name: Optional[str] = "Doe",
    consent: Optional[str] = None,
    properties: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build a Klaviyo JSON:API profile resource."""
    attributes: Dict[str, Any] = {
        "email": email,
        "first_name": first_name,
        "last_name": last_name,
        "properties": properties or {},
    }
    if consent:
        attributes["subscriptions"] = {
            "email": {
                "marketing": {
                    "consent": consent,
                    "timestamp": "2025-01-10T12:00:00+00:00",
                }
            }
        }
    return {"type": "profile", "id": profile_id, "attributes": attributes}


def build_profile_page(*profiles: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap profiles into a GET /profiles/ response document."""
    return {"data": list(profiles), "links": {"self": "https://a.klaviyo.com/api/profiles/"}}


@pytest.fixture
def make_profile():
    """Factory for Klaviyo profile resources."""
    return build_profile


@pytest.fixture
def profile_page():
    """Factory for GET /profiles/ response documents."""
    return build_profile_page


@pytest.fixture
def fake_klaviyo() -> FakeKlaviyo:
    return FakeKlaviyo()


def _use_fake_klaviyo(fake_klaviyo: FakeKlaviyo) -> None:
    async def override_get_klaviyo_client():
        klaviyo = fake_klaviyo.client()
        try:
            yield klaviyo
        finally:
            await klaviyo.aclose()

    app.dependency_overrides[get_klaviyo_client] = override_get_klaviyo_client


@pytest.fixture
def client(fake_klaviyo):
    """TestClient whose routes talk to the fake Klaviyo."""
    _use_fake_klaviyo(fake_klaviyo)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def server_client(fake_klaviyo):
    """
    Like `client`, but unhandled errors come back as responses (as they
    would from the deployed function) instead of being re-raised.
    """
    _use_fake_klaviyo(fake_klaviyo)
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
