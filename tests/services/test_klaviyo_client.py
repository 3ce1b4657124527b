"""
Tests for the Klaviyo REST client.

Tests cover:
- Authentication, revision and JSON:API headers
- 202/204 handled as success without a body
- Error mapping (detail, title, status fallback, non-JSON bodies)
"""

import logging

import httpx
import pytest

from klaviyo_bridge.klaviyo import KlaviyoAPIError, KlaviyoClient


def _client(handler) -> KlaviyoClient:
    return KlaviyoClient(api_key="pk_test_abc", transport=httpx.MockTransport(handler))


class TestKlaviyoRequestHeaders:
    """Headers and body encoding sent to Klaviyo."""

    @pytest.mark.asyncio
    async def test_sends_api_key_revision_and_json_api_headers(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": []})

        async with _client(handler) as klaviyo:
            await klaviyo.get("/lists/")

        request = seen[0]
        assert str(request.url) == "https://a.klaviyo.com/api/lists/"
        assert request.headers["Authorization"] == "Klaviyo-API-Key pk_test_abc"
        assert request.headers["revision"] == "2025-01-15"
        assert request.headers["Accept"] == "application/vnd.api+json"
        assert request.headers["Content-Type"] == "application/vnd.api+json"

    @pytest.mark.asyncio
    async def test_payload_is_sent_as_json_api_document(self, fake_klaviyo):
        fake_klaviyo.add("POST", "/profiles/", status_code=201, json={"data": {"id": "01NEW"}})

        async with fake_klaviyo.client() as klaviyo:
            result = await klaviyo.post("/profiles/", {"data": {"type": "profile"}})

        request = fake_klaviyo.calls("POST", "/profiles/")[0]
        assert fake_klaviyo.body(request) == {"data": {"type": "profile"}}
        assert request.headers["Content-Type"] == "application/vnd.api+json"
        assert result == {"data": {"id": "01NEW"}}

    @pytest.mark.asyncio
    async def test_query_params_are_url_encoded(self, fake_klaviyo):
        fake_klaviyo.add("GET", "/profiles/", json={"data": []})

        async with fake_klaviyo.client() as klaviyo:
            await klaviyo.get("/profiles/", params={"filter": 'equals(email,"a+b@example.com")'})

        request = fake_klaviyo.calls("GET", "/profiles/")[0]
        assert request.url.params["filter"] == 'equals(email,"a+b@example.com")'


class TestKlaviyoResponses:
    """Success responses without a JSON body."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [202, 204])
    async def test_accepted_and_no_content_return_none(self, fake_klaviyo, status_code):
        fake_klaviyo.add("POST", "/profile-subscription-bulk-create-jobs/", status_code=status_code)

        async with fake_klaviyo.client() as klaviyo:
            result = await klaviyo.post("/profile-subscription-bulk-create-jobs/", {"data": {}})

        assert result is None

    @pytest.mark.asyncio
    async def test_non_json_success_returns_none(self, fake_klaviyo):
        fake_klaviyo.add("GET", "/lists/", status_code=200, text="ok")

        async with fake_klaviyo.client() as klaviyo:
            assert await klaviyo.get("/lists/") is None


class TestKlaviyoErrors:
    """Non-2xx responses become KlaviyoAPIError."""

    @pytest.mark.asyncio
    async def test_error_uses_first_detail(self, fake_klaviyo):
        fake_klaviyo.add("GET", "/lists/", status_code=400, json={
            "errors": [
                {"status": 400, "title": "Invalid input.", "detail": "The filter is invalid"},
                {"status": 400, "title": "Other", "detail": "ignored"},
            ]
        })

        async with fake_klaviyo.client() as klaviyo:
            with pytest.raises(KlaviyoAPIError) as exc_info:
                await klaviyo.get("/lists/")

        assert exc_info.value.message == "The filter is invalid"
        assert exc_info.value.status_code == 400
        assert len(exc_info.value.errors) == 2

    @pytest.mark.asyncio
    async def test_error_falls_back_to_title(self, fake_klaviyo):
        fake_klaviyo.add("GET", "/lists/", status_code=401, json={
            "errors": [{"status": 401, "title": "Incorrect authentication credentials."}]
        })

        async with fake_klaviyo.client() as klaviyo:
            with pytest.raises(KlaviyoAPIError, match="Incorrect authentication credentials."):
                await klaviyo.get("/lists/")

    @pytest.mark.asyncio
    async def test_error_without_details_uses_status(self, fake_klaviyo):
        fake_klaviyo.add("GET", "/lists/", status_code=429, json={"errors": []})

        async with fake_klaviyo.client() as klaviyo:
            with pytest.raises(KlaviyoAPIError, match="Klaviyo API error: 429"):
                await klaviyo.get("/lists/")

    @pytest.mark.asyncio
    async def test_non_json_error(self, fake_klaviyo):
        fake_klaviyo.add("GET", "/lists/", status_code=502, text="<html>Bad gateway</html>")

        async with fake_klaviyo.client() as klaviyo:
            with pytest.raises(KlaviyoAPIError) as exc_info:
                await klaviyo.get("/lists/")

        assert exc_info.value.message == "Klaviyo API error: 502"
        assert exc_info.value.status_code == 502
        assert exc_info.value.errors == []

    @pytest.mark.asyncio
    async def test_error_log_masks_emails(self, fake_klaviyo, caplog):
        caplog.set_level(logging.DEBUG, logger="klaviyo_bridge")
        fake_klaviyo.add("POST", "/profiles/", status_code=400, json={
            "errors": [{"status": 400, "detail": "jane.doe@example.com is not a valid email for this account"}]
        })

        async with fake_klaviyo.client() as klaviyo:
            with pytest.raises(KlaviyoAPIError) as exc_info:
                await klaviyo.post("/profiles/", {"data": {}})

        assert exc_info.value.message.startswith("jane.doe@example.com")
        assert "jane.doe@example.com" not in caplog.text
        assert "ja***@example.com" in caplog.text
