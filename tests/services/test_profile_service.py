"""
Tests for the Klaviyo profile service.

Tests cover:
- Email lookup filter and subscriptions field
- Shopify id lookup fallback chain (external_id, then custom property)
- Create with duplicate (409) fallback to PATCH
- Profile formatting for the account page
"""

import pytest

from klaviyo_bridge.klaviyo import KlaviyoAPIError
from klaviyo_bridge.services.profile_service import (
    build_profile_filter,
    build_profile_payload,
    create_or_update_profile,
    find_profile,
    format_profile,
    get_profile_by_email,
    get_profile_by_shopify_id,
)


class TestProfileLookup:
    """Tests for email and Shopify id lookups."""

    @pytest.mark.asyncio
    async def test_lookup_by_email(self, fake_klaviyo, make_profile, profile_page):
        fake_klaviyo.add("GET", "/profiles/", json=profile_page(make_profile()))

        async with fake_klaviyo.client() as klaviyo:
            profile = await get_profile_by_email(klaviyo, "jane@example.com")

        assert profile["id"] == "01PROFILE"
        request = fake_klaviyo.calls("GET", "/profiles/")[0]
        assert request.url.params["filter"] == 'equals(email,"jane@example.com")'
        assert request.url.params["additional-fields[profile]"] == "subscriptions"

    @pytest.mark.asyncio
    async def test_lookup_by_email_not_found(self, fake_klaviyo, profile_page):
        fake_klaviyo.add("GET", "/profiles/", json=profile_page())

        async with fake_klaviyo.client() as klaviyo:
            assert await get_profile_by_email(klaviyo, "nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_lookup_without_subscriptions(self, fake_klaviyo, profile_page):
        fake_klaviyo.add("GET", "/profiles/", json=profile_page())

        async with fake_klaviyo.client() as klaviyo:
            await get_profile_by_email(klaviyo, "jane@example.com", include_subscriptions=False)

        request = fake_klaviyo.calls("GET", "/profiles/")[0]
        assert "additional-fields[profile]" not in request.url.params

    @pytest.mark.asyncio
    async def test_shopify_lookup_matches_external_id(self, fake_klaviyo, make_profile, profile_page):
        fake_klaviyo.add("GET", "/profiles/", json=profile_page(make_profile(profile_id="01EXT")))

        async with fake_klaviyo.client() as klaviyo:
            profile = await get_profile_by_shopify_id(klaviyo, "7001")

        assert profile["id"] == "01EXT"
        calls = fake_klaviyo.calls("GET", "/profiles/")
        assert len(calls) == 1
        assert calls[0].url.params["filter"] == 'equals(external_id,"shopify_7001")'

    @pytest.mark.asyncio
    async def test_shopify_lookup_falls_back_to_custom_property(self, fake_klaviyo, make_profile, profile_page):
        fake_klaviyo.add("GET", "/profiles/", json=profile_page())
        fake_klaviyo.add("GET", "/profiles/", json=profile_page(make_profile(profile_id="01PROP")))

        async with fake_klaviyo.client() as klaviyo:
            profile = await get_profile_by_shopify_id(klaviyo, "7001")

        assert profile["id"] == "01PROP"
        calls = fake_klaviyo.calls("GET", "/profiles/")
        assert [c.url.params["filter"] for c in calls] == [
            'equals(external_id,"shopify_7001")',
            'equals(properties.shopify_customer_id,"7001")',
        ]

    @pytest.mark.asyncio
    async def test_shopify_lookup_not_found(self, fake_klaviyo, profile_page):
        fake_klaviyo.add("GET", "/profiles/", json=profile_page())

        async with fake_klaviyo.client() as klaviyo:
            assert await get_profile_by_shopify_id(klaviyo, "7001") is None

        assert len(fake_klaviyo.calls("GET", "/profiles/")) == 2

    @pytest.mark.asyncio
    async def test_find_profile_prefers_email(self, fake_klaviyo, make_profile, profile_page):
        fake_klaviyo.add("GET", "/profiles/", json=profile_page(make_profile()))

        async with fake_klaviyo.client() as klaviyo:
            await find_profile(klaviyo, email="jane@example.com", shopify_id="7001")

        calls = fake_klaviyo.calls("GET", "/profiles/")
        assert len(calls) == 1
        assert calls[0].url.params["filter"].startswith("equals(email,")

    def test_filter_escapes_quotes(self):
        assert build_profile_filter("email", 'a"b@example.com') == 'equals(email,"a\\"b@example.com")'


class TestCreateOrUpdateProfile:
    """Tests for create_or_update_profile()"""

    def test_payload_includes_shopify_identity(self):
        payload = build_profile_payload(
            "jane@example.com",
            first_name="Jane",
            shopify_id="7001",
            properties={"vip": True},
        )

        attributes = payload["data"]["attributes"]
        assert payload["data"]["type"] == "profile"
        assert attributes["email"] == "jane@example.com"
        assert attributes["first_name"] == "Jane"
        assert "last_name" not in attributes
        assert attributes["external_id"] == "shopify_7001"
        assert attributes["properties"] == {"shopify_customer_id": "7001", "vip": True}

    @pytest.mark.asyncio
    async def test_creates_profile(self, fake_klaviyo):
        fake_klaviyo.add("POST", "/profiles/", status_code=201, json={"data": {"id": "01NEW"}})

        async with fake_klaviyo.client() as klaviyo:
            result = await create_or_update_profile(klaviyo, email="jane@example.com")

        assert result["data"]["id"] == "01NEW"
        assert fake_klaviyo.calls("PATCH", "/profiles/01NEW/") == []

    @pytest.mark.asyncio
    async def test_duplicate_profile_is_patched(self, fake_klaviyo):
        fake_klaviyo.add("POST", "/profiles/", status_code=409, json={
            "errors": [{
                "status": 409,
                "code": "duplicate_profile",
                "title": "Conflict.",
                "detail": "A profile already exists with one of these identifiers.",
                "meta": {"duplicate_profile_id": "01DUP"},
            }]
        })
        fake_klaviyo.add("PATCH", "/profiles/01DUP/", json={"data": {"id": "01DUP"}})

        async with fake_klaviyo.client() as klaviyo:
            await create_or_update_profile(
                klaviyo,
                email="jane@example.com",
                first_name="Jane",
                properties={"vip": True},
            )

        patch_request = fake_klaviyo.calls("PATCH", "/profiles/01DUP/")[0]
        body = fake_klaviyo.body(patch_request)
        assert body["data"]["id"] == "01DUP"
        assert body["data"]["attributes"]["first_name"] == "Jane"
        assert body["data"]["attributes"]["properties"] == {"vip": True}
        assert "email" not in body["data"]["attributes"]

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, fake_klaviyo):
        fake_klaviyo.add("POST", "/profiles/", status_code=400, json={
            "errors": [{"status": 400, "detail": "Invalid email address"}]
        })

        async with fake_klaviyo.client() as klaviyo:
            with pytest.raises(KlaviyoAPIError, match="Invalid email address"):
                await create_or_update_profile(klaviyo, email="bad")


class TestFormatProfile:
    """Tests for format_profile()"""

    def test_subscribed_profile(self, make_profile):
        formatted = format_profile(make_profile(
            consent="SUBSCRIBED",
            properties={"preference": '["Menswear"]'},
        ))

        assert formatted["id"] == "01PROFILE"
        assert formatted["email"] == "jane@example.com"
        assert formatted["first_name"] == "Jane"
        email_status = formatted["subscription"]["email"]
        assert email_status["is_subscribed"] is True
        assert email_status["can_subscribe"] is False
        assert email_status["consent"] == "SUBSCRIBED"
        assert email_status["timestamp"] == "2025-01-10T12:00:00+00:00"
        assert formatted["preferences"]["marketing_preference"] == "menswear"

    def test_profile_without_subscriptions_is_never_subscribed(self, make_profile):
        email_status = format_profile(make_profile())["subscription"]["email"]

        assert email_status["consent"] == "NEVER_SUBSCRIBED"
        assert email_status["is_never_subscribed"] is True
        assert email_status["can_subscribe"] is True
        assert email_status["timestamp"] is None

    def test_unsubscribed_profile_can_resubscribe(self, make_profile):
        email_status = format_profile(make_profile(consent="UNSUBSCRIBED"))["subscription"]["email"]

        assert email_status["is_unsubscribed"] is True
        assert email_status["can_subscribe"] is True

    def test_suppressed_profile_cannot_subscribe(self, make_profile):
        email_status = format_profile(make_profile(consent="SUPPRESSED"))["subscription"]["email"]

        assert email_status["is_suppressed"] is True
        assert email_status["can_subscribe"] is False

    def test_preference_falls_back_to_enum_property(self, make_profile):
        formatted = format_profile(make_profile(properties={"marketing_preference": "womenswear"}))

        assert formatted["preferences"]["marketing_preference"] == "womenswear"

    def test_no_profile(self):
        assert format_profile(None) is None
