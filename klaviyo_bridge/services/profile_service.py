"""
Klaviyo profile service.

Handles looking up, creating and updating Klaviyo profiles, and maps a raw
JSON:API profile resource into the shape the storefront account page uses.

Lookup order for Shopify customers:
1. external_id == "shopify_<id>"  (profiles created by this API)
2. properties.shopify_customer_id == "<id>"  (profiles synced by other tools)
"""

import logging
from typing import Any, Dict, Optional

from klaviyo_bridge.klaviyo.client import KlaviyoAPIError, KlaviyoClient
from klaviyo_bridge.services.preference_codec import parse_preference
from klaviyo_bridge.utils.constants import (
    CONSENT_NEVER_SUBSCRIBED,
    CONSENT_SUBSCRIBED,
    CONSENT_SUPPRESSED,
    CONSENT_UNSUBSCRIBED,
    PROPERTY_MARKETING_PREFERENCE,
    PROPERTY_PREFERENCE,
    PROPERTY_SHOPIFY_CUSTOMER_ID,
    SHOPIFY_EXTERNAL_ID_PREFIX,
)
from klaviyo_bridge.utils.logging import mask_email

logger = logging.getLogger(__name__)


def build_external_id(shopify_id: str) -> str:
    """Return the Klaviyo external_id used for a Shopify customer."""
    return f"{SHOPIFY_EXTERNAL_ID_PREFIX}{shopify_id}"


def build_profile_filter(field: str, value: str) -> str:
    """
    Build a Klaviyo `equals` filter expression.

    Double quotes inside the value are escaped so that the filter stays a
    single string literal.
    """
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'equals({field},"{escaped}")'


def profile_query_params(filter_expression: str, include_subscriptions: bool = True) -> Dict[str, str]:
    params = {"filter": filter_expression}
    if include_subscriptions:
        params["additional-fields[profile]"] = "subscriptions"
    return params


async def _first_profile(
    klaviyo: KlaviyoClient,
    filter_expression: str,
    include_subscriptions: bool,
) -> Optional[Dict[str, Any]]:
    data = await klaviyo.get(
        "/profiles/",
        params=profile_query_params(filter_expression, include_subscriptions),
    )
    profiles = (data or {}).get("data") or []
    return profiles[0] if profiles else None


async def get_profile_by_email(
    klaviyo: KlaviyoClient,
    email: str,
    include_subscriptions: bool = True,
) -> Optional[Dict[str, Any]]:
    """
    Fetch the first Klaviyo profile whose email matches exactly.

    Args:
        klaviyo: Klaviyo client for this request
        email: Customer email
        include_subscriptions: Request the `subscriptions` additional field

    Returns:
        The JSON:API profile resource, or None if no profile matches
    """
    logger.debug(f"Looking up Klaviyo profile by email {mask_email(email)}")
    return await _first_profile(
        klaviyo,
        build_profile_filter("email", email),
        include_subscriptions,
    )


async def get_profile_by_shopify_id(
    klaviyo: KlaviyoClient,
    shopify_id: str,
    include_subscriptions: bool = True,
) -> Optional[Dict[str, Any]]:
    """
    Fetch a Klaviyo profile for a Shopify customer id.

    Tries the external_id first, then falls back to the
    `shopify_customer_id` custom property.

    Returns:
        The JSON:API profile resource, or None if neither lookup matches
    """
    profile = await _first_profile(
        klaviyo,
        build_profile_filter("external_id", build_external_id(shopify_id)),
        include_subscriptions,
    )
    if profile:
        return profile

    logger.debug(f"No external_id match for Shopify customer {shopify_id}, trying custom property")
    return await _first_profile(
        klaviyo,
        build_profile_filter(f"properties.{PROPERTY_SHOPIFY_CUSTOMER_ID}", shopify_id),
        include_subscriptions,
    )


async def find_profile(
    klaviyo: KlaviyoClient,
    email: Optional[str] = None,
    shopify_id: Optional[str] = None,
    include_subscriptions: bool = True,
) -> Optional[Dict[str, Any]]:
    """Look a profile up by email when given, otherwise by Shopify id."""
    if email:
        return await get_profile_by_email(klaviyo, email, include_subscriptions)
    if shopify_id:
        return await get_profile_by_shopify_id(klaviyo, shopify_id, include_subscriptions)
    return None


async def refetch_profile(
    klaviyo: KlaviyoClient,
    profile: Dict[str, Any],
    shopify_id: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Re-read a profile after a write so the response reflects Klaviyo's state.

    Profiles without an email (e.g. SMS-only) are re-read by Shopify id.
    """
    email = (profile.get("attributes") or {}).get("email")
    if email:
        return await get_profile_by_email(klaviyo, email)
    if shopify_id:
        return await get_profile_by_shopify_id(klaviyo, shopify_id)
    return profile


def build_profile_payload(
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    shopify_id: Optional[str] = None,
    properties: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the JSON:API document for POST /profiles/."""
    attributes: Dict[str, Any] = {"email": email}
    if first_name:
        attributes["first_name"] = first_name
    if last_name:
        attributes["last_name"] = last_name
    if shopify_id:
        attributes["external_id"] = build_external_id(shopify_id)

    merged_properties: Dict[str, Any] = {}
    if shopify_id:
        merged_properties[PROPERTY_SHOPIFY_CUSTOMER_ID] = shopify_id
    merged_properties.update(properties or {})
    attributes["properties"] = merged_properties

    return {"data": {"type": "profile", "attributes": attributes}}


def build_profile_update_payload(
    profile_id: str,
    properties: Optional[Dict[str, Any]] = None,
    attributes: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Build the JSON:API document for PATCH /profiles/<id>/."""
    merged_attributes: Dict[str, Any] = dict(attributes or {})
    merged_attributes["properties"] = properties or {}
    return {
        "data": {
            "type": "profile",
            "id": profile_id,
            "attributes": merged_attributes,
        }
    }


async def update_profile(
    klaviyo: KlaviyoClient,
    profile_id: str,
    properties: Optional[Dict[str, Any]] = None,
    attributes: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """
    PATCH custom properties (and optionally attributes) of an existing profile.

    Klaviyo merges `properties` into the stored ones; keys not sent are kept.
    """
    logger.info(f"Updating Klaviyo profile {profile_id}")
    return await klaviyo.patch(
        f"/profiles/{profile_id}/",
        build_profile_update_payload(profile_id, properties, attributes),
    )


def _duplicate_profile_id(error: KlaviyoAPIError) -> Optional[str]:
    for item in error.errors:
        duplicate_id = ((item or {}).get("meta") or {}).get("duplicate_profile_id")
        if duplicate_id:
            return duplicate_id
    return None


async def create_or_update_profile(
    klaviyo: KlaviyoClient,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    shopify_id: Optional[str] = None,
    properties: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """
    Create a Klaviyo profile, or update it if Klaviyo reports a duplicate.

    Klaviyo answers POST /profiles/ with 409 and the existing id in
    `errors[].meta.duplicate_profile_id` when the email is taken; that
    profile is PATCHed with the same names and properties instead.

    Raises:
        KlaviyoAPIError: For any other Klaviyo failure
    """
    payload = build_profile_payload(email, first_name, last_name, shopify_id, properties)

    try:
        logger.info(f"Creating Klaviyo profile for {mask_email(email)}")
        return await klaviyo.post("/profiles/", payload)
    except KlaviyoAPIError as e:
        duplicate_id = _duplicate_profile_id(e) if e.status_code == 409 else None
        if not duplicate_id:
            raise

    logger.info(f"Profile for {mask_email(email)} already exists as {duplicate_id}, updating")
    attributes = payload["data"]["attributes"]
    return await update_profile(
        klaviyo,
        duplicate_id,
        properties=attributes["properties"],
        attributes={
            key: value
            for key, value in attributes.items()
            if key in ("first_name", "last_name", "external_id")
        },
    )


def format_profile(profile: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Map a Klaviyo profile resource into the account-page profile shape.

    Returns:
        Dict matching schemas.profile.ProfileData, or None for no profile
    """
    if not profile:
        return None

    attrs = profile.get("attributes") or {}
    subscriptions = attrs.get("subscriptions") or {}
    marketing = (subscriptions.get("email") or {}).get("marketing") or {}
    properties = attrs.get("properties") or {}

    consent = marketing.get("consent")
    is_unsubscribed = consent == CONSENT_UNSUBSCRIBED
    is_never_subscribed = not consent or consent == CONSENT_NEVER_SUBSCRIBED

    return {
        "id": profile.get("id"),
        "email": attrs.get("email"),
        "first_name": attrs.get("first_name"),
        "last_name": attrs.get("last_name"),
        "subscription": {
            "email": {
                "is_subscribed": consent == CONSENT_SUBSCRIBED,
                "is_unsubscribed": is_unsubscribed,
                "is_never_subscribed": is_never_subscribed,
                "is_suppressed": consent == CONSENT_SUPPRESSED,
                "consent": consent or CONSENT_NEVER_SUBSCRIBED,
                "can_subscribe": is_never_subscribed or is_unsubscribed,
                "timestamp": marketing.get("timestamp"),
            }
        },
        "preferences": {
            "marketing_preference": parse_preference(
                properties.get(PROPERTY_PREFERENCE),
                fallback=properties.get(PROPERTY_MARKETING_PREFERENCE),
            ),
        },
    }
