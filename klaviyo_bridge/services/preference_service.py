"""
Marketing preference service.

Reads and writes the menswear/womenswear preference stored on a Klaviyo
profile. Three properties are written together:
- `marketing_preference`: the UI value as-is
- `preference`: the encoded tag list that Klaviyo segments use
- `marketing_preference_updated_at`: ISO-8601 UTC timestamp
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from klaviyo_bridge.klaviyo.client import KlaviyoClient
from klaviyo_bridge.services.preference_codec import (
    encode_preference,
    get_preference_label,
    parse_preference,
)
from klaviyo_bridge.services.profile_service import (
    create_or_update_profile,
    find_profile,
    get_profile_by_email,
    refetch_profile,
    update_profile,
)
from klaviyo_bridge.utils.constants import (
    PREFERENCE_NONE,
    PROPERTY_MARKETING_PREFERENCE,
    PROPERTY_MARKETING_PREFERENCE_UPDATED_AT,
    PROPERTY_PREFERENCE,
)
from klaviyo_bridge.utils.logging import mask_email

logger = logging.getLogger(__name__)


class ProfileNotFoundError(Exception):
    """Raised when no profile exists and one cannot be created (no email)."""


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_preference_properties(marketing_preference: Optional[str]) -> Dict[str, Any]:
    """
    Build the profile properties that record a preference choice.

    Raises:
        ValueError: If marketing_preference is not a valid UI value
    """
    value = marketing_preference or PREFERENCE_NONE
    return {
        PROPERTY_MARKETING_PREFERENCE: value,
        PROPERTY_PREFERENCE: encode_preference(value),
        PROPERTY_MARKETING_PREFERENCE_UPDATED_AT: _utc_timestamp(),
    }


def format_preferences(profile: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Map a Klaviyo profile into the preferences response payload."""
    if not profile:
        return None

    properties = (profile.get("attributes") or {}).get("properties") or {}
    preference = parse_preference(
        properties.get(PROPERTY_PREFERENCE),
        fallback=properties.get(PROPERTY_MARKETING_PREFERENCE),
    )
    # Custom properties are free-form; other integrations may store a number
    updated_at = properties.get(PROPERTY_MARKETING_PREFERENCE_UPDATED_AT)
    return {
        "marketing_preference": preference,
        "marketing_preference_label": get_preference_label(preference),
        "updated_at": str(updated_at) if updated_at is not None else None,
    }


def default_preferences() -> Dict[str, Any]:
    """Preferences reported for customers without a Klaviyo profile yet."""
    return {
        "marketing_preference": PREFERENCE_NONE,
        "marketing_preference_label": get_preference_label(PREFERENCE_NONE),
        "updated_at": None,
        "is_new_profile": True,
    }


async def get_preferences(
    klaviyo: KlaviyoClient,
    email: Optional[str] = None,
    shopify_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Fetch the current preference for a customer.

    Returns:
        Formatted preferences, or default_preferences() when no profile exists
    """
    profile = await find_profile(klaviyo, email=email, shopify_id=shopify_id, include_subscriptions=False)
    if not profile:
        logger.info("No Klaviyo profile found, returning default preferences")
        return default_preferences()
    return format_preferences(profile) or default_preferences()


async def save_preferences(
    klaviyo: KlaviyoClient,
    email: Optional[str] = None,
    shopify_id: Optional[str] = None,
    marketing_preference: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """
    Store a preference, creating the profile when it does not exist yet.

    Args:
        klaviyo: Klaviyo client for this request
        email: Customer email (required to create a profile)
        shopify_id: Shopify customer id
        marketing_preference: UI value; None means no_preference

    Returns:
        Formatted preferences read back from Klaviyo

    Raises:
        ValueError: If marketing_preference is invalid
        ProfileNotFoundError: If no profile exists and no email was given
        KlaviyoAPIError: On Klaviyo failures
    """
    properties = build_preference_properties(marketing_preference)

    profile = await find_profile(klaviyo, email=email, shopify_id=shopify_id, include_subscriptions=False)

    if not profile:
        if not email:
            raise ProfileNotFoundError(
                "Profile not found. Email is required to create a new profile."
            )
        logger.info(f"Creating Klaviyo profile with preferences for {mask_email(email)}")
        await create_or_update_profile(
            klaviyo,
            email=email,
            shopify_id=shopify_id,
            properties=properties,
        )
        updated = await get_profile_by_email(klaviyo, email, include_subscriptions=False)
    else:
        await update_profile(klaviyo, profile["id"], properties=properties)
        updated = await refetch_profile(klaviyo, profile, shopify_id=shopify_id)

    logger.info(f"Marketing preference set to {properties[PROPERTY_MARKETING_PREFERENCE]}")
    return format_preferences(updated)
