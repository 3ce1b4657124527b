"""
Newsletter subscription service.

Subscribes and unsubscribes a single email using Klaviyo's bulk
subscription jobs. Klaviyo answers both jobs with 202 Accepted and processes
them asynchronously, so there is no body to map.
"""

import logging
import re
from typing import Any, Dict, Optional

from klaviyo_bridge.config import settings
from klaviyo_bridge.klaviyo.client import KlaviyoClient
from klaviyo_bridge.utils.constants import (
    CONSENT_SUBSCRIBED,
    DEFAULT_SUBSCRIPTION_SOURCE,
    PROPERTY_SHOPIFY_CUSTOMER_ID,
)
from klaviyo_bridge.utils.logging import mask_email

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class ListNotConfiguredError(Exception):
    """Raised when no newsletter list id was given or configured."""


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


def resolve_list_id(list_id: Optional[str] = None) -> Optional[str]:
    """Use the requested list, falling back to KLAVIYO_NEWSLETTER_LIST_ID."""
    return list_id or settings.KLAVIYO_NEWSLETTER_LIST_ID or None


def _list_relationship(list_id: str) -> Dict[str, Any]:
    return {"list": {"data": {"type": "list", "id": list_id}}}


def build_subscribe_payload(
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    shopify_id: Optional[str] = None,
    list_id: Optional[str] = None,
    source: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a profile-subscription-bulk-create-job document for one email.

    The list relationship is omitted when list_id is None, which only
    records marketing consent on the profile.
    """
    profile_attributes: Dict[str, Any] = {
        "email": email,
        "subscriptions": {
            "email": {"marketing": {"consent": CONSENT_SUBSCRIBED}},
        },
    }
    if first_name:
        profile_attributes["first_name"] = first_name
    if last_name:
        profile_attributes["last_name"] = last_name
    if shopify_id:
        profile_attributes["properties"] = {PROPERTY_SHOPIFY_CUSTOMER_ID: shopify_id}

    data: Dict[str, Any] = {
        "type": "profile-subscription-bulk-create-job",
        "attributes": {
            "custom_source": source or DEFAULT_SUBSCRIPTION_SOURCE,
            "profiles": {
                "data": [{"type": "profile", "attributes": profile_attributes}],
            },
        },
    }
    if list_id:
        data["relationships"] = _list_relationship(list_id)

    return {"data": data}


def build_unsubscribe_payload(email: str, list_id: str) -> Dict[str, Any]:
    """Build a profile-subscription-bulk-delete-job document for one email."""
    return {
        "data": {
            "type": "profile-subscription-bulk-delete-job",
            "attributes": {
                "profiles": {
                    "data": [{"type": "profile", "attributes": {"email": email}}],
                },
            },
            "relationships": _list_relationship(list_id),
        }
    }


async def subscribe_profile(
    klaviyo: KlaviyoClient,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    shopify_id: Optional[str] = None,
    list_id: Optional[str] = None,
    source: Optional[str] = None,
) -> None:
    """
    Subscribe an email to the newsletter list.

    Raises:
        KlaviyoAPIError: If Klaviyo rejects the job
    """
    resolved_list_id = resolve_list_id(list_id)
    if not resolved_list_id:
        logger.warning("No newsletter list configured; subscribing without a list")

    logger.info(f"Subscribing {mask_email(email)} to list {resolved_list_id}")
    await klaviyo.post(
        "/profile-subscription-bulk-create-jobs/",
        build_subscribe_payload(
            email,
            first_name=first_name,
            last_name=last_name,
            shopify_id=shopify_id,
            list_id=resolved_list_id,
            source=source,
        ),
    )


async def unsubscribe_profile(
    klaviyo: KlaviyoClient,
    email: str,
    list_id: Optional[str] = None,
) -> None:
    """
    Unsubscribe an email from the newsletter list.

    Raises:
        ListNotConfiguredError: If no list id is available
        KlaviyoAPIError: If Klaviyo rejects the job
    """
    resolved_list_id = resolve_list_id(list_id)
    if not resolved_list_id:
        raise ListNotConfiguredError("Newsletter list is not configured")

    logger.info(f"Unsubscribing {mask_email(email)} from list {resolved_list_id}")
    await klaviyo.post(
        "/profile-subscription-bulk-delete-jobs/",
        build_unsubscribe_payload(email, resolved_list_id),
    )
