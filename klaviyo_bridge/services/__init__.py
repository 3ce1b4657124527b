"""
Service layer for the storefront Klaviyo API.

Contains the request orchestration that:
- Builds Klaviyo JSON:API documents from storefront fields
- Calls Klaviyo through a per-request KlaviyoClient
- Maps Klaviyo resources into the storefront response shapes

Services act as the glue between routes (HTTP layer) and Klaviyo.
"""

from .list_service import get_lists
from .preference_codec import encode_preference, get_preference_label, parse_preference
from .preference_service import (
    ProfileNotFoundError,
    format_preferences,
    get_preferences,
    save_preferences,
)
from .profile_service import (
    create_or_update_profile,
    find_profile,
    format_profile,
    get_profile_by_email,
    get_profile_by_shopify_id,
    refetch_profile,
    update_profile,
)
from .subscription_service import (
    ListNotConfiguredError,
    is_valid_email,
    subscribe_profile,
    unsubscribe_profile,
)

__all__ = [
    # Lists
    "get_lists",
    # Preferences
    "ProfileNotFoundError",
    "encode_preference",
    "format_preferences",
    "get_preference_label",
    "get_preferences",
    "parse_preference",
    "save_preferences",
    # Profiles
    "create_or_update_profile",
    "find_profile",
    "format_profile",
    "get_profile_by_email",
    "get_profile_by_shopify_id",
    "refetch_profile",
    "update_profile",
    # Subscriptions
    "ListNotConfiguredError",
    "is_valid_email",
    "subscribe_profile",
    "unsubscribe_profile",
]
