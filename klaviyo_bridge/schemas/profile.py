"""
Pydantic schemas for the profile endpoints.

Response fields are camelCase on the wire (firstName, isSubscribed, ...) to
match what the account page JavaScript reads.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from klaviyo_bridge.schemas.common import Identifier, StorefrontRequest


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Profile response models ---

class EmailSubscription(CamelModel):
    """
    Email marketing consent as reported by Klaviyo.

    `can_subscribe` is true when showing a "Subscribe" button makes sense:
    the profile never subscribed or unsubscribed itself (suppressed
    profiles cannot be re-subscribed from the storefront).
    """
    is_subscribed: bool
    is_unsubscribed: bool
    is_never_subscribed: bool
    is_suppressed: bool
    consent: str = Field(..., examples=["SUBSCRIBED", "NEVER_SUBSCRIBED"])
    can_subscribe: bool
    timestamp: Optional[str] = Field(None, description="When consent last changed")


class SubscriptionStatus(CamelModel):
    email: EmailSubscription


class ProfilePreferences(CamelModel):
    marketing_preference: str = Field(..., examples=["menswear", "both", "no_preference"])


class ProfileData(CamelModel):
    """Klaviyo profile in the shape the account page uses."""
    id: Optional[str] = Field(None, description="Klaviyo profile id")
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    subscription: SubscriptionStatus
    preferences: ProfilePreferences


class ProfileResponse(BaseModel):
    """Response for GET/POST/PATCH /api/profile."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[ProfileData] = None


# --- Profile request models ---

class ProfileCreateRequest(StorefrontRequest):
    """
    Request body for POST /api/profile (create or update by email).
    """
    email: Optional[str] = Field(None, description="Profile email (required)")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    shopify_id: Identifier = Field(None, alias="shopifyId")
    properties: Optional[Dict[str, Any]] = Field(
        None,
        description="Custom profile properties to merge into the profile"
    )


class ProfileUpdateRequest(StorefrontRequest):
    """
    Request body for PATCH /api/profile.

    Either `email` or `shopifyId` identifies the profile.
    """
    email: Optional[str] = None
    shopify_id: Identifier = Field(None, alias="shopifyId")
    properties: Optional[Dict[str, Any]] = Field(
        None,
        description="Custom profile properties to merge into the profile"
    )
