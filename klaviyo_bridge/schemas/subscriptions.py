"""
Pydantic schemas for the subscribe and unsubscribe endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field

from klaviyo_bridge.schemas.common import Identifier, StorefrontRequest


# --- Subscribe ---

class SubscribeRequest(StorefrontRequest):
    """
    Request body for POST /api/subscribe.

    Only `email` is required; it is validated in the route so the storefront
    gets "Email is required" rather than a schema error.
    """
    email: Optional[str] = Field(None, description="Email address to subscribe")
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    shopify_id: Identifier = Field(None, alias="shopifyId", description="Shopify customer id")
    list_id: Identifier = Field(
        None,
        alias="listId",
        description="Klaviyo list id (defaults to KLAVIYO_NEWSLETTER_LIST_ID)"
    )
    source: Optional[str] = Field(
        None,
        description="custom_source recorded on the subscription",
        examples=["Shopify Account Page", "Footer Signup"]
    )


class SubscribeData(BaseModel):
    email: str
    subscribed: bool = True


class SubscribeResponse(BaseModel):
    """Response for POST /api/subscribe."""
    success: bool = True
    message: Optional[str] = Field(None, examples=["Successfully subscribed to newsletter"])
    data: Optional[SubscribeData] = None


# --- Unsubscribe ---

class UnsubscribeRequest(StorefrontRequest):
    """Request body for POST /api/unsubscribe."""
    email: Optional[str] = Field(None, description="Email address to unsubscribe")
    list_id: Identifier = Field(
        None,
        alias="listId",
        description="Klaviyo list id (defaults to KLAVIYO_NEWSLETTER_LIST_ID)"
    )


class UnsubscribeData(BaseModel):
    email: str
    unsubscribed: bool = True


class UnsubscribeResponse(BaseModel):
    """Response for POST /api/unsubscribe."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[UnsubscribeData] = None
