"""
Pydantic schemas for the marketing preferences endpoints.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from klaviyo_bridge.schemas.common import Identifier, StorefrontRequest


class PreferencesUpdateRequest(StorefrontRequest):
    """
    Request body for POST /api/preferences.

    `marketing_preference` is checked in the route against
    utils.constants.MARKETING_PREFERENCES; omitting it stores no_preference.
    """
    email: Optional[str] = None
    shopify_id: Identifier = Field(None, alias="shopifyId")
    marketing_preference: Optional[str] = Field(
        None,
        examples=["menswear", "womenswear", "both", "no_preference"]
    )


class PreferencesData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    marketing_preference: str
    marketing_preference_label: str = Field(..., examples=["Men's Wear"])
    updated_at: Optional[str] = Field(None, description="ISO-8601 time of the last change")
    is_new_profile: Optional[bool] = Field(
        None,
        alias="isNewProfile",
        description="Present (true) when no Klaviyo profile exists yet"
    )


class PreferencesResponse(BaseModel):
    """Response for GET/POST /api/preferences."""
    success: bool = True
    message: Optional[str] = Field(None, examples=["Marketing preferences updated successfully"])
    data: Optional[PreferencesData] = None
