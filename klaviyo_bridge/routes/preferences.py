"""
Marketing preferences API endpoints.

GET  /api/preferences?email=... | ?shopifyId=...
    Returns the current menswear/womenswear preference. Customers without a
    Klaviyo profile get the defaults with isNewProfile=true.

POST /api/preferences
    Body: { email?, shopifyId?, marketing_preference }
    Stores the preference, creating the profile when an email is given and
    none exists yet.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from klaviyo_bridge.klaviyo import KlaviyoClient, get_klaviyo_client
from klaviyo_bridge.routes.errors import bad_request, not_found, upstream_error
from klaviyo_bridge.schemas.common import ErrorResponse
from klaviyo_bridge.schemas.preferences import (
    PreferencesData,
    PreferencesResponse,
    PreferencesUpdateRequest,
)
from klaviyo_bridge.services import ProfileNotFoundError, get_preferences, save_preferences
from klaviyo_bridge.services.preference_codec import is_valid_preference
from klaviyo_bridge.utils.constants import MARKETING_PREFERENCES

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["preferences"])


@router.get(
    "/preferences",
    response_model=PreferencesResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Get marketing preferences",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def read_preferences(
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
    email: Optional[str] = Query(None),
    shopify_id: Optional[str] = Query(None, alias="shopifyId"),
) -> PreferencesResponse:
    """Return the stored preference for `email` or `shopifyId`."""
    if not email and not shopify_id:
        raise bad_request("Either email or shopifyId query parameter is required")

    try:
        preferences = await get_preferences(klaviyo, email=email, shopify_id=shopify_id)
    except Exception as e:
        raise upstream_error(logger, "Preferences lookup", e)

    return PreferencesResponse(success=True, data=PreferencesData(**preferences))


@router.post(
    "/preferences",
    response_model=PreferencesResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Update marketing preferences",
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def update_preferences(
    request: PreferencesUpdateRequest,
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
) -> PreferencesResponse:
    """
    Store a marketing preference.

    Parse/Validate Request
    - One of email / shopifyId is required
    - marketing_preference must be a known value when given

    Call Service
    - save_preferences() updates or creates the profile and reads it back
    """
    if not request.email and not request.shopify_id:
        raise bad_request("Either email or shopifyId is required")

    if request.marketing_preference and not is_valid_preference(request.marketing_preference):
        raise bad_request(
            f"Invalid marketing_preference. Must be one of: {', '.join(MARKETING_PREFERENCES)}"
        )

    try:
        preferences = await save_preferences(
            klaviyo,
            email=request.email,
            shopify_id=request.shopify_id,
            marketing_preference=request.marketing_preference,
        )
    except ProfileNotFoundError as e:
        logger.warning(f"Preferences update rejected: {e}")
        raise not_found(str(e))
    except Exception as e:
        raise upstream_error(logger, "Preferences update", e)

    return PreferencesResponse(
        success=True,
        message="Marketing preferences updated successfully",
        data=PreferencesData(**preferences) if preferences else None,
    )
