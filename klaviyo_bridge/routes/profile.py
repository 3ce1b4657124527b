"""
Profile API endpoints.

GET   /api/profile?email=... | ?shopifyId=...   read a profile
POST  /api/profile                              create or update a profile by email
PATCH /api/profile                              merge custom properties into a profile

Profiles are looked up by email first; Shopify customers without an email
in the request are found by external_id, then by the shopify_customer_id
property.
"""

import logging
from typing import Annotated, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from klaviyo_bridge.config import settings
from klaviyo_bridge.klaviyo import KlaviyoClient, get_klaviyo_client
from klaviyo_bridge.routes.errors import bad_request, not_found, upstream_error
from klaviyo_bridge.schemas.common import ErrorResponse
from klaviyo_bridge.schemas.profile import (
    ProfileCreateRequest,
    ProfileData,
    ProfileResponse,
    ProfileUpdateRequest,
)
from klaviyo_bridge.services import (
    create_or_update_profile,
    find_profile,
    format_profile,
    get_profile_by_email,
    refetch_profile,
    update_profile,
)
from klaviyo_bridge.services.profile_service import build_profile_filter, profile_query_params
from klaviyo_bridge.utils.logging import mask_email, mask_secret

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["profile"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _to_response(profile: Optional[dict]) -> ProfileResponse:
    formatted = format_profile(profile)
    return ProfileResponse(
        success=True,
        data=ProfileData(**formatted) if formatted else None,
    )


async def _debug_lookup(klaviyo: KlaviyoClient, email: str) -> JSONResponse:
    """
    Return the raw Klaviyo lookup for an email.

    Used while wiring up a new store to check the API key and what Klaviyo
    actually stores. Never available in production.
    """
    filter_expression = build_profile_filter("email", email)
    try:
        response = await klaviyo.raw_request(
            "GET",
            "/profiles/",
            params=profile_query_params(filter_expression),
        )
    except httpx.HTTPError as e:
        logger.error(f"Debug profile lookup failed: {type(e).__name__}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"debug": True, "error": str(e) or "Failed to reach Klaviyo API"},
        )

    try:
        raw = response.json()
    except ValueError:
        raw = response.text

    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "debug": True,
            "apiKeySet": bool(klaviyo.api_key),
            "apiKeyPrefix": mask_secret(klaviyo.api_key),
            "filterUsed": filter_expression,
            "httpStatus": response.status_code,
            "rawResponse": raw,
        },
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Get a Klaviyo profile",
    responses=ERROR_RESPONSES,
    description="""
    Retrieve a Klaviyo profile with its email subscription status and
    marketing preference.

    Identify the profile with `email` or `shopifyId`. When both are given,
    `email` is used. `debug=true` (non-production only, requires `email`)
    returns the raw Klaviyo response instead.
    """
)
async def get_profile(
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
    email: Optional[str] = Query(None),
    shopify_id: Optional[str] = Query(None, alias="shopifyId"),
    debug: Optional[str] = Query(None),
):
    """
    Get a profile.

    Parse/Validate Request
    - One of email / shopifyId is required

    Call Service
    - find_profile() runs the email or Shopify id lookup chain

    Map Output -> ResponseModel
    - format_profile() flattens consent flags and decodes the preference
    """
    if not email and not shopify_id:
        raise bad_request("email or shopifyId required")

    try:
        if debug == "true" and email and not settings.is_production():
            logger.warning(f"Debug profile lookup for {mask_email(email)}")
            return await _debug_lookup(klaviyo, email)

        profile = await find_profile(klaviyo, email=email, shopify_id=shopify_id)
    except HTTPException:
        raise
    except Exception as e:
        raise upstream_error(logger, "Profile lookup", e)

    if not profile:
        raise not_found("Profile not found", include_data=True)

    return _to_response(profile)


@router.post(
    "/profile",
    response_model=ProfileResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Create or update a Klaviyo profile",
    responses=ERROR_RESPONSES,
)
async def create_profile(
    request: ProfileCreateRequest,
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
) -> ProfileResponse:
    """
    Create a profile for `email`, or update the existing one.

    Names, the Shopify external id and `properties` are written; the profile
    is then read back so the response shows Klaviyo's stored state.
    """
    if not request.email:
        raise bad_request("Email is required")

    email = request.email.strip()

    try:
        await create_or_update_profile(
            klaviyo,
            email=email,
            first_name=request.first_name,
            last_name=request.last_name,
            shopify_id=request.shopify_id,
            properties=request.properties,
        )
        updated = await get_profile_by_email(klaviyo, email)
    except Exception as e:
        raise upstream_error(logger, "Profile create", e)

    logger.info(f"Profile saved for {mask_email(email)}")
    return _to_response(updated)


@router.patch(
    "/profile",
    response_model=ProfileResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Update Klaviyo profile properties",
    responses=ERROR_RESPONSES,
)
async def patch_profile(
    request: ProfileUpdateRequest,
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
) -> ProfileResponse:
    """
    Merge `properties` into an existing profile.

    Returns 404 when no profile matches; this endpoint never creates one.
    """
    if not request.email and not request.shopify_id:
        raise bad_request("email or shopifyId required")

    try:
        profile = await find_profile(klaviyo, email=request.email, shopify_id=request.shopify_id)
        if not profile:
            raise not_found("Profile not found")

        await update_profile(klaviyo, profile["id"], properties=request.properties)
        updated = await refetch_profile(klaviyo, profile, shopify_id=request.shopify_id)
    except HTTPException:
        raise
    except Exception as e:
        raise upstream_error(logger, "Profile update", e)

    logger.info(f"Profile {profile['id']} properties updated")
    return _to_response(updated)
