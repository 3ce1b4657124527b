"""
Newsletter subscribe endpoint.

POST /api/subscribe adds an email to the newsletter list through a Klaviyo
profile-subscription-bulk-create-job. Klaviyo processes the job
asynchronously; a 200 here means the job was accepted.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from klaviyo_bridge.klaviyo import KlaviyoClient, get_klaviyo_client
from klaviyo_bridge.routes.errors import bad_request, upstream_error
from klaviyo_bridge.schemas.common import ErrorResponse
from klaviyo_bridge.schemas.subscriptions import SubscribeData, SubscribeRequest, SubscribeResponse
from klaviyo_bridge.services import is_valid_email, subscribe_profile
from klaviyo_bridge.utils.logging import mask_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["subscriptions"])


@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Subscribe an email to the newsletter",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    description="""
    Subscribe an email to the Klaviyo newsletter list.

    This endpoint:
    - Requires a syntactically valid `email`
    - Uses `listId` or KLAVIYO_NEWSLETTER_LIST_ID as the target list
    - Records `source` as the subscription's custom_source
    - Stores `shopifyId` as the shopify_customer_id profile property
    """
)
async def subscribe(
    request: SubscribeRequest,
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
) -> SubscribeResponse:
    """
    Subscribe an email to the newsletter list.

    Parse/Validate Request
    - `email` must be present and look like an address

    Call Service
    - subscribe_profile() submits the bulk-create job

    Map Output -> ResponseModel
    - Echo the email with subscribed=True
    """
    if not request.email:
        raise bad_request("Email is required")

    email = request.email.strip()
    if not is_valid_email(email):
        raise bad_request("Invalid email format")

    try:
        await subscribe_profile(
            klaviyo,
            email=email,
            first_name=request.first_name,
            last_name=request.last_name,
            shopify_id=request.shopify_id,
            list_id=request.list_id,
            source=request.source,
        )
    except Exception as e:
        raise upstream_error(logger, "Subscribe", e)

    logger.info(f"Subscribed {mask_email(email)}")

    return SubscribeResponse(
        success=True,
        message="Successfully subscribed to newsletter",
        data=SubscribeData(email=email, subscribed=True),
    )
