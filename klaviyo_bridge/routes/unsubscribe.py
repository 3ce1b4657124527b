"""
Newsletter unsubscribe endpoint.

POST /api/unsubscribe removes an email's subscription from the newsletter
list through a Klaviyo profile-subscription-bulk-delete-job.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from klaviyo_bridge.klaviyo import KlaviyoClient, get_klaviyo_client
from klaviyo_bridge.routes.errors import bad_request, upstream_error
from klaviyo_bridge.schemas.common import ErrorResponse
from klaviyo_bridge.schemas.subscriptions import (
    UnsubscribeData,
    UnsubscribeRequest,
    UnsubscribeResponse,
)
from klaviyo_bridge.services import ListNotConfiguredError, unsubscribe_profile
from klaviyo_bridge.utils.logging import mask_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["subscriptions"])


@router.post(
    "/unsubscribe",
    response_model=UnsubscribeResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_200_OK,
    summary="Unsubscribe an email from the newsletter",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def unsubscribe(
    request: UnsubscribeRequest,
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
) -> UnsubscribeResponse:
    """Unsubscribe `email` from `listId` or the configured newsletter list."""
    if not request.email:
        raise bad_request("Email is required")

    email = request.email.strip()

    try:
        await unsubscribe_profile(klaviyo, email=email, list_id=request.list_id)
    except ListNotConfiguredError as e:
        logger.error(f"Unsubscribe failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    except Exception as e:
        raise upstream_error(logger, "Unsubscribe", e)

    logger.info(f"Unsubscribed {mask_email(email)}")

    return UnsubscribeResponse(
        success=True,
        message="Successfully unsubscribed from newsletter",
        data=UnsubscribeData(email=email, unsubscribed=True),
    )
