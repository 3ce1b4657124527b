"""
Klaviyo lists endpoint.

GET /api/lists shows every Klaviyo list next to the configured newsletter
list id, so a wrong KLAVIYO_NEWSLETTER_LIST_ID is easy to spot.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from klaviyo_bridge.config import settings
from klaviyo_bridge.klaviyo import KlaviyoClient, get_klaviyo_client
from klaviyo_bridge.routes.errors import upstream_error
from klaviyo_bridge.schemas.common import ErrorResponse
from klaviyo_bridge.schemas.lists import KlaviyoList, ListsData, ListsResponse
from klaviyo_bridge.services import get_lists

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["lists"])


@router.get(
    "/lists",
    response_model=ListsResponse,
    status_code=status.HTTP_200_OK,
    summary="List Klaviyo lists",
    responses={500: {"model": ErrorResponse}},
)
async def list_lists(
    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)],
) -> ListsResponse:
    """Return all Klaviyo lists and the configured newsletter list id."""
    try:
        lists = await get_lists(klaviyo)
    except Exception as e:
        raise upstream_error(logger, "List lookup", e)

    return ListsResponse(
        success=True,
        data=ListsData(
            lists=[KlaviyoList(**item) for item in lists],
            configured_list_id=settings.KLAVIYO_NEWSLETTER_LIST_ID or None,
        ),
    )
