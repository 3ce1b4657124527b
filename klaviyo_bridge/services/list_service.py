"""
Klaviyo list service.

Used by the storefront setup page to find the id to put in
KLAVIYO_NEWSLETTER_LIST_ID.
"""

import logging
from typing import Dict, List, Optional

from klaviyo_bridge.klaviyo.client import KlaviyoClient
from klaviyo_bridge.utils.constants import MAX_LIST_PAGES

logger = logging.getLogger(__name__)


async def get_lists(klaviyo: KlaviyoClient, max_pages: int = MAX_LIST_PAGES) -> List[Dict[str, Optional[str]]]:
    """
    Fetch all Klaviyo lists as {id, name} pairs.

    Follows `links.next` until Klaviyo stops returning one or max_pages
    pages have been read.

    Raises:
        KlaviyoAPIError: If Klaviyo rejects a page request
    """
    lists: List[Dict[str, Optional[str]]] = []
    endpoint: Optional[str] = "/lists/"
    pages = 0

    while endpoint and pages < max_pages:
        data = await klaviyo.get(endpoint) or {}
        pages += 1

        for item in data.get("data") or []:
            lists.append({
                "id": item.get("id"),
                "name": (item.get("attributes") or {}).get("name"),
            })

        endpoint = (data.get("links") or {}).get("next")

    if endpoint:
        logger.warning(f"Stopped listing Klaviyo lists after {pages} pages")

    logger.info(f"Fetched {len(lists)} Klaviyo lists")
    return lists
