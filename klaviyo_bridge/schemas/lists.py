"""
Pydantic schemas for GET /api/lists.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class KlaviyoList(BaseModel):
    id: Optional[str] = Field(None, description="Klaviyo list id")
    name: Optional[str] = None


class ListsData(BaseModel):
    lists: List[KlaviyoList]
    configured_list_id: Optional[str] = Field(
        None,
        description="Current KLAVIYO_NEWSLETTER_LIST_ID, to compare against `lists`"
    )


class ListsResponse(BaseModel):
    success: bool = True
    data: Optional[ListsData] = None
