"""
Shared schema pieces: the response envelope and storefront field types.

Every endpoint answers with the same envelope:

    { "success": bool, "message"?: str, "data"?: ..., "error"?: str }

Routes are declared with `response_model_exclude_unset=True`, so fields that
were never set (e.g. `message` on a GET) are left out of the JSON.
"""

from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _coerce_identifier(value: Any) -> Any:
    """Shopify sends numeric customer ids; Klaviyo filters need strings."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value.strip() or None
    return value


# Optional identifier that accepts numbers and blank strings
Identifier = Annotated[Optional[str], BeforeValidator(_coerce_identifier)]


class StorefrontRequest(BaseModel):
    """Base for request bodies: camelCase aliases, snake_case accepted too."""

    model_config = ConfigDict(populate_by_name=True)


class ErrorResponse(BaseModel):
    """
    Error envelope returned for 400/404/405/500 responses.
    """
    success: bool = Field(False, description="Always false for errors")
    error: str = Field(..., description="Human-readable error message")
    data: Optional[Any] = Field(None, description="Present (null) on some not-found errors")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "Email is required"
            }
        }
    )
