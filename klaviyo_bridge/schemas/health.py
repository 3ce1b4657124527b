"""
Health check endpoint schemas.

The health endpoint is PUBLIC and never calls Klaviyo. It reports whether the
required environment variables are present without revealing their values.
"""

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class HealthData(BaseModel):
    status: str = Field(
        default="ok",
        description="Health status of the API (always 'ok' if responding)",
        examples=["ok"]
    )
    timestamp: str = Field(..., description="ISO-8601 server time")
    environment: Dict[str, str] = Field(
        ...,
        description="'✓ Set' or '✗ Missing' per Klaviyo environment variable"
    )


class HealthResponse(BaseModel):
    """
    Response model for GET /api/health.

    Used by deployment checks after setting the Klaviyo keys.
    """
    success: bool = True
    message: Optional[str] = None
    data: Optional[HealthData] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Klaviyo API is running",
                "data": {
                    "status": "ok",
                    "timestamp": "2025-01-15T10:00:00.000Z",
                    "environment": {
                        "KLAVIYO_PRIVATE_API_KEY": "✓ Set",
                        "KLAVIYO_PUBLIC_API_KEY": "✓ Set",
                        "KLAVIYO_NEWSLETTER_LIST_ID": "✗ Missing"
                    }
                }
            }
        }
    )
