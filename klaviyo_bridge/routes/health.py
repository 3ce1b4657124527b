"""
Health check route for the storefront Klaviyo API.

This endpoint is PUBLIC and does not call Klaviyo. Use it after a deploy to
confirm the function is reachable and the Klaviyo environment variables are
present.
"""

from datetime import datetime, timezone

from fastapi import APIRouter

from klaviyo_bridge.config import settings
from klaviyo_bridge.schemas.health import HealthData, HealthResponse
from klaviyo_bridge.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["system"])


def _presence(value: str) -> str:
    return "✓ Set" if value else "✗ Missing"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint",
    description=(
        "Public health check endpoint. Reports whether each Klaviyo "
        "environment variable is set, never its value."
    ),
    status_code=200,
)
async def health_check() -> HealthResponse:
    """
    Public health check endpoint.

    Example response:
        {
            "success": true,
            "message": "Klaviyo API is running",
            "data": {"status": "ok", "timestamp": "...", "environment": {...}}
        }
    """
    logger.debug("Health check endpoint called")

    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    return HealthResponse(
        success=True,
        message="Klaviyo API is running",
        data=HealthData(
            status="ok",
            timestamp=timestamp,
            environment={
                "KLAVIYO_PRIVATE_API_KEY": _presence(settings.KLAVIYO_PRIVATE_API_KEY),
                "KLAVIYO_PUBLIC_API_KEY": _presence(settings.KLAVIYO_PUBLIC_API_KEY),
                "KLAVIYO_NEWSLETTER_LIST_ID": _presence(settings.KLAVIYO_NEWSLETTER_LIST_ID),
            },
        ),
    )
