"""Klaviyo API access: HTTP client, error type and FastAPI dependency."""

from .client import KlaviyoAPIError, KlaviyoClient
from .dependencies import get_klaviyo_client

__all__ = ["KlaviyoAPIError", "KlaviyoClient", "get_klaviyo_client"]
