"""
FastAPI dependency that provides a Klaviyo client per request.

Routes declare:

    klaviyo: Annotated[KlaviyoClient, Depends(get_klaviyo_client)]

Tests swap the client through `app.dependency_overrides[get_klaviyo_client]`.
"""

from typing import AsyncIterator

from klaviyo_bridge.klaviyo.client import KlaviyoClient


async def get_klaviyo_client() -> AsyncIterator[KlaviyoClient]:
    """Yield a KlaviyoClient and close its connection pool afterwards."""
    client = KlaviyoClient()
    try:
        yield client
    finally:
        await client.aclose()
