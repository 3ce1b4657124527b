"""
Klaviyo REST client.

Thin async wrapper around httpx that:
1. Sends the private API key, the pinned API revision and JSON:API headers
2. Treats 202/204 as success with no body
3. Converts every non-2xx response into KlaviyoAPIError carrying the first
   error detail (or title) Klaviyo returned

A client is created per request and closed when the request finishes.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from klaviyo_bridge.config import settings
from klaviyo_bridge.utils.logging import redact_emails

logger = logging.getLogger(__name__)

JSON_API_MEDIA_TYPE = "application/vnd.api+json"


class KlaviyoAPIError(Exception):
    """
    Raised when Klaviyo answers with a non-2xx status.

    Attributes:
        message: First error detail/title from Klaviyo (or a status fallback)
        status_code: HTTP status returned by Klaviyo
        errors: Raw JSON:API `errors` array, empty for non-JSON responses
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []


def _error_message(data: Any, status_code: int) -> str:
    errors = data.get("errors") if isinstance(data, dict) else None
    if errors:
        first = errors[0] or {}
        message = first.get("detail") or first.get("title")
        if message:
            return message
    return f"Klaviyo API error: {status_code}"


class KlaviyoClient:
    """
    Async client for https://a.klaviyo.com/api.

    Usage:
        >>> async with KlaviyoClient() as klaviyo:
        ...     data = await klaviyo.request("GET", "/lists/")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        revision: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.KLAVIYO_PRIVATE_API_KEY
        self.revision = revision or settings.KLAVIYO_API_REVISION
        base = (base_url or settings.KLAVIYO_API_BASE_URL).rstrip("/")

        self._http = httpx.AsyncClient(
            base_url=base,
            timeout=httpx.Timeout(timeout or settings.KLAVIYO_TIMEOUT_SECONDS),
            headers={
                "Authorization": f"Klaviyo-API-Key {self.api_key}",
                "Accept": JSON_API_MEDIA_TYPE,
                "Content-Type": JSON_API_MEDIA_TYPE,
                "revision": self.revision,
            },
            transport=transport,
        )

    async def __aenter__(self) -> "KlaviyoClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def raw_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """Send a request and return the httpx response without any error mapping."""
        content = json.dumps(payload) if payload is not None else None
        return await self._http.request(method, endpoint, params=params, content=content)

    async def request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Call a Klaviyo endpoint and return its decoded JSON body.

        Args:
            method: HTTP method
            endpoint: Path relative to the API base (e.g. "/profiles/") or an
                absolute URL such as a `links.next` pagination link
            params: Query parameters (encoded by httpx)
            payload: JSON:API document to send as the body

        Returns:
            Decoded JSON body, or None for 202/204 and non-JSON success responses

        Raises:
            KlaviyoAPIError: On any non-2xx response
            httpx.HTTPError: On transport failures (timeouts, DNS, TLS)
        """
        response = await self.raw_request(method, endpoint, params=params, payload=payload)

        logger.debug(f"Klaviyo {method} {response.request.url.path} -> {response.status_code}")

        if response.status_code in (202, 204):
            return None

        content_type = response.headers.get("content-type", "")
        if "application/" not in content_type:
            if not response.is_success:
                raise KlaviyoAPIError(
                    f"Klaviyo API error: {response.status_code}",
                    status_code=response.status_code,
                )
            return None

        try:
            data = response.json()
        except ValueError:
            if not response.is_success:
                raise KlaviyoAPIError(
                    f"Klaviyo API error: {response.status_code}",
                    status_code=response.status_code,
                )
            raise

        if not response.is_success:
            message = _error_message(data, response.status_code)
            logger.warning(
                f"Klaviyo {method} {response.request.url.path} failed "
                f"with {response.status_code}: {redact_emails(message)}"
            )
            raise KlaviyoAPIError(
                message,
                status_code=response.status_code,
                errors=data.get("errors", []) if isinstance(data, dict) else [],
            )

        return data

    async def get(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.request("POST", endpoint, payload=payload)

    async def patch(self, endpoint: str, payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return await self.request("PATCH", endpoint, payload=payload)
