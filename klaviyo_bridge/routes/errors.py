"""
Error mapping shared by the routers.

Routes raise HTTPException with either a plain string detail (rendered as
`error`) or a dict detail (merged into the envelope). main.py renders both as
`{ "success": false, "error": ... }`.
"""

import logging

import httpx
from fastapi import HTTPException, status

from klaviyo_bridge.klaviyo.client import KlaviyoAPIError
from klaviyo_bridge.utils.logging import redact_emails


def bad_request(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def not_found(message: str, include_data: bool = False) -> HTTPException:
    detail = {"error": message, "data": None} if include_data else message
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


def upstream_error(logger: logging.Logger, operation: str, exc: Exception) -> HTTPException:
    """
    Log a failure at the route boundary and convert it into a 500.

    Klaviyo's own error message is passed through; transport failures and
    unexpected exceptions get a generic message.
    """
    if isinstance(exc, KlaviyoAPIError):
        # Klaviyo details can echo the submitted email; no traceback
        logger.error(
            f"{operation} failed: Klaviyo {exc.status_code} {redact_emails(exc.message)}"
        )
        message = exc.message
    elif isinstance(exc, httpx.HTTPError):
        logger.error(f"{operation} failed: {type(exc).__name__}: {redact_emails(str(exc))}")
        message = "Failed to reach Klaviyo API"
    else:
        logger.error(f"{operation} failed: {redact_emails(str(exc))}", exc_info=True)
        message = "Internal server error"

    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)
