"""
FastAPI application entry point for the storefront Klaviyo API.

This module creates the FastAPI app instance, registers all routers and maps
every error into the `{ "success": false, "error": ... }` envelope.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from klaviyo_bridge.config import settings
from klaviyo_bridge.middleware import StorefrontCORSMiddleware
from klaviyo_bridge.middleware.cors import cors_headers
from klaviyo_bridge.routes.health import router as health_router
from klaviyo_bridge.routes.lists import router as lists_router
from klaviyo_bridge.routes.preferences import router as preferences_router
from klaviyo_bridge.routes.profile import router as profile_router
from klaviyo_bridge.routes.subscribe import router as subscribe_router
from klaviyo_bridge.routes.unsubscribe import router as unsubscribe_router
from klaviyo_bridge.utils.logging import redact_emails

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    """Turn the first pydantic error into a short message for the storefront."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"

    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid JSON body"

    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query")]
    if not location and first.get("type") == "missing":
        return "Request body is required"

    field = ".".join(location)
    return f"Invalid {field}: {first.get('msg')}" if field else str(first.get("msg"))


# Create FastAPI app
app = FastAPI(
    title="Storefront Klaviyo API",
    description="Newsletter, profile and marketing preference endpoints backed by Klaviyo",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTPException (raised by routes or routing) as an error envelope."""
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        content = {"success": False, "error": "Method not allowed"}
    elif isinstance(exc.detail, dict):
        content = {"success": False, **exc.detail}
    else:
        content = {"success": False, "error": str(exc.detail)}

    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


# Missing or malformed input is a 400 for the storefront, not FastAPI's 422
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Log validation errors and answer 400 with a readable message.
    """
    logger.warning(
        f"Validation error on {request.method} {request.url.path}: {exc.errors()}"
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": _validation_message(exc)
        }
    )


# Exception handlers run in ServerErrorMiddleware, outside StorefrontCORSMiddleware,
# so the CORS headers are added here
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """
    Catch-all for errors that escaped a route's own error handling.
    """
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {redact_emails(str(exc))}",
        exc_info=True
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal server error"
        },
        headers=cors_headers(request)
    )


app.add_middleware(StorefrontCORSMiddleware)

# Register routers
app.include_router(health_router)
app.include_router(lists_router)
app.include_router(subscribe_router)
app.include_router(unsubscribe_router)
app.include_router(profile_router)
app.include_router(preferences_router)

logger.info("FastAPI app initialized successfully")
