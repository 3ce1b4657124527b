"""
Permissive CORS middleware for the storefront.

The account page runs on the Shopify storefront domain, so every response
(success, error and preflight) carries:
- Access-Control-Allow-Origin: *
- Access-Control-Allow-Methods: the methods the requested path serves, plus OPTIONS
- Access-Control-Allow-Headers: Content-Type, Authorization

OPTIONS on any path is answered directly with 200 and an empty body, whether
or not the browser sent the preflight request headers.
"""

from typing import List

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Match

ALLOW_HEADERS = "Content-Type, Authorization"
DEFAULT_METHODS = ["GET", "POST", "PATCH"]
METHOD_ORDER = ["GET", "POST", "PUT", "PATCH", "DELETE"]


def allowed_methods(request: Request) -> List[str]:
    """Methods served by the routes that match the request path, plus OPTIONS."""
    methods = set()
    for route in request.app.router.routes:
        match, _ = route.matches(request.scope)
        if match != Match.NONE:
            methods.update(getattr(route, "methods", None) or [])

    ordered = [method for method in METHOD_ORDER if method in methods]
    return (ordered or DEFAULT_METHODS) + ["OPTIONS"]


def cors_headers(request: Request) -> dict:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": ", ".join(allowed_methods(request)),
        "Access-Control-Allow-Headers": ALLOW_HEADERS,
    }


class StorefrontCORSMiddleware(BaseHTTPMiddleware):
    """
    Answers preflight requests and adds CORS headers to every response.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        headers = cors_headers(request)

        if request.method == "OPTIONS":
            return Response(status_code=200, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
