"""HTTP middleware for the storefront Klaviyo API."""

from .cors import StorefrontCORSMiddleware

__all__ = ["StorefrontCORSMiddleware"]
