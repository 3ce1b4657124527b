"""
FastAPI routers for all API endpoints.

Each module defines a router for one storefront endpoint under /api.
Routers validate input, call the service layer and map results (or
Klaviyo errors) into the response envelope.
"""
