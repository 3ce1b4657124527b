"""
Pydantic schemas for API request and response validation.

All endpoints answer with the `{ success, message?, data?, error? }` envelope.
Request bodies accept the camelCase names the storefront sends.
"""
