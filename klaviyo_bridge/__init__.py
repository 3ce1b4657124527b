"""Storefront Klaviyo API: serverless endpoints proxying newsletter and profile operations to Klaviyo."""
