"""
Configuration module for the storefront Klaviyo API.

Loads environment variables and validates required settings.
"""
import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Klaviyo credentials
    # The private key authenticates every server-side call; the public key is
    # only reported by the health check (storefront JS uses it directly).
    KLAVIYO_PRIVATE_API_KEY: str = os.getenv("KLAVIYO_PRIVATE_API_KEY", "")
    KLAVIYO_PUBLIC_API_KEY: str = os.getenv("KLAVIYO_PUBLIC_API_KEY", "")

    # Default newsletter list used by subscribe/unsubscribe
    KLAVIYO_NEWSLETTER_LIST_ID: str = os.getenv("KLAVIYO_NEWSLETTER_LIST_ID", "")

    # Klaviyo API transport
    KLAVIYO_API_BASE_URL: str = os.getenv("KLAVIYO_API_BASE_URL", "https://a.klaviyo.com/api")
    KLAVIYO_API_REVISION: str = os.getenv("KLAVIYO_API_REVISION", "2025-01-15")
    KLAVIYO_TIMEOUT_SECONDS: float = float(os.getenv("KLAVIYO_TIMEOUT_SECONDS", "10"))

    # Application Settings
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """
        Validate that all required settings are configured.

        Raises:
            ValueError: If any required setting is missing.
        """
        required_settings = {
            "KLAVIYO_PRIVATE_API_KEY": cls.KLAVIYO_PRIVATE_API_KEY,
        }

        missing = [key for key, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required environment variables: {', '.join(missing)}. "
                "Please check your .env file."
            )

    @classmethod
    def is_production(cls) -> bool:
        """Check if running in production environment."""
        return cls.ENVIRONMENT.lower() == "production"

    @classmethod
    def is_development(cls) -> bool:
        """Check if running in development environment."""
        return cls.ENVIRONMENT.lower() == "development"


# Create a singleton instance
settings = Settings()

# Validate settings on module import (will fail fast if misconfigured)
# Skip validation during tests or when importing for introspection
if os.getenv("VALIDATE_CONFIG", "true").lower() == "true":
    try:
        settings.validate()
    except ValueError as e:
        # In development, warn but don't crash
        if settings.is_development():
            print(f"⚠️  Warning: {e}")
            print("   Klaviyo calls will fail until you configure your .env file.")
        else:
            raise
