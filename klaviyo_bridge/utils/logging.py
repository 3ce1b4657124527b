"""
Logging utilities for the storefront Klaviyo API.

Provides standardized logger configuration following privacy rules.

SECURITY RULES:
- NEVER log the Klaviyo private API key
- NEVER log full customer emails; use mask_email()
- NEVER log raw Klaviyo profile payloads (they contain PII)

Acceptable logging:
- High-level events (e.g., "Subscribing profile to list XYZ")
- Klaviyo endpoint paths and HTTP status codes
- Sanitized error messages returned by Klaviyo
"""

import logging
import re
from typing import Optional

EMAIL_IN_TEXT = re.compile(r"[^\s@\"'<>(),;:]+@[^\s@\"'<>(),;:]+")


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from klaviyo_bridge.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("High-level event occurred")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def mask_email(email: Optional[str]) -> str:
    """
    Mask an email address for log output.

    >>> mask_email("jane.doe@example.com")
    'ja***@example.com'
    """
    if not email:
        return ""
    local, sep, domain = email.partition("@")
    if not sep:
        return local[:2] + "***"
    return f"{local[:2]}***@{domain}"


def redact_emails(text: Optional[str]) -> str:
    """
    Mask every email address inside free text, e.g. a Klaviyo error detail.

    >>> redact_emails("Profile jane.doe@example.com is suppressed")
    'Profile ja***@example.com is suppressed'
    """
    if not text:
        return ""
    return EMAIL_IN_TEXT.sub(lambda match: mask_email(match.group(0)), str(text))


def mask_secret(value: Optional[str], visible_chars: int = 6) -> str:
    """Show only the first characters of a secret, e.g. 'pk_abc...'."""
    if not value:
        return ""
    return value[:visible_chars] + "..."
