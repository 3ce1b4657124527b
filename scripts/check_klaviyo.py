#!/usr/bin/env python3
"""
Klaviyo Connection Check Script

This script calls the real Klaviyo API with the configured private key,
without deploying the functions or going through the storefront.

It lists the account's Klaviyo lists (so you can copy the right
KLAVIYO_NEWSLETTER_LIST_ID) and, optionally, looks a profile up the same way
the /api/profile and /api/preferences endpoints do.

Usage:
    python scripts/check_klaviyo.py
    python scripts/check_klaviyo.py --email jane@example.com
    python scripts/check_klaviyo.py --shopify-id 7012345678901
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Settings are only read here, not required at import
os.environ.setdefault("VALIDATE_CONFIG", "false")

from klaviyo_bridge.config import settings
from klaviyo_bridge.klaviyo import KlaviyoAPIError, KlaviyoClient
from klaviyo_bridge.services import find_profile, format_profile, get_lists
from klaviyo_bridge.services.preference_service import format_preferences


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def print_lists(lists: list) -> None:
    """Print Klaviyo lists, marking the configured newsletter list."""
    configured = settings.KLAVIYO_NEWSLETTER_LIST_ID

    print("\n" + "=" * 60)
    print(f"KLAVIYO LISTS ({len(lists)})")
    print("=" * 60)

    for item in lists:
        marker = "  <- KLAVIYO_NEWSLETTER_LIST_ID" if item["id"] == configured else ""
        print(f"  {item['id']:<12} {item['name']}{marker}")

    if configured and not any(item["id"] == configured for item in lists):
        print(f"\n⚠️  Configured list id {configured} was not found in this account")


def print_profile(profile: Optional[dict]) -> None:
    """Print the formatted profile and preferences."""
    print("\n" + "=" * 60)
    print("PROFILE")
    print("=" * 60)

    if not profile:
        print("\n❌ No profile found\n")
        return

    formatted = format_profile(profile)
    preferences = format_preferences(profile)
    email_status = formatted["subscription"]["email"]

    print(f"  Id:          {formatted['id']}")
    print(f"  Email:       {formatted['email']}")
    print(f"  Name:        {formatted['first_name'] or ''} {formatted['last_name'] or ''}")
    print(f"  Consent:     {email_status['consent']}")
    print(f"  Can sub:     {'Yes' if email_status['can_subscribe'] else 'No'}")
    print(f"  Preference:  {preferences['marketing_preference_label']}")
    print(f"  Updated at:  {preferences['updated_at']}")
    print()


async def run_check(email: Optional[str] = None, shopify_id: Optional[str] = None) -> None:
    """List Klaviyo lists and optionally look up one profile."""
    if not settings.KLAVIYO_PRIVATE_API_KEY:
        print("\n⚠️  ERROR: KLAVIYO_PRIVATE_API_KEY environment variable not set!")
        print("   Please set it in your .env file or export it:")
        print("   export KLAVIYO_PRIVATE_API_KEY=pk_...")
        sys.exit(1)

    async with KlaviyoClient() as klaviyo:
        try:
            print_lists(await get_lists(klaviyo))

            if email or shopify_id:
                profile = await find_profile(klaviyo, email=email, shopify_id=shopify_id)
                print_profile(profile)
        except KlaviyoAPIError as e:
            print(f"\n❌ Klaviyo rejected the request ({e.status_code}): {e.message}\n")
            sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Check the Klaviyo API key, lists and profile lookups"
    )
    parser.add_argument(
        "--email", "-e",
        type=str,
        help="Look up the profile with this email"
    )
    parser.add_argument(
        "--shopify-id", "-s",
        type=str,
        help="Look up the profile for this Shopify customer id"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    asyncio.run(run_check(email=args.email, shopify_id=args.shopify_id))


if __name__ == "__main__":
    main()
