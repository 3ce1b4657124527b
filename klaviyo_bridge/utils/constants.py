"""
Klaviyo field names and marketing-preference constants.

The storefront radio buttons send one of MARKETING_PREFERENCES. Klaviyo
flows segment on the free-text `preference` profile property, which holds a
JSON list of the tags in PREFERENCE_TAGS (e.g. '["Menswear", "Womenswear"]').
"""

# Profiles created from Shopify carry this external_id prefix
SHOPIFY_EXTERNAL_ID_PREFIX = "shopify_"

# Default custom_source for newsletter subscriptions
DEFAULT_SUBSCRIPTION_SOURCE = "Shopify Account Page"

# Profile property names
PROPERTY_SHOPIFY_CUSTOMER_ID = "shopify_customer_id"
PROPERTY_PREFERENCE = "preference"
PROPERTY_MARKETING_PREFERENCE = "marketing_preference"
PROPERTY_MARKETING_PREFERENCE_UPDATED_AT = "marketing_preference_updated_at"

# UI values, in the order they are shown on the account page
PREFERENCE_MENSWEAR = "menswear"
PREFERENCE_WOMENSWEAR = "womenswear"
PREFERENCE_BOTH = "both"
PREFERENCE_NONE = "no_preference"

MARKETING_PREFERENCES = [
    PREFERENCE_MENSWEAR,
    PREFERENCE_WOMENSWEAR,
    PREFERENCE_BOTH,
    PREFERENCE_NONE,
]

PREFERENCE_LABELS = {
    PREFERENCE_MENSWEAR: "Men's Wear",
    PREFERENCE_WOMENSWEAR: "Women's Wear",
    PREFERENCE_BOTH: "Both Men's & Women's",
    PREFERENCE_NONE: "No Preference",
}

# Tags stored in the `preference` property
TAG_MENSWEAR = "Menswear"
TAG_WOMENSWEAR = "Womenswear"

PREFERENCE_TAGS = {
    PREFERENCE_MENSWEAR: [TAG_MENSWEAR],
    PREFERENCE_WOMENSWEAR: [TAG_WOMENSWEAR],
    PREFERENCE_BOTH: [TAG_MENSWEAR, TAG_WOMENSWEAR],
    PREFERENCE_NONE: [],
}

# Email marketing consent states reported by Klaviyo
CONSENT_SUBSCRIBED = "SUBSCRIBED"
CONSENT_UNSUBSCRIBED = "UNSUBSCRIBED"
CONSENT_NEVER_SUBSCRIBED = "NEVER_SUBSCRIBED"
CONSENT_SUPPRESSED = "SUPPRESSED"

# Upper bound on /lists/ pages followed through links.next
MAX_LIST_PAGES = 10
