"""
Marketing preference encoding.

The account page works with one radio value (menswear / womenswear / both /
no_preference). Klaviyo stores the choice in the free-text `preference`
profile property as a JSON list of tags, which segments match on:

    menswear       -> ["Menswear"]
    womenswear     -> ["Womenswear"]
    both           -> ["Menswear", "Womenswear"]
    no_preference  -> []

Parsing only looks for the quoted tags, so values written by hand or by other
integrations (e.g. 'Interests: "Menswear"') are still understood.
"""

import json
from typing import Any, Optional

from klaviyo_bridge.utils.constants import (
    MARKETING_PREFERENCES,
    PREFERENCE_BOTH,
    PREFERENCE_LABELS,
    PREFERENCE_MENSWEAR,
    PREFERENCE_NONE,
    PREFERENCE_TAGS,
    PREFERENCE_WOMENSWEAR,
    TAG_MENSWEAR,
    TAG_WOMENSWEAR,
)


def is_valid_preference(value: Any) -> bool:
    return value in MARKETING_PREFERENCES


def encode_preference(value: Optional[str]) -> str:
    """
    Encode a UI preference into the stored `preference` string.

    Raises:
        ValueError: If value is not one of MARKETING_PREFERENCES
    """
    value = value or PREFERENCE_NONE
    if not is_valid_preference(value):
        raise ValueError(
            f"Invalid marketing_preference. Must be one of: {', '.join(MARKETING_PREFERENCES)}"
        )
    return json.dumps(PREFERENCE_TAGS[value])


def parse_preference(raw: Optional[Any], fallback: Optional[Any] = None) -> str:
    """
    Decode a stored `preference` value back into the UI preference.

    Args:
        raw: Stored `preference` property (string or list)
        fallback: Stored `marketing_preference` enum, used when raw is empty

    Returns:
        One of MARKETING_PREFERENCES (no_preference when nothing matches)
    """
    if not raw:
        return fallback if is_valid_preference(fallback) else PREFERENCE_NONE

    if isinstance(raw, (list, tuple)):
        text = json.dumps(list(raw))
    else:
        text = str(raw)

    has_mens = f'"{TAG_MENSWEAR}"' in text
    has_womens = f'"{TAG_WOMENSWEAR}"' in text

    if has_mens and has_womens:
        return PREFERENCE_BOTH
    if has_mens:
        return PREFERENCE_MENSWEAR
    if has_womens:
        return PREFERENCE_WOMENSWEAR
    return PREFERENCE_NONE


def get_preference_label(value: Optional[str]) -> str:
    """Human-readable label for a UI preference."""
    return PREFERENCE_LABELS.get(value or PREFERENCE_NONE, PREFERENCE_LABELS[PREFERENCE_NONE])
