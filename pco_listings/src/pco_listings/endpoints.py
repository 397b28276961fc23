"""
Maps listing type keywords to Planning Center API endpoints.
"""

import re
from typing import Optional

ENDPOINTS: dict[str, str] = {
    "events": "https://api.planningcenteronline.com/services/v2/events",
    "sermons": "https://api.planningcenteronline.com/sermons/v2/series",
    "groups": "https://api.planningcenteronline.com/groups/v2/groups",
}

_DISALLOWED_KEY_CHARS = re.compile(r"[^a-z0-9_\-]")


def normalize_type(value: Optional[str]) -> str:
    """
    Normalize a user-supplied type keyword.

    Lower-cases and drops anything outside [a-z0-9_-], so "Events",
    " events " and "ev<ents" all collapse to "events".
    """
    if value is None:
        return ""
    return _DISALLOWED_KEY_CHARS.sub("", str(value).lower())


def resolve_endpoint(content_type: Optional[str]) -> Optional[str]:
    """Get the API URL for a type keyword, or None if unsupported."""
    return ENDPOINTS.get(normalize_type(content_type))


def supported_types() -> list[str]:
    return sorted(ENDPOINTS)
