"""
Planning Center Listings.

Fetches events, sermon series and groups from the Planning Center API
and renders them as cached HTML fragments:
- Endpoint resolution and authenticated fetching
- Short-lived caching (in-memory or SQL)
- HTML rendering and shortcode expansion
"""

from .client import PlanningCenterClient
from .service import ListingService, get_listing_service
from .shortcodes import expand_shortcodes

__version__ = "0.1.0"

__all__ = [
    "PlanningCenterClient",
    "ListingService",
    "get_listing_service",
    "expand_shortcodes",
]
