"""
Shortcode expansion for page content.

Supported tags:
    [planning_center type="events" limit="5"]
    [planning_center_events limit="3"]
    [planning_center_sermons]
    [planning_center_groups /]

Doubling the brackets ([[planning_center]]) prints the tag literally.
"""

import re
from typing import Optional

from .logging_conf import get_logger
from .service import ListingService

logger = get_logger(__name__)

GENERIC_TAG = "planning_center"
FIXED_TYPE_TAGS = {
    "planning_center_events": "events",
    "planning_center_sermons": "sermons",
    "planning_center_groups": "groups",
}
DEFAULT_TYPE = "events"

_TAG_RE = re.compile(
    r"\[(\[?)"
    r"(planning_center(?:_events|_sermons|_groups)?)(?![\w-])"
    r"([^\]]*?)"
    r"(/?)\]"
    r"(\]?)"
)
_ATTR_RE = re.compile(
    r"""([\w-]+)\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s'"\]]+))"""
)


def parse_attributes(text: str) -> dict[str, str]:
    """
    Parse shortcode attributes.

    Keys are lower-cased; later duplicates win. Bare words without a value
    are ignored.
    """
    attributes: dict[str, str] = {}
    for match in _ATTR_RE.finditer(text or ""):
        key = match.group(1).lower()
        value = next(
            (g for g in match.group(2, 3, 4) if g is not None),
            "",
        )
        attributes[key] = value
    return attributes


def resolve_tag(
    tag: str,
    attributes: dict[str, str],
    default_limit: int = 5,
) -> tuple[str, str]:
    """Get the (type, limit) a tag asks for, applying defaults."""
    # An explicit empty type stays empty and renders the unsupported-type message
    content_type = FIXED_TYPE_TAGS.get(tag) or attributes.get("type", DEFAULT_TYPE)
    limit = attributes.get("limit", str(default_limit))
    return content_type, limit


async def expand_shortcodes(
    content: str,
    service: ListingService,
    default_limit: Optional[int] = None,
) -> str:
    """
    Replace every Planning Center shortcode in `content` with its listing.

    Args:
        content: Page content that may contain shortcodes
        service: Renders the listings
        default_limit: Limit for tags without a `limit` attribute

    Returns:
        The content with tags expanded; text outside tags is unchanged
    """
    if default_limit is None:
        default_limit = 5

    pieces: list[str] = []
    position = 0
    expanded = 0

    for match in _TAG_RE.finditer(content):
        pieces.append(content[position:match.start()])
        position = match.end()

        opening, tag, raw_attributes, _, closing = match.groups()
        if opening and closing:
            pieces.append(match.group(0)[1:-1])
            continue

        content_type, limit = resolve_tag(tag, parse_attributes(raw_attributes), default_limit)
        rendered = await service.render_listing(content_type, limit)
        pieces.append(opening + rendered + closing)
        expanded += 1

    pieces.append(content[position:])

    if expanded:
        logger.debug("shortcodes_expanded", count=expanded)
    return "".join(pieces)
