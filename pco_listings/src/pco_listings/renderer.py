"""
HTML rendering for Planning Center listings.

Turns a JSON:API `data` array into a `<ul>` fragment. Every value coming
from the API is escaped; links are only emitted for safe URL schemes.
"""

import html
import re
from datetime import datetime
from typing import Any, Optional
from urllib.parse import urlsplit

from dateutil.parser import parse as parse_date

EMPTY_HTML = "<p>No Planning Center items found.</p>"
LOAD_ERROR_HTML = "<p>Unable to load Planning Center data.</p>"
UNSUPPORTED_TYPE_HTML = (
    "<p>Unsupported Planning Center type. Use events, sermons, or groups.</p>"
)

# Matches the common "F j, Y" site format, e.g. "April 5, 2024"
DEFAULT_DATE_FORMAT = "%B %-d, %Y"
ALLOWED_URL_SCHEMES = {"http", "https", "mailto"}

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
# Unpadded day/month; glibc-only in strftime, so expanded here
_UNPADDED_DIRECTIVE = re.compile(r"%(%|-d|-m)")


def sanitize_url(url: Any) -> str:
    """
    Make a URL safe for an href attribute.

    Returns an empty string for non-strings and for schemes outside
    ALLOWED_URL_SCHEMES (javascript:, data:, ...). Scheme-less URLs are kept.
    """
    if not isinstance(url, str):
        return ""

    cleaned = _CONTROL_CHARS.sub("", url).strip().replace(" ", "%20")
    if not cleaned:
        return ""

    try:
        scheme = urlsplit(cleaned).scheme.lower()
    except ValueError:
        return ""

    if scheme and scheme not in ALLOWED_URL_SCHEMES:
        return ""

    return html.escape(cleaned, quote=True)


def _expand_unpadded(date_format: str, value: datetime) -> str:
    def replace(match: re.Match) -> str:
        directive = match.group(1)
        if directive == "-d":
            return str(value.day)
        if directive == "-m":
            return str(value.month)
        return "%%"

    return _UNPADDED_DIRECTIVE.sub(replace, date_format)


def format_event_date(value: Any, date_format: str = DEFAULT_DATE_FORMAT) -> str:
    """
    Format an event `starts_at` timestamp.

    The timestamp's own wall-clock time is used; no time zone conversion
    happens. Besides the strftime directives, `%-d` and `%-m` give the day
    and month without zero padding. Unparseable values give an empty string.
    """
    if not isinstance(value, str) or not value.strip():
        return ""
    try:
        parsed: datetime = parse_date(value)
    except (ValueError, OverflowError):
        return ""
    return parsed.strftime(_expand_unpadded(date_format, parsed))


def _item_attributes(item: Any) -> dict:
    if isinstance(item, dict):
        attributes = item.get("attributes")
        if isinstance(attributes, dict):
            return attributes
    return {}


def render_item(
    content_type: str,
    item: Any,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """Render a single `<li>` for one API resource."""
    attributes = _item_attributes(item)

    name = attributes.get("name")
    if name is None or name == "":
        name = "Untitled"
    title = html.escape(str(name))

    href = sanitize_url(attributes.get("html_url"))
    link = f'<a href="{href}">{title}</a>' if href else title

    date = ""
    if content_type == "events" and attributes.get("starts_at") is not None:
        date = format_event_date(attributes["starts_at"], date_format)

    parts = ["<li>", link]
    if date:
        parts.append(f' <span class="pcwp-date">({html.escape(date)})</span>')
    parts.append("</li>")
    return "".join(parts)


def render_items(
    content_type: str,
    items: Optional[list],
    date_format: str = DEFAULT_DATE_FORMAT,
) -> str:
    """
    Render a listing fragment.

    Args:
        content_type: Normalized type keyword (events, sermons, groups)
        items: JSON:API resources, each with an `attributes` object
        date_format: strftime format for event dates

    Returns:
        `<ul class="pcwp-list pcwp-list-<type>">...</ul>`, or EMPTY_HTML
    """
    if not items:
        return EMPTY_HTML

    css_type = html.escape(content_type, quote=True)
    rows = "".join(render_item(content_type, item, date_format) for item in items)
    return f'<ul class="pcwp-list pcwp-list-{css_type}">{rows}</ul>'
