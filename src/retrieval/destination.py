"""Destination - Builds and opens a maps link for a search result.

URL choice, in priority order:
    1. name + address as a maps search (lands on the place page)
    2. the export's own maps URL, upgraded to https
    3. coordinates as a maps search (pin only)
    4. name only as a maps search
"""

import webbrowser
from typing import Callable
from urllib.parse import quote

from core.types import CanonicalRecord
from observability.logger import get_logger

logger = get_logger(__name__)

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="

# Characters encodeURIComponent leaves alone, besides alphanumerics and "_.-"
_URI_COMPONENT_SAFE = "!~*'()"

UrlOpener = Callable[[str], bool]


def _encode(text: str) -> str:
    return quote(text, safe=_URI_COMPONENT_SAFE)


def _format_coordinate(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


def build_destination_url(record: CanonicalRecord) -> str:
    """Return the best maps URL for a record."""
    if record.name and record.address:
        return MAPS_SEARCH_URL + _encode(f"{record.name}, {record.address}")

    if record.source_url:
        return record.source_url.replace("http://", "https://", 1)

    if record.has_coordinates:
        lat = _format_coordinate(record.latitude)
        lng = _format_coordinate(record.longitude)
        return f"{MAPS_SEARCH_URL}{lat},{lng}"

    return MAPS_SEARCH_URL + _encode(record.name)


def open_destination(url: str, opener: UrlOpener | None = None) -> bool:
    """Open a URL in the user's browser.

    Args:
        url: URL to open.
        opener: Replacement for webbrowser.open, mainly for tests.

    Returns:
        True if the opener reported success. Failures are logged, not raised.
    """
    open_url = opener or webbrowser.open
    logger.info(f"Opening destination: {url}")
    try:
        opened = bool(open_url(url))
    except Exception as e:
        logger.warning(f"Failed to open destination {url}: {e}")
        return False

    if not opened:
        logger.warning(f"No browser available to open {url}")
    return opened
