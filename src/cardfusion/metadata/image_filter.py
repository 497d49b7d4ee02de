"""
Hero image filtering.

Decides whether a candidate image URL is worth showing on a card: it must be
a real http(s) or inline image, must not come from an ad/analytics host and
must not be a tracking pixel. Also holds the trusted fallbacks used when a
page offers nothing acceptable.
"""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple
from urllib.parse import parse_qs, urlparse

logger = logging.getLogger(__name__)

# Substrings of ad, analytics and tag-manager hosts (matched against host + path)
TRACKER_PATTERNS: Tuple[str, ...] = (
    "doubleclick.net",
    "googletagmanager",
    "google-analytics",
    "googlesyndication",
    "googleadservices",
    "stats.",
    "segment.io",
    "mixpanel",
    "adservice.",
    "scorecardresearch",
    "quantserve",
    "adnxs",
    "criteo",
    "taboola",
    "outbrain",
    "bat.bing.com",
    "facebook.com/tr",
    "analytics.",
)

PIXEL_FILENAME = re.compile(r"(pixel|spacer|transparent)", re.IGNORECASE)
PIXEL_QUERY_KEYS: Tuple[str, ...] = ("width", "height", "w", "h")
MAX_PIXEL_DIMENSION = 2

_DOTTED_HOST = re.compile(r"\.[a-z0-9-]{2,}$", re.IGNORECASE)
_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")

_ICON_CDN = "https://cdn.simpleicons.org/{slug}"

# Hostname (without www.) -> brand icon
BRAND_ICONS: Mapping[str, str] = MappingProxyType(
    {
        "youtube.com": _ICON_CDN.format(slug="youtube"),
        "youtu.be": _ICON_CDN.format(slug="youtube"),
        "m.youtube.com": _ICON_CDN.format(slug="youtube"),
        "instagram.com": _ICON_CDN.format(slug="instagram"),
        "tiktok.com": _ICON_CDN.format(slug="tiktok"),
        "x.com": _ICON_CDN.format(slug="x"),
        "twitter.com": _ICON_CDN.format(slug="x"),
        "facebook.com": _ICON_CDN.format(slug="facebook"),
        "linkedin.com": _ICON_CDN.format(slug="linkedin"),
        "reddit.com": _ICON_CDN.format(slug="reddit"),
        "github.com": _ICON_CDN.format(slug="github"),
        "twitch.tv": _ICON_CDN.format(slug="twitch"),
        "open.spotify.com": _ICON_CDN.format(slug="spotify"),
        "spotify.com": _ICON_CDN.format(slug="spotify"),
        "soundcloud.com": _ICON_CDN.format(slug="soundcloud"),
        "vimeo.com": _ICON_CDN.format(slug="vimeo"),
        "pinterest.com": _ICON_CDN.format(slug="pinterest"),
        "threads.net": _ICON_CDN.format(slug="threads"),
        "discord.com": _ICON_CDN.format(slug="discord"),
    }
)


def parse_dimension(value: Any) -> Optional[float]:
    """Leading number of an attribute value (``"300"``, ``"300px"``); None when absent."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_NUMBER.match(str(value))
    return float(match.group(1)) if match else None


def is_tracker(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return True
    haystack = ((parsed.hostname or "") + parsed.path).lower()
    return any(pattern in haystack for pattern in TRACKER_PATTERNS)


def is_tracking_pixel(url: str, width: Any = None, height: Any = None) -> bool:
    """Tiny declared size, a pixel-ish filename or a 1x1 size query parameter."""
    for dimension in (parse_dimension(width), parse_dimension(height)):
        if dimension is not None and dimension <= MAX_PIXEL_DIMENSION:
            return True

    if url.lower().startswith("data:"):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    filename = parsed.path.rsplit("/", 1)[-1]
    if PIXEL_FILENAME.search(filename):
        return True

    query = parse_qs(parsed.query)
    return any(value == "1" for key in PIXEL_QUERY_KEYS for value in query.get(key, []))


def is_acceptable_image(url: Optional[str], width: Any = None, height: Any = None) -> bool:
    """
    Whether ``url`` (already absolute) may be used as a card image.

    Args:
        url: Candidate image URL
        width: Declared width, if the document provides one
        height: Declared height, if the document provides one

    Returns:
        True when the scheme, host, tracker and pixel checks all pass
    """
    if not url:
        return False
    url = url.strip()
    lowered = url.lower()

    if lowered.startswith("data:"):
        return lowered.startswith("data:image/") and not is_tracking_pixel(url, width, height)

    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme.lower() not in ("http", "https"):
        return False
    if not parsed.hostname or not _DOTTED_HOST.search(parsed.hostname):
        return False
    if is_tracker(url):
        logger.debug("Rejected tracker image %s", url)
        return False
    if is_tracking_pixel(url, width, height):
        logger.debug("Rejected tracking pixel %s", url)
        return False
    return True


def brand_icon(host: str) -> Optional[str]:
    """Brand icon for a hostname (``www.`` already stripped), checking parent domains too."""
    host = (host or "").lower()
    while host:
        icon = BRAND_ICONS.get(host)
        if icon:
            return icon
        if "." not in host:
            break
        host = host.split(".", 1)[1]
    return None


def favicon_url(host: str, template: str) -> Optional[str]:
    if not host or "." not in host:
        return None
    return template.format(host=host)
