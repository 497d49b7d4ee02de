"""
oEmbed endpoints for platforms whose pages are unreliable to scrape.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Mapping, Optional
from urllib.parse import quote

from ..cards.resolve import hostname

# Hostname (without www.) -> endpoint template; {url} is the URL-encoded page URL
OEMBED_ENDPOINTS: Mapping[str, str] = MappingProxyType(
    {
        "youtube.com": "https://www.youtube.com/oembed?format=json&url={url}",
        "m.youtube.com": "https://www.youtube.com/oembed?format=json&url={url}",
        "youtu.be": "https://www.youtube.com/oembed?format=json&url={url}",
        "vimeo.com": "https://vimeo.com/api/oembed.json?url={url}",
        "tiktok.com": "https://www.tiktok.com/oembed?url={url}",
        "twitter.com": "https://publish.twitter.com/oembed?url={url}",
        "x.com": "https://publish.twitter.com/oembed?url={url}",
        "open.spotify.com": "https://open.spotify.com/oembed?url={url}",
        "soundcloud.com": "https://soundcloud.com/oembed?format=json&url={url}",
    }
)


def oembed_endpoint(url: str) -> Optional[str]:
    """
    oEmbed endpoint for ``url``, or None when the platform is not recognized.

    >>> oembed_endpoint("https://youtu.be/abc")
    'https://www.youtube.com/oembed?format=json&url=https%3A%2F%2Fyoutu.be%2Fabc'
    >>> oembed_endpoint("https://example.com/") is None
    True
    """
    template = OEMBED_ENDPOINTS.get(hostname(url).lower())
    if template is None:
        return None
    return template.format(url=quote(url, safe=""))


def is_usable_oembed(data: Any) -> bool:
    """An oEmbed document is used only when it is an object carrying a title or thumbnail."""
    if not isinstance(data, Mapping):
        return False
    return any(isinstance(data.get(key), str) and data[key].strip() for key in ("title", "thumbnail_url"))
