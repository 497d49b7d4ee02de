"""
Main Metadata Extractor - page and oEmbed metadata for card building

Resolves the handful of fields a card needs (title, description, hero image,
site name, keywords, author, video) from a fetched HTML document, or from an
oEmbed response for platforms that publish one.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, List, Mapping, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from ..cards.resolve import absolutize, hostname, unique_casefold
from ..config.config import CardConfig
from ..protocols import ExtractedMetadata
from .image_filter import brand_icon, favicon_url, is_acceptable_image, parse_dimension
from .structured_data_parser import StructuredDataParser, StructuredDataResult, collapse_whitespace

logger = logging.getLogger(__name__)

MAX_KEYWORDS = 20
MAX_TITLE_KEYWORDS = 10
MIN_PARAGRAPH_CHARS = 80
MIN_HEADING_CHARS = 40

BOILERPLATE_PATTERN = re.compile(r"cookie|consent|privacy|subscribe|newsletter|sign up|advert|\bads?\b", re.IGNORECASE)
TITLE_TOKEN_PATTERN = re.compile(r"[^\W_]+(?:['’][^\W_]+)*", re.UNICODE)

TITLE_KEYS: Tuple[str, ...] = ("og:title", "twitter:title")
DESCRIPTION_KEYS: Tuple[str, ...] = ("description", "og:description", "twitter:description")
# Each hero image key paired with the meta prefix its declared width and height live under.
META_IMAGE_KEYS: Tuple[Tuple[str, str], ...] = (
    ("og:image", "og:image"),
    ("og:image:secure_url", "og:image"),
    ("twitter:image", "twitter:image"),
    ("twitter:image:src", "twitter:image"),
)
AUTHOR_KEYS: Tuple[str, ...] = ("author", "og:profile:username", "twitter:creator", "twitter:site")
VIDEO_KEYS: Tuple[str, ...] = ("og:video", "og:video:url", "og:video:secure_url", "twitter:player")
IMG_SOURCE_ATTRIBUTES: Tuple[str, ...] = ("src", "data-src", "data-lazy-src", "data-original")


def handle_from_social_title(og_title: Optional[str]) -> Optional[str]:
    """
    Recover an account name from Instagram / TikTok style titles.

    >>> handle_from_social_title("@spz.drops • Instagram photos and videos")
    '@spz.drops'
    >>> handle_from_social_title('Jessica on Instagram: "new drop"')
    'Jessica'
    """
    title = (og_title or "").strip()
    if not title:
        return None
    if title.startswith("@"):
        return title.split()[0]
    for marker in (" on Instagram:", " on TikTok:"):
        if marker in title:
            return title.split(marker)[0].strip() or None
    if "shared a post" in title:
        return title.replace("shared a post", "").strip() or None
    return None


def split_keywords(raw: Optional[str], limit: int = MAX_KEYWORDS) -> List[str]:
    """
    Split a ``keywords`` meta value.

    >>> split_keywords("a, a, B , ")
    ['a', 'B']
    """
    if not raw:
        return []
    return unique_casefold((part.strip() for part in raw.split(",")), limit)


def title_keywords(title: Optional[str], limit: int = MAX_TITLE_KEYWORDS) -> List[str]:
    tokens = [token for token in TITLE_TOKEN_PATTERN.findall(title or "") if len(token) > 3]
    return unique_casefold(tokens, limit)


class MetadataExtractor:
    """
    Card-oriented metadata extractor.

    Each field is resolved through an ordered chain of document signals,
    the first usable value winning. Extraction is tolerant of malformed
    markup; anything that does raise is reported by the caller as a parse
    failure for that URL only.
    """

    def __init__(self, config: Optional[CardConfig] = None) -> None:
        self.config = config or CardConfig()
        self.structured_parser = StructuredDataParser()

    def extract(self, html: str, url: str) -> ExtractedMetadata:
        """
        Extract card metadata from an HTML document.

        Args:
            html: Document body
            url: Final URL of the document, used to resolve relative links

        Returns:
            ExtractedMetadata; fields the page does not provide are None/empty
        """
        soup = self.structured_parser.make_soup(html)
        head = self.structured_parser.parse(soup)
        host = hostname(url)

        title = head.first(*TITLE_KEYS) or head.title
        keywords = split_keywords(head.meta.get("keywords")) or title_keywords(title)

        metadata = ExtractedMetadata(
            url=url,
            title=title or None,
            description=head.first(*DESCRIPTION_KEYS) or self._body_description(soup),
            image=self._hero_image(soup, head, url, host),
            site_name=head.first("og:site_name") or host or None,
            keywords=keywords,
            author=head.first(*AUTHOR_KEYS) or handle_from_social_title(head.meta.get("og:title")),
            video=self._first_url(head, VIDEO_KEYS, url),
        )
        logger.debug("Extracted metadata for %s: title=%r image=%r", url, metadata.title, metadata.image)
        return metadata

    def from_oembed(self, url: str, data: Mapping[str, Any]) -> ExtractedMetadata:
        """
        Map an oEmbed response to metadata.

        Args:
            url: The page URL the oEmbed document describes
            data: Decoded oEmbed JSON object

        Returns:
            ExtractedMetadata built solely from the oEmbed document
        """

        def field(key: str) -> Optional[str]:
            value = data.get(key)
            if isinstance(value, str) and value.strip():
                return collapse_whitespace(value)
            return None

        host = hostname(url)
        title = field("title")
        author = field("author_name")

        image = None
        thumbnail = absolutize(url, field("thumbnail_url"))
        if thumbnail and is_acceptable_image(thumbnail, data.get("thumbnail_width"), data.get("thumbnail_height")):
            image = thumbnail
        image = image or brand_icon(host) or self._fallback_image(host)

        return ExtractedMetadata(
            url=url,
            title=title,
            description=f"{title} by {author}" if title and author else None,
            image=image,
            site_name=field("provider_name") or host or None,
            keywords=title_keywords(title),
            author=author,
            video=None,
        )

    # --- Field chains ---

    def _body_description(self, soup: BeautifulSoup) -> Optional[str]:
        for selector, minimum in (("p", MIN_PARAGRAPH_CHARS), (["h1", "h2", "h3"], MIN_HEADING_CHARS)):
            for element in soup.find_all(selector):
                text = collapse_whitespace(element.get_text(" "))
                if len(text) >= minimum and not BOILERPLATE_PATTERN.search(text):
                    return text
        return None

    def _hero_image(self, soup: BeautifulSoup, head: StructuredDataResult, url: str, host: str) -> Optional[str]:
        candidates: List[Callable[[], Optional[str]]] = [
            *(self._meta_image(head, key, size_prefix, url) for key, size_prefix in META_IMAGE_KEYS),
            lambda: self._accepted(absolutize(url, head.links.get("image_src"))),
            lambda: self._largest_img(soup, url),
            lambda: brand_icon(host),
            lambda: self._fallback_image(host),
        ]
        for candidate in candidates:
            image = candidate()
            if image:
                return image
        return None

    def _meta_image(
        self, head: StructuredDataResult, key: str, size_prefix: str, url: str
    ) -> Callable[[], Optional[str]]:
        width = head.meta.get(f"{size_prefix}:width")
        height = head.meta.get(f"{size_prefix}:height")
        return lambda: self._accepted(absolutize(url, head.meta.get(key)), width, height)

    @staticmethod
    def _accepted(candidate: Optional[str], width: Any = None, height: Any = None) -> Optional[str]:
        return candidate if candidate and is_acceptable_image(candidate, width, height) else None

    def _largest_img(self, soup: BeautifulSoup, url: str) -> Optional[str]:
        best: Optional[str] = None
        best_area = -1.0
        for img in soup.find_all("img"):
            if not isinstance(img, Tag):
                continue
            source = next(
                (str(img.get(attr)).strip() for attr in IMG_SOURCE_ATTRIBUTES if str(img.get(attr) or "").strip()),
                None,
            )
            if not source:
                continue
            width, height = img.get("width"), img.get("height")
            candidate = self._accepted(absolutize(url, source), width, height)
            if not candidate:
                continue
            w, h = parse_dimension(width), parse_dimension(height)
            area = w * h if w is not None and h is not None else 0.0
            # Strictly greater keeps the earliest image on ties
            if area > best_area:
                best, best_area = candidate, area
        return best

    def _fallback_image(self, host: str) -> str:
        return favicon_url(host, self.config.favicon_template) or self.config.placeholder_image

    @staticmethod
    def _first_url(head: StructuredDataResult, keys: Tuple[str, ...], url: str) -> Optional[str]:
        value = head.first(*keys)
        return absolutize(url, value) if value else None
