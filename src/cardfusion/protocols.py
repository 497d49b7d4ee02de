"""
Core records for CardFusion.

This module defines the data structures that flow through the card pipeline:

- ExtractedMetadata: what the metadata extractor learned about one page
- NormalizedCard: one card in the canonical schema consumed by the renderer
- FusionResult: the single card produced for a batch plus its sources
- FetchError / ParseError / ExtractionResult: per-URL outcomes of a crawl

All records serialise to the camelCase JSON keys the front-end renderer maps
directly, and can be rebuilt from those dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

# ============================================================================
# Extraction records
# ============================================================================


@dataclass
class ExtractedMetadata:
    """Structured metadata for one fetched document."""

    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    site_name: Optional[str] = None
    keywords: List[str] = field(default_factory=list)
    author: Optional[str] = None
    video: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "siteName": self.site_name,
            "keywords": list(self.keywords),
            "author": self.author,
            "video": self.video,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExtractedMetadata:
        """
        Rebuild metadata from a prior extraction result.

        Tolerates the historical crawl result shapes (``cardName``/``about``
        from the first crawler, ``snippet``/``thumbnail`` from search items).
        """

        def pick(*keys: str) -> Optional[str]:
            for key in keys:
                value = data.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
            return None

        raw_keywords = data.get("keywords")
        if isinstance(raw_keywords, str):
            keywords = [k.strip() for k in raw_keywords.split(",") if k.strip()]
        elif isinstance(raw_keywords, list):
            keywords = [str(k).strip() for k in raw_keywords if k is not None and str(k).strip()]
        else:
            keywords = []

        return cls(
            url=pick("url", "link") or "",
            title=pick("title", "cardName", "name"),
            description=pick("description", "about", "snippet", "desc"),
            image=pick("image", "thumbnail", "img"),
            site_name=pick("siteName", "site_name", "source"),
            keywords=keywords[:20],
            author=pick("author"),
            video=pick("video"),
        )


@dataclass(frozen=True)
class FetchError:
    """The page (or its oEmbed document) could not be fetched."""

    status: int
    reason: str = ""

    kind = "fetch"


@dataclass(frozen=True)
class ParseError:
    """The page was fetched but could not be turned into metadata."""

    reason: str

    kind = "parse"


ExtractionError = Union[FetchError, ParseError]


@dataclass
class ExtractionResult:
    """Outcome of extracting one URL: exactly one of metadata or error is set."""

    url: str
    metadata: Optional[ExtractedMetadata] = None
    error: Optional[ExtractionError] = None

    @property
    def ok(self) -> bool:
        return self.metadata is not None and self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.metadata is not None:
            payload = self.metadata.to_dict()
            payload["url"] = self.url
            return payload

        payload = {"url": self.url, "error": "", "errorType": "unknown"}
        if isinstance(self.error, FetchError):
            payload["error"] = self.error.reason or f"Fetch {self.error.status}"
            payload["errorType"] = FetchError.kind
            payload["status"] = self.error.status
        elif isinstance(self.error, ParseError):
            payload["error"] = self.error.reason
            payload["errorType"] = ParseError.kind
        return payload


# ============================================================================
# Card records
# ============================================================================


@dataclass
class Effect:
    """One line of card effect text with its decorative icons."""

    text: str
    icons: str = ""
    emoji: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {"icons": self.icons, "emoji": self.emoji, "text": self.text}


@dataclass
class CardImage:
    image_url: str

    def to_dict(self) -> Dict[str, str]:
        return {"image_url": self.image_url}


@dataclass
class NormalizedCard:
    """A card in the canonical schema."""

    id: str
    name: str
    icon: str
    about: str
    tribute: str
    effects: List[Effect]
    rarity: str
    tags: List[str]
    card_sets: List[str]
    timestamp: str
    footer: str
    card_images: List[CardImage]
    frame_type: str
    category: str
    atk: int
    defense: int
    level: int
    tribute_count: int
    source_url: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "about": self.about,
            "tribute": self.tribute,
            "effects": [effect.to_dict() for effect in self.effects],
            "rarity": self.rarity,
            "tags": list(self.tags),
            "card_sets": list(self.card_sets),
            "timestamp": self.timestamp,
            "footer": self.footer,
            "card_images": [image.to_dict() for image in self.card_images],
            "frameType": self.frame_type,
            "category": self.category,
            "atk": self.atk,
            "def": self.defense,
            "level": self.level,
            "tribute_count": self.tribute_count,
            "sourceUrl": self.source_url,
        }


@dataclass
class FusionResult:
    """The one card a batch request produces, plus every URL it drew on."""

    card: NormalizedCard
    sources: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"card": self.card.to_dict(), "sources": list(self.sources)}
